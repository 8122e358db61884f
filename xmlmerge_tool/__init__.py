"""Sorted, formatting-preserving merges of XML configuration elements."""

from .merger import merge_elements
from .nodes import Container, Element, Trivia
from .xmltree import merge_xml_elements

__version__ = "0.3.0"

__all__ = [
    "Container",
    "Element",
    "Trivia",
    "merge_elements",
    "merge_xml_elements",
    "__version__",
]
