from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Iterable, List

from .keys import NameSelector
from .merger import merge_elements
from .nodes import COMMENT, PI, Container, Element, Node, Trivia


class XmlElement(Element):
    """An ElementTree element as a mergeable node."""

    content: ET.Element

    def deep_equals(self, other: Element) -> bool:
        if not isinstance(other, XmlElement):
            return False
        return xml_equal(self.content, other.content)


def xml_equal(a: ET.Element, b: ET.Element) -> bool:
    """Structural equality of two subtrees.

    Compares tags, attributes, text and children in order (comments and PIs
    included, along with each child's tail). The tails of `a` and `b`
    themselves are ignored; missing text equals empty text.
    """
    if a.tag != b.tag:
        return False
    if dict(a.attrib) != dict(b.attrib):
        return False
    if (a.text or "") != (b.text or ""):
        return False
    if len(a) != len(b):
        return False
    for ca, cb in zip(a, b):
        if (ca.tail or "") != (cb.tail or ""):
            return False
        if not xml_equal(ca, cb):
            return False
    return True


def _node_for(child: ET.Element) -> Node:
    if child.tag is ET.Comment:
        return Trivia(COMMENT, child.text or "")
    if child.tag is ET.ProcessingInstruction:
        return Trivia(PI, child.text or "")
    return XmlElement(child)


def _xml_for(node: Node) -> ET.Element:
    if isinstance(node, Trivia):
        if node.kind == COMMENT:
            return ET.Comment(node.text)
        if node.kind == PI:
            return ET.ProcessingInstruction(node.text)
        raise TypeError(f"text trivia has no element form: {node!r}")
    if not isinstance(node.content, ET.Element):
        raise TypeError(f"not an XML element: {node.content!r}")
    return node.content


def container_from_xml(parent: ET.Element) -> Container:
    """View the children of `parent` as a node list.

    `parent.text` and every child's tail become text trivia.
    """
    nodes: List[Node] = []
    if parent.text:
        nodes.append(Trivia.from_text(parent.text))
    for child in parent:
        nodes.append(_node_for(child))
        if child.tail:
            nodes.append(Trivia.from_text(child.tail))
    return Container(nodes)


def apply_container(container: Container, parent: ET.Element) -> None:
    """Rewrite the content of `parent` from `container`.

    The tag, attributes and tail of `parent` are left alone. Adjacent text
    trivia is joined into a single text/tail string.
    """
    head: List[str] = []
    children: List[ET.Element] = []
    tails: List[List[str]] = []
    for node in container:
        if isinstance(node, Trivia) and node.is_text:
            (tails[-1] if children else head).append(node.text)
            continue
        children.append(_xml_for(node))
        tails.append([])

    parent.text = "".join(head) or None
    del parent[:]
    for child, tail in zip(children, tails):
        child.tail = "".join(tail) or None
        parent.append(child)


def merge_xml_elements(parent: ET.Element, new_elements: Iterable[ET.Element], key_selector: NameSelector) -> bool:
    """Merge `new_elements` into the children of `parent`, sorted by `key_selector`.

    Same contract as merge_elements(); comments and indentation between the
    existing children are kept. When something changed the new elements are
    moved into `parent`; otherwise `parent` is left exactly as it was.
    """
    container = container_from_xml(parent)
    changed = merge_elements(
        container,
        [XmlElement(e) for e in new_elements],
        lambda node: key_selector(node.content),
    )
    if changed:
        apply_container(container, parent)
    return changed
