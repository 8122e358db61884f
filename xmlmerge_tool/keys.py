from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Callable


NameSelector = Callable[[ET.Element], str]


def strip_ns(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def tag_key(el: ET.Element) -> str:
    """Sort by local element name."""
    return strip_ns(str(el.tag))


def attribute_key(name: str) -> NameSelector:
    """Sort by the value of attribute `name` (missing sorts as "")."""

    def _key(el: ET.Element) -> str:
        return el.attrib.get(name, "")

    _key.__name__ = f"attribute_key_{name}"
    return _key


def parse_key_spec(spec: str) -> NameSelector:
    """Turn a CLI key spec into a selector.

    "tag"   -> local element name
    "@attr" -> value of attribute `attr`
    """
    s = (spec or "").strip()
    if s == "tag":
        return tag_key
    if s.startswith("@") and len(s) > 1:
        return attribute_key(s[1:])
    raise ValueError(f"Unsupported key spec {spec!r} (expected 'tag' or '@attribute')")
