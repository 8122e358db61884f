from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, List, Optional

from xmlmerge_tool.nodes import COMMENT, Container, Element, Trivia


def el(key: str, value: Any = None) -> Element:
    """A plain element whose content is (key, value)."""
    return Element((key, value))


def ws(text: str = "\n  ") -> Trivia:
    return Trivia.from_text(text)


def comment(text: str) -> Trivia:
    return Trivia(COMMENT, text)


def key_of(e: Element) -> str:
    return e.content[0]


def keys(container: Container) -> List[str]:
    return [key_of(e) for e in container.elements()]


def render(container: Container) -> str:
    """Compact text form: <key> / <key=value>, #comment, raw whitespace."""
    out: List[str] = []
    for n in container:
        if isinstance(n, Element):
            k, v = n.content
            out.append(f"<{k}>" if v is None else f"<{k}={v}>")
        elif n.kind == COMMENT:
            out.append(f"#{n.text}")
        else:
            out.append(n.text)
    return "".join(out)


def indented(*nodes: Any, indent: str = "\n  ", closing: str = "\n") -> Container:
    """Container with each node on its own indented line."""
    out: List[Any] = []
    for n in nodes:
        out.append(ws(indent))
        out.append(n)
    if nodes:
        out.append(ws(closing))
    return Container(out)


def xml(text: str) -> ET.Element:
    """Parse keeping comments and PIs, like the document loader does."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    return ET.fromstring(text, parser=parser)


def xml_str(el_: ET.Element) -> str:
    return ET.tostring(el_, encoding="unicode")


def write_xml_file(path: Path, body: str, *, declaration: Optional[str] = '<?xml version="1.0" encoding="utf-8"?>') -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = (declaration + "\n" if declaration else "") + body
    path.write_text(text, encoding="utf-8")
    return path
