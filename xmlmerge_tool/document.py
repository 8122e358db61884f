from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from .constants import DEFAULT_CONTAINER, DEFAULT_KEY_SPEC
from .keys import NameSelector, parse_key_spec
from .xmltree import merge_xml_elements


_LOG = logging.getLogger("xmlmerge_tool.document")


class MergeError(RuntimeError):
    pass


@dataclass
class MergeOptions:
    container: str = DEFAULT_CONTAINER  # ElementTree path below the target root
    source_container: str = DEFAULT_CONTAINER  # same, for the source document
    key: str = DEFAULT_KEY_SPEC  # tag | @attribute
    check_only: bool = False


@dataclass
class MergeResult:
    target: Path
    changed: bool
    written: bool
    elements_before: int
    elements_after: int
    new_elements: int


def _register_namespaces(path: Path) -> None:
    """Reuse the document's own prefixes on output instead of ns0, ns1, ..."""
    for _event, (prefix, uri) in ET.iterparse(str(path), events=("start-ns",)):
        try:
            ET.register_namespace(prefix, uri)
        except ValueError:
            # reserved ns<digits> prefixes
            _LOG.debug("not registering namespace prefix %r for %s", prefix, uri)


def read_xml(path: Path) -> ET.ElementTree:
    """Parse `path` keeping comments and processing instructions."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    try:
        tree = ET.parse(str(path), parser=parser)
        _register_namespaces(path)
    except (ET.ParseError, OSError) as e:
        raise MergeError(f"XML parse failed: {path}: {e}") from e
    return tree


def write_xml(tree: ET.ElementTree, path: Path) -> None:
    """Write XML as-is (no re-indentation), LF newlines, trailing newline."""
    root = tree.getroot()
    if root is None:
        raise MergeError(f"Cannot write empty XML tree: {path}")

    data = ET.tostring(root, encoding="UTF-8", xml_declaration=True)
    data = data.replace(b"\r\n", b"\n").replace(b"\r", b"\n")
    if not data.endswith(b"\n"):
        data += b"\n"

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def find_container(tree: ET.ElementTree, path: str) -> ET.Element:
    root = tree.getroot()
    p = (path or ".").strip()
    if p in ("", "."):
        return root
    el = root.find(p)
    if el is None:
        raise MergeError(f"Container not found: {p!r}")
    return el


def _child_elements(parent: ET.Element) -> List[ET.Element]:
    # Comments/PIs have a function as tag.
    return [c for c in parent if isinstance(c.tag, str)]


def load_new_elements(path: Path, container_path: str = ".") -> List[ET.Element]:
    """Element children of the container at `container_path` in `path`."""
    tree = read_xml(path)
    return _child_elements(find_container(tree, container_path))


def _selector(opts: MergeOptions) -> NameSelector:
    try:
        return parse_key_spec(opts.key)
    except ValueError as e:
        raise MergeError(str(e)) from e


def _merge_into(target: Path, new_elements: Iterable[ET.Element], selector: NameSelector, opts: MergeOptions) -> MergeResult:
    tree = read_xml(target)
    parent = find_container(tree, opts.container)

    new_list = list(new_elements)
    before = len(_child_elements(parent))
    changed = merge_xml_elements(parent, new_list, selector)
    after = len(_child_elements(parent))

    written = False
    if changed and not opts.check_only:
        write_xml(tree, target)
        written = True

    _LOG.info(
        "merge %s [%s]: %d new, %d -> %d element(s), changed=%s written=%s",
        target,
        opts.container,
        len(new_list),
        before,
        after,
        changed,
        written,
    )
    return MergeResult(
        target=target,
        changed=changed,
        written=written,
        elements_before=before,
        elements_after=after,
        new_elements=len(new_list),
    )


def merge_files(target: Path, source: Path, opts: MergeOptions) -> MergeResult:
    """Merge the elements of `source` into `target`, rewriting it if it changed."""
    selector = _selector(opts)
    new_elements = load_new_elements(source, opts.source_container)
    return _merge_into(target, new_elements, selector, opts)


def sort_file(target: Path, opts: MergeOptions) -> MergeResult:
    """Sort the container in `target` in place (a merge with nothing new)."""
    return _merge_into(target, [], _selector(opts), opts)
