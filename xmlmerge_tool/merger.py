from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .nodes import Container, Element, Node
from .trivia import leading_trivia
from .whitespace import sample_separator


_LOG = logging.getLogger("xmlmerge_tool.merger")

KeySelector = Callable[[Element], str]

# Keys are compared with plain str ordering (code point order, same as UTF-8
# byte order), never locale collation.


@dataclass(frozen=True)
class InsertBefore:
    index: int


@dataclass(frozen=True)
class AppendAtEnd:
    pass


InsertionPoint = Union[InsertBefore, AppendAtEnd]


@dataclass
class _Layout:
    """Element order of a container with each element's leading trivia."""

    blocks: List[Tuple[Element, List[Node]]] = field(default_factory=list)
    trailing: List[Node] = field(default_factory=list)

    @classmethod
    def capture(cls, container: Container) -> "_Layout":
        layout = cls()
        pending: List[Node] = []
        for node in container.nodes:
            if isinstance(node, Element):
                layout.blocks.append((node, pending))
                pending = []
            else:
                pending.append(node)
        layout.trailing = pending
        return layout


def _tail_insertion_point(container: Container, after: Optional[int]) -> InsertionPoint:
    # New trailing elements go right after the last element, ahead of any
    # whitespace/comments before the closing tag.
    if after is not None and after < len(container.nodes):
        return InsertBefore(after)
    return AppendAtEnd()


def _insert_at(container: Container, point: InsertionPoint, nodes: Iterable[Node]) -> InsertionPoint:
    """Insert `nodes` in order at `point`; return the point after them."""
    if isinstance(point, InsertBefore):
        idx = point.index
        for node in nodes:
            container.insert(idx, node)
            idx += 1
        return InsertBefore(idx)
    for node in nodes:
        container.append(node)
    return point


def _resort(container: Container, layout: _Layout, keyed: List[Tuple[str, Element]]) -> None:
    # sorted() is stable, so equal keys keep their document order.
    order = sorted(range(len(keyed)), key=lambda i: keyed[i][0])
    nodes: List[Node] = []
    for i in order:
        element, trivia = layout.blocks[i]
        nodes.extend(trivia)
        nodes.append(element)
    nodes.extend(layout.trailing)
    container.replace_nodes(nodes)


def _merge_pass(
    container: Container,
    new_items: List[Tuple[str, Element]],
    key_selector: KeySelector,
    *,
    allow_resort: bool,
) -> Optional[bool]:
    """One scan over the container.

    Returns the changed flag, or None if the container turned out to be
    unsorted and was resorted (the caller must scan again).
    """
    layout = _Layout.capture(container)
    old_items = [(key_selector(el), el) for el, _trivia in layout.blocks]

    new_index = 0
    changed = False
    last_key: Optional[str] = None
    # Node index of the element being visited, kept up to date across inserts.
    pos = 0

    for (this_key, old), (_el, old_trivia) in zip(old_items, layout.blocks):
        pos += len(old_trivia)
        # New items that sort before this element go ahead of its leading
        # comments/whitespace, so those stay attached to it.
        lead_start: Optional[int] = None
        while new_index < len(new_items) and new_items[new_index][0] < this_key:
            changed = True
            new_key, new_node = new_items[new_index]
            if lead_start is None:
                lead_start = pos - len(leading_trivia(container, old, pos))
            container.insert(lead_start, new_node)
            pos += 1
            separator = sample_separator(container, old, pos)
            if separator is not None:
                container.insert(lead_start, separator)
                pos += 1
                lead_start += 1
            lead_start += 1
            _LOG.debug("inserted %r before %r", new_key, this_key)
            new_index += 1

        if new_index < len(new_items) and new_items[new_index][0] == this_key:
            replacement = new_items[new_index][1]
            # Once anything changed the flag is settled; skip the deep compare.
            if not changed and not old.deep_equals(replacement):
                changed = True
            container.replace_at(pos, replacement)
            _LOG.debug("replaced %r", this_key)
            new_index += 1

        if allow_resort and last_key is not None and this_key < last_key:
            _LOG.info("container is not sorted (%r after %r); resorting %d element(s)", this_key, last_key, len(old_items))
            _resort(container, layout, old_items)
            return None

        last_key = this_key
        pos += 1

    if new_index < len(new_items):
        changed = True
        last = container.nodes[pos - 1] if old_items else None
        separator = sample_separator(container, last, pos - 1)
        point = _tail_insertion_point(container, pos if old_items else None)
        for new_key, new_node in new_items[new_index:]:
            nodes: List[Node] = [new_node] if separator is None else [separator.clone(), new_node]
            point = _insert_at(container, point, nodes)
            _LOG.debug("appended %r", new_key)

    return changed


def merge_elements(container: Container, new_elements: Iterable[Element], key_selector: KeySelector) -> bool:
    """Merge `new_elements` into `container`, keeping it sorted by key.

    Existing elements with no counterpart stay as they are, along with the
    whitespace and comments around them. An existing element whose key matches
    a new element is replaced in place. Other new elements are inserted in
    sorted position, separated by a copy of the whitespace found next to their
    neighbour. If the container is not sorted to begin with, it is sorted
    first (keeping each element's leading trivia with it) and the merge runs
    once more.

    `key_selector` must be pure. Duplicate keys on either side are not
    detected; the resulting placement is unspecified.

    Returns True if the container changed; False if every new element was
    already present with equal content and the order was already correct.
    """
    new_items = sorted(((key_selector(e), e) for e in new_elements), key=lambda kv: kv[0])

    resorted = False
    while True:
        changed = _merge_pass(container, new_items, key_selector, allow_resort=not resorted)
        if changed is not None:
            # A resort is itself a change.
            return changed or resorted
        resorted = True
