from __future__ import annotations

from typing import Optional

from .nodes import Container, Element, Trivia


def _whitespace(node: object) -> Optional[Trivia]:
    if isinstance(node, Trivia) and node.is_whitespace:
        return node
    return None


def sample_separator(container: Container, element: Optional[Element], at: Optional[int] = None) -> Optional[Trivia]:
    """Return a copy of the whitespace next to `element`, if there is any.

    Prefers the node before the element, then the one after. The original node
    stays where it is; callers insert the copy. Returns None for an empty
    container or an element with no whitespace neighbour, in which case new
    elements go in without a separator. `at` is the element's node index, if
    known.
    """
    if element is None:
        return None
    i = container.index(element) if at is None else at
    nodes = container.nodes
    before = nodes[i - 1] if i > 0 else None
    after = nodes[i + 1] if i + 1 < len(nodes) else None
    sample = _whitespace(before) or _whitespace(after)
    if sample is None:
        return None
    return sample.clone()
