from __future__ import annotations

from typing import List, Optional

from .nodes import Container, Element, Node


def leading_trivia(container: Container, element: Element, at: Optional[int] = None) -> List[Node]:
    """Return the non-element nodes directly before `element`.

    The run stops at the previous element (exclusive), or at the start of the
    container if `element` is the first one. A comment in this run belongs to
    `element`, so anything sorting before `element` is inserted ahead of it.

    `at` is the node index of `element` when the caller already knows it.
    """
    end = container.index(element) if at is None else at
    start = end
    while start > 0 and not isinstance(container.nodes[start - 1], Element):
        start -= 1
    return container.nodes[start:end]
