from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Union


# Trivia kinds
WHITESPACE = "whitespace"
TEXT = "text"  # mixed-content text that is not whitespace-only
COMMENT = "comment"
PI = "pi"


@dataclass(eq=False)
class Trivia:
    """A non-element node: whitespace, stray text, a comment or a PI.

    Never compared semantically; kept purely so the document reads the same.
    """

    kind: str
    text: str = ""

    @classmethod
    def from_text(cls, text: str) -> "Trivia":
        return cls(WHITESPACE if not text.strip() else TEXT, text)

    @property
    def is_whitespace(self) -> bool:
        return self.kind == WHITESPACE

    @property
    def is_text(self) -> bool:
        return self.kind in (WHITESPACE, TEXT)

    def clone(self) -> "Trivia":
        return Trivia(self.kind, self.text)


@dataclass(eq=False)
class Element:
    """A mergeable entity. `content` is opaque to the engine."""

    content: Any

    def deep_equals(self, other: "Element") -> bool:
        return self.content == other.content


Node = Union[Element, Trivia]


class Container:
    """Ordered list of nodes, edited by index.

    Lookups are by identity, so the same node object is never expected to
    appear twice.
    """

    def __init__(self, nodes: Optional[Iterable[Node]] = None) -> None:
        self.nodes: List[Node] = list(nodes or [])

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return f"Container({self.nodes!r})"

    def elements(self) -> List[Element]:
        return [n for n in self.nodes if isinstance(n, Element)]

    def index(self, node: Node) -> int:
        for i, n in enumerate(self.nodes):
            if n is node:
                return i
        raise ValueError(f"node is not in this container: {node!r}")

    def insert(self, index: int, node: Node) -> None:
        self.nodes.insert(index, node)

    def append(self, node: Node) -> None:
        self.nodes.append(node)

    def replace_at(self, index: int, node: Node) -> None:
        self.nodes[index] = node

    def replace_nodes(self, nodes: Iterable[Node]) -> None:
        self.nodes[:] = list(nodes)
