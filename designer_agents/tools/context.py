"""Document-tree capability consumed by the tools.

The editor owns the real document; agents only see it through this protocol.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Protocol


@dataclass
class ComponentNode:
    """A node in the UI document tree."""
    id: str
    type: str
    props: Dict[str, Any] = field(default_factory=dict)
    children: List["ComponentNode"] = field(default_factory=list)
    name: str = ""


@dataclass
class Page:
    """A page and its component tree."""
    id: str
    name: str
    route: str = ""
    tree: List[ComponentNode] = field(default_factory=list)


class ToolContext(Protocol):
    """Mutation interface over the document being edited."""

    pages: List[Page]
    current_page_id: Optional[str]
    tree: List[ComponentNode]
    selected_node_ids: List[str]

    def get_node_by_id(self, node_id: str) -> Optional[ComponentNode]:
        ...

    def create_page(self, name: str, route: str) -> str:
        """Create a page and return its id."""
        ...

    def set_current_page(self, page_id: str) -> None:
        ...

    def delete_page(self, page_id: str) -> None:
        ...

    def add_component(
        self, node: ComponentNode, parent_id: Optional[str] = None, index: Optional[int] = None
    ) -> None:
        ...

    def update_component_props(self, node_id: str, props: Dict[str, Any]) -> None:
        ...

    def remove_component(self, node_id: str) -> None:
        ...

    def move_component(self, node_id: str, parent_id: Optional[str], index: Optional[int] = None) -> None:
        ...


def walk_tree(nodes: List[ComponentNode]) -> Iterator[ComponentNode]:
    """Depth-first iteration over every node."""
    for node in nodes:
        yield node
        yield from walk_tree(node.children)


def find_parent(nodes: List[ComponentNode], node_id: str) -> Optional[ComponentNode]:
    for node in walk_tree(nodes):
        if any(child.id == node_id for child in node.children):
            return node
    return None


def content_preview(node: ComponentNode, limit: int = 40) -> str:
    """Short text preview of a node for disambiguation messages."""
    text = node.props.get("children") or node.props.get("text") or node.props.get("title") or ""
    if not isinstance(text, str):
        return ""
    return text if len(text) <= limit else text[: limit - 3] + "..."
