"""
Expand/collapse state for the field tree editor.

Nodes are keyed by a derived path such as ``root.address.street`` that is
rebuilt on every traversal and never stored on the fields themselves. A field
without a name is keyed by its index, and the item fields of an array sit
under ``<array path>.item``.
"""

from typing import Dict, Iterable, Iterator, Optional, Set, Tuple
import logging

from .field_model import FieldType, SchemaField

logger = logging.getLogger(__name__)

ROOT_PATH = "root"
ITEM_SEGMENT = "item"


def node_path(ancestor_path: str, field: Optional[SchemaField], index_fallback: int) -> str:
    """
    Build the visibility key of a field.

    Args:
        ancestor_path: Path of the containing list
        field: The field (may have an empty name)
        index_fallback: Position among its siblings, used when the name is empty

    Returns:
        Path string; never raises for empty or duplicate names
    """
    name = field.name if field is not None else ""
    segment = name if name else str(index_fallback)
    return f"{ancestor_path}.{segment}"


def item_path(array_path: str) -> str:
    """Path of the item field list of an array."""
    return f"{array_path}.{ITEM_SEGMENT}"


def iter_node_paths(fields: Iterable[SchemaField], root: str = ROOT_PATH) -> Iterator[Tuple[str, SchemaField]]:
    """Yield ``(path, field)`` for every node, depth first, in display order."""
    for index, field in enumerate(fields):
        path = node_path(root, field, index)
        yield path, field
        if field.type == FieldType.OBJECT:
            yield from iter_node_paths(field.children, path)
        elif field.type == FieldType.ARRAY and field.item_type == FieldType.OBJECT:
            yield from iter_node_paths(field.item_fields, item_path(path))


def collapsible_paths(fields: Iterable[SchemaField], root: str = ROOT_PATH) -> Set[str]:
    """Paths of object and array nodes, the only ones with a toggle."""
    return {path for path, field in iter_node_paths(fields, root) if field.is_container}


class NodeVisibilityState:
    """
    Expanded/collapsed flags for one editing session.

    Every path is expanded the first time it is seen. The state is owned by the
    caller; toggling never touches the field tree or the document text.
    """

    def __init__(self):
        self._expanded: Dict[str, bool] = {}

    def is_expanded(self, path: str) -> bool:
        return self._expanded.setdefault(path, True)

    def set_expanded(self, path: str, expanded: bool) -> None:
        self._expanded[path] = bool(expanded)

    def toggle(self, path: str) -> bool:
        """Flip one node and return its new state."""
        expanded = not self.is_expanded(path)
        self._expanded[path] = expanded
        return expanded

    def collapse_all(self, fields: Iterable[SchemaField], root: str = ROOT_PATH) -> None:
        for path in collapsible_paths(fields, root):
            self._expanded[path] = False

    def expand_all(self) -> None:
        for path in self._expanded:
            self._expanded[path] = True

    def prune(self, fields: Iterable[SchemaField], root: str = ROOT_PATH) -> int:
        """
        Forget paths that no longer exist in the tree.

        Returns:
            Number of entries removed
        """
        live = {path for path, _ in iter_node_paths(fields, root)}
        stale = [path for path in self._expanded if path not in live]
        for path in stale:
            del self._expanded[path]
        if stale:
            logger.debug(f"Pruned {len(stale)} stale visibility entries")
        return len(stale)

    def reset(self) -> None:
        self._expanded.clear()

    def collapsed_paths(self) -> Set[str]:
        return {path for path, expanded in self._expanded.items() if not expanded}

    def __len__(self) -> int:
        return len(self._expanded)

    def __contains__(self, path: object) -> bool:
        return path in self._expanded
