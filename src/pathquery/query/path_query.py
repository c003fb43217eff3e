"""
Path Query
==========

The root of the query data model: an insertion-ordered mapping from
path string to `PathNode`, plus the output configuration (view and
sort order).

All structural mutation goes through the methods on this class; the
`nodes` mapping handed out to callers is read-only.

Design Guarantees
-----------------
- Node keys are unique. Adding a node under an existing key replaces
  it, and the key then iterates last.
- `clone()` copies every node and constraint. Only the schema model
  reference is shared, since it is read-only.
"""

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pathquery.exceptions import PathError
from pathquery.query.constraint import Constraint
from pathquery.query.path_node import PathNode
from pathquery.schema.model import Model
from pathquery.schema.path import Path


SORT_DIRECTIONS = ("asc", "desc")


class PathQuery:
    """
    A query over the object graph described by `model`.

    Parameters
    ----------
    model : Model, optional
        Schema the query's paths resolve against. A query without a
        model (e.g. read back from XML with no model supplied) can
        still be inspected, cloned and serialized, but `add_node` and
        `add_view` need one to resolve paths.
    model_name : str, optional
        Name of the schema, kept when no `model` object is attached.
    """

    def __init__(self, model: Optional[Model] = None, model_name: Optional[str] = None):
        self.model = model
        self._model_name = model_name
        self._nodes: Dict[str, PathNode] = {}
        self._view: List[str] = []
        self._sort_order: List[Tuple[str, str]] = []

    # --------------------------------------------------
    # Nodes
    # --------------------------------------------------

    @property
    def nodes(self) -> Mapping[str, PathNode]:
        return MappingProxyType(self._nodes)

    def get_node(self, key: str) -> Optional[PathNode]:
        return self._nodes.get(key)

    def add_or_replace_node(self, key: str, node: PathNode) -> PathNode:
        if key != node.path:
            raise ValueError(f"Node path '{node.path}' does not match key '{key}'")
        self._nodes.pop(key, None)
        self._nodes[key] = node
        return node

    def add_node(self, path: str) -> PathNode:
        """
        Return the node for `path`, creating it if it does not exist.

        Raises
        ------
        PathError
            If the query has no model or the path does not resolve.
        """
        existing = self._nodes.get(path)
        if existing is not None:
            return existing

        resolved = self._resolve(path)
        node = PathNode(path=path, type=resolved.end_type)
        self._nodes[path] = node
        return node

    def remove_node(self, key: str) -> Optional[PathNode]:
        return self._nodes.pop(key, None)

    def add_constraint(self, path: str, constraint: Constraint) -> Constraint:
        """Attach a constraint to the node at `path`, creating the node if needed."""
        return self.add_node(path).add_constraint(constraint)

    def all_constraints(self) -> List[Constraint]:
        """Every constraint, in node order then append order."""
        return [c for node in self._nodes.values() for c in node.constraints]

    # --------------------------------------------------
    # View and sort order
    # --------------------------------------------------

    @property
    def view(self) -> List[str]:
        return list(self._view)

    def add_view(self, path: str) -> None:
        if self.model is not None:
            self._resolve(path)
        if path not in self._view:
            self._view.append(path)

    def remove_view(self, path: str) -> None:
        if path in self._view:
            self._view.remove(path)

    def set_view(self, paths: List[str]) -> None:
        self._view = []
        for path in paths:
            self.add_view(path)

    @property
    def sort_order(self) -> List[Tuple[str, str]]:
        return list(self._sort_order)

    def add_order_by(self, path: str, direction: str = "asc") -> None:
        direction = direction.lower()
        if direction not in SORT_DIRECTIONS:
            raise ValueError(f"Sort direction must be one of {SORT_DIRECTIONS}")
        if self.model is not None:
            self._resolve(path)
        self._sort_order = [(p, d) for p, d in self._sort_order if p != path]
        self._sort_order.append((path, direction))

    def clear_sort_order(self) -> None:
        self._sort_order = []

    # --------------------------------------------------
    # Copying and comparison
    # --------------------------------------------------

    def clone(self) -> "PathQuery":
        copy = PathQuery(self.model, self._model_name)
        for key, node in self._nodes.items():
            copy._nodes[key] = node.clone()
        copy._view = list(self._view)
        copy._sort_order = list(self._sort_order)
        return copy

    @property
    def model_name(self) -> Optional[str]:
        return self.model.name if self.model is not None else self._model_name

    def __eq__(self, other) -> bool:
        if not isinstance(other, PathQuery):
            return NotImplemented
        return (
            self.model_name == other.model_name
            and list(self._nodes.items()) == list(other._nodes.items())
            and self._view == other._view
            and self._sort_order == other._sort_order
        )

    def __repr__(self) -> str:
        return (
            f"PathQuery(model={self.model_name!r}, view={self._view!r}, "
            f"nodes={list(self._nodes)!r})"
        )

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _resolve(self, path: str) -> Path:
        if self.model is None:
            raise PathError(f"Cannot resolve '{path}': query has no model", path)
        return Path(self.model, path)
