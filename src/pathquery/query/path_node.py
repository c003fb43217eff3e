"""
Path Node
=========

A node of a path query, identified by its dotted path string and
owning an ordered list of constraints.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from pathquery.query.constraint import Constraint
from pathquery.schema.model import PRIMITIVE_TYPES


class PathNode(BaseModel):
    """
    A constrained position in the query's object graph.

    Attributes
    ----------
    path : str
        Canonical dotted path; the node's identity within a query.
    type : str
        Terminal type of the path: a primitive type name for attribute
        nodes, a class name for class nodes.
    constraints : List[Constraint]
        Constraints in append order.
    """

    path: str
    type: str
    constraints: List[Constraint] = Field(default_factory=list)

    @property
    def prefix(self) -> Optional[str]:
        if "." not in self.path:
            return None
        return self.path.rsplit(".", 1)[0]

    def is_attribute(self) -> bool:
        return self.type in PRIMITIVE_TYPES

    def add_constraint(self, constraint: Constraint) -> Constraint:
        self.constraints.append(constraint)
        return constraint

    def remove_constraint(self, constraint: Constraint) -> None:
        # Identity, not equality: two equal constraints may coexist.
        for i, existing in enumerate(self.constraints):
            if existing is constraint:
                del self.constraints[i]
                return
        raise ValueError(f"Constraint {constraint} is not on node {self.path}")

    def editable_constraints(self) -> List[Constraint]:
        return [c for c in self.constraints if c.editable]

    def remove_editable_constraints(self) -> None:
        self.constraints = [c for c in self.constraints if not c.editable]

    def clone(self) -> "PathNode":
        return self.model_copy(deep=True)
