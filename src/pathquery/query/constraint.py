"""
Constraint Model
================

A single predicate attached to a path node: an operator, an operand
value and an `editable` flag.

Editable constraints are the parts of a template a user may adjust
when running it; non-editable constraints are fixed filters baked
into the template.

Dependencies
------------
- pydantic
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


# --------------------------------------------------
# Operators
# --------------------------------------------------

class ConstraintOp(str, Enum):
    """Operators a constraint can apply."""

    EQUALS = "="
    NOT_EQUALS = "!="
    LESS_THAN = "<"
    LESS_THAN_EQUALS = "<="
    GREATER_THAN = ">"
    GREATER_THAN_EQUALS = ">="
    CONTAINS = "CONTAINS"
    LIKE = "LIKE"
    LOOKUP = "LOOKUP"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"

    def is_unary(self) -> bool:
        return self in UNARY_OPS


UNARY_OPS = {ConstraintOp.IS_NULL, ConstraintOp.IS_NOT_NULL}


# --------------------------------------------------
# Constraint
# --------------------------------------------------

class Constraint(BaseModel):
    """
    A predicate on a path node.

    Attributes
    ----------
    op : ConstraintOp
        Comparison or lookup operator.
    value : Any
        Operand. Its type follows the node's field type
        (str / int / float / bool); unary operators carry None.
    editable : bool
        True if a template user may change this constraint.
    description : Optional[str]
        Label shown next to an editable constraint on a template form.
    identifier : Optional[str]
        Stable name for addressing the constraint from outside.
    code : Optional[str]
        Short letter code ("A", "B", ...) used in constraint logic.
    """

    op: ConstraintOp
    value: Any = None
    editable: bool = False
    description: Optional[str] = None
    identifier: Optional[str] = None
    code: Optional[str] = None

    def clone(self) -> "Constraint":
        return self.model_copy(deep=True)

    def __str__(self) -> str:
        if self.op.is_unary():
            return self.op.value
        return f"{self.op.value} {self.value!r}"
