"""
Schema Model
============

In-memory description of the object graph that path queries are
written against: classes, their attributes, and the references and
collections that link them.

The model is read-only data. Queries and templates keep a reference
to it and share that reference across clones.

Document Format
---------------
{
    "name": "genomic",
    "classes": {
        "Gene": {
            "extends": ["BioEntity"],
            "attributes": {"length": "int"},
            "references": {"chromosome": "Chromosome"},
            "collections": {"proteins": "Protein"}
        }
    }
}

Attribute types are primitive type names (see `PRIMITIVE_TYPES`);
reference and collection types are class names.

Dependencies
------------
- pydantic
"""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from pathquery.config.settings import load_settings
from pathquery.exceptions import ModelError
from pathquery.schema.schema_loader import load_schema


# --------------------------------------------------
# Type vocabulary
# --------------------------------------------------

PRIMITIVE_TYPES = {"str", "int", "float", "bool"}

FIELD_SECTIONS = {
    "attributes": "attribute",
    "references": "reference",
    "collections": "collection",
}


# --------------------------------------------------
# Descriptors
# --------------------------------------------------

class FieldDescriptor(BaseModel):
    """
    A single field of a class.

    Attributes
    ----------
    name : str
        Field name as used in dotted paths.
    kind : str
        One of "attribute", "reference", "collection".
    type : str
        Primitive type name for attributes, target class name otherwise.
    """

    name: str
    kind: Literal["attribute", "reference", "collection"]
    type: str

    def is_attribute(self) -> bool:
        return self.kind == "attribute"


class ClassDescriptor(BaseModel):
    """A class in the object graph, with its declared (not inherited) fields."""

    name: str
    extends: List[str] = []
    fields: Dict[str, FieldDescriptor] = Field(default_factory=dict)


class Model(BaseModel):
    """
    A named collection of class descriptors.

    Field lookup follows `extends` so subclasses see inherited fields.
    """

    name: str
    classes: Dict[str, ClassDescriptor] = Field(default_factory=dict)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def get_class(self, name: str) -> Optional[ClassDescriptor]:
        return self.classes.get(name)

    def get_field(self, class_name: str, field_name: str) -> Optional[FieldDescriptor]:
        """
        Find a field on a class or any of its superclasses.

        Superclasses are searched depth-first in declaration order.
        Returns None if neither the class nor its ancestors declare it.
        """
        pending = [class_name]
        seen = set()

        while pending:
            current = pending.pop(0)
            if current in seen:
                continue
            seen.add(current)

            cld = self.classes.get(current)
            if cld is None:
                continue
            if field_name in cld.fields:
                return cld.fields[field_name]
            pending = list(cld.extends) + pending

        return None

    # --------------------------------------------------
    # Construction
    # --------------------------------------------------

    @classmethod
    def from_dict(cls, document: Dict[str, Any]) -> "Model":
        """
        Build a model from a parsed schema document.

        Raises
        ------
        ModelError
            If the document is structurally invalid: missing name,
            unknown attribute types, dangling references or superclasses.
        """
        name = document.get("name")
        if not name or not isinstance(name, str):
            raise ModelError("Schema document must have a non-empty 'name'")

        raw_classes = document.get("classes")
        if not isinstance(raw_classes, dict):
            raise ModelError("Schema document must have a 'classes' object")

        classes: Dict[str, ClassDescriptor] = {}
        for class_name, body in raw_classes.items():
            if not isinstance(body, dict):
                raise ModelError(f"Class '{class_name}' must be an object")

            fields: Dict[str, FieldDescriptor] = {}
            for section, kind in FIELD_SECTIONS.items():
                for field_name, field_type in (body.get(section) or {}).items():
                    if field_name in fields:
                        raise ModelError(
                            f"Field '{class_name}.{field_name}' declared twice"
                        )
                    fields[field_name] = FieldDescriptor(
                        name=field_name, kind=kind, type=field_type
                    )

            classes[class_name] = ClassDescriptor(
                name=class_name,
                extends=list(body.get("extends") or []),
                fields=fields,
            )

        cls._check_types(classes)
        return cls(name=name, classes=classes)

    @staticmethod
    def _check_types(classes: Dict[str, ClassDescriptor]) -> None:
        for cld in classes.values():
            for parent in cld.extends:
                if parent not in classes:
                    raise ModelError(
                        f"Class '{cld.name}' extends unknown class '{parent}'"
                    )
            for fd in cld.fields.values():
                if fd.is_attribute() and fd.type not in PRIMITIVE_TYPES:
                    raise ModelError(
                        f"Attribute '{cld.name}.{fd.name}' has unsupported "
                        f"type '{fd.type}'"
                    )
                if not fd.is_attribute() and fd.type not in classes:
                    raise ModelError(
                        f"Field '{cld.name}.{fd.name}' references unknown "
                        f"class '{fd.type}'"
                    )


# --------------------------------------------------
# Loading
# --------------------------------------------------

def load_model(path: Optional[Union[str, Path]] = None) -> Model:
    """
    Load a schema model from disk.

    Parameters
    ----------
    path : str or Path, optional
        Schema JSON file. Defaults to the `model.path` setting.
    """
    if path is None:
        path = load_settings().model_path

    return Model.from_dict(load_schema(path))
