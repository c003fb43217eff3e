"""
Path Resolution
===============

A `Path` is a dotted reference into a `Model`, e.g. `Gene.organism.name`.

The first segment names a class; every following segment names a
field of the class reached so far. Resolution walks the segments and
records one `FieldDescriptor` per step.

Three classes can be asked of a resolved path:

- `start_class` : the class named by the first segment
- `end_class`   : the class reached by the last reference/collection,
                  or the start class when there is none
- `last_class`  : the class that declares (or inherits) the terminal
                  field, i.e. one level above it. For a bare class
                  path this is the start class.

For `Gene.organism.name` those are Gene, Organism and Organism; for
`Gene.organism` they are Gene, Organism and Gene.
"""

from typing import List, Optional

from pathquery.exceptions import PathError
from pathquery.schema.model import ClassDescriptor, FieldDescriptor, Model


class Path:
    """
    A dotted path bound to a schema model.

    Resolution is lazy and memoised, but the constructor resolves once
    so an invalid path fails where it is created.

    Raises
    ------
    PathError
        If the string is malformed or names an unknown class or field.
    """

    def __init__(self, model: Model, path: str):
        self.model = model
        self.path = path
        self._elements: Optional[List[FieldDescriptor]] = None
        self._classes: Optional[List[ClassDescriptor]] = None
        self._resolve()

    # --------------------------------------------------
    # Resolution
    # --------------------------------------------------

    def _resolve(self) -> None:
        if self._elements is not None:
            return

        if not isinstance(self.path, str) or not self.path:
            raise PathError("Path must be a non-empty string", self.path)

        segments = self.path.split(".")
        if any(not s or s != s.strip() for s in segments):
            raise PathError(f"'{self.path}' is not a valid path", self.path)

        start = self.model.get_class(segments[0])
        if start is None:
            raise PathError(
                f"'{self.path}' is not a valid path: unknown class "
                f"'{segments[0]}' in model '{self.model.name}'",
                self.path,
            )

        elements: List[FieldDescriptor] = []
        classes: List[ClassDescriptor] = [start]
        current = start

        for segment in segments[1:]:
            if current is None:
                raise PathError(
                    f"'{self.path}' is not a valid path: cannot continue "
                    f"past attribute '{elements[-1].name}'",
                    self.path,
                )

            fd = self.model.get_field(current.name, segment)
            if fd is None:
                raise PathError(
                    f"'{self.path}' is not a valid path: class "
                    f"'{current.name}' has no field '{segment}'",
                    self.path,
                )

            elements.append(fd)
            current = None if fd.is_attribute() else self.model.get_class(fd.type)
            classes.append(current)

        self._elements = elements
        self._classes = classes

    # --------------------------------------------------
    # Accessors
    # --------------------------------------------------

    @property
    def elements(self) -> List[FieldDescriptor]:
        self._resolve()
        return list(self._elements)

    @property
    def start_class(self) -> ClassDescriptor:
        self._resolve()
        return self._classes[0]

    @property
    def end_field(self) -> Optional[FieldDescriptor]:
        """Terminal field, or None for a bare class path."""
        self._resolve()
        return self._elements[-1] if self._elements else None

    @property
    def end_class(self) -> ClassDescriptor:
        self._resolve()
        for cld in reversed(self._classes):
            if cld is not None:
                return cld
        return self._classes[0]

    @property
    def last_class(self) -> ClassDescriptor:
        self._resolve()
        if len(self._classes) < 2:
            return self._classes[0]
        return self._classes[-2]

    @property
    def end_type(self) -> str:
        """Primitive type name for attribute paths, class name otherwise."""
        fd = self.end_field
        if fd is None:
            return self.start_class.name
        return fd.type

    def is_attribute(self) -> bool:
        fd = self.end_field
        return fd is not None and fd.is_attribute()

    def prefix(self) -> Optional["Path"]:
        """The parent path, or None for a bare class path."""
        if "." not in self.path:
            return None
        return Path(self.model, self.path.rsplit(".", 1)[0])

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"Path({self.path!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self.path == other.path and self.model.name == other.model.name

    def __hash__(self) -> int:
        return hash((self.model.name, self.path))
