"""
Exceptions raised by the pathquery package.

Validation of templates and track records is deliberately NOT part of
this hierarchy: it is reported as a boolean and callers branch on it.
"""


class PathQueryError(Exception):
    """Base class for all pathquery errors."""


class PathError(PathQueryError):
    """A dotted path could not be resolved against the schema model."""

    def __init__(self, message: str, path: str = None):
        super().__init__(message)
        self.path = path


class ModelError(PathQueryError):
    """A schema document is structurally invalid."""


class ConfigError(PathQueryError):
    """Settings could not be read, merged or validated."""


class TemplateBindingError(PathQueryError):
    """
    Fatal failure while converting a template to or from XML.

    A well-formed in-memory TemplateQuery always serializes, so this
    signals a defect or a corrupt document, not a user error.
    """
