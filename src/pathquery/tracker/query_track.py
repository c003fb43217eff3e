"""
Usage Tracks
============

Minimal audit records written when a query or template is run.

Each track formats itself as a fixed-order tuple ready for insertion
into its table. A track is stored only if `validate()` returns True;
an empty or missing discriminator makes it invalid. Validation is a
boolean check, callers branch on it.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from pathquery.template.template_query import TemplateQuery


QUERY_TRACKER_TABLE = "querytrack"
TEMPLATE_TRACKER_TABLE = "templatetrack"


def _now_millis() -> int:
    return int(time.time() * 1000)


def _has_text(value: Optional[str]) -> bool:
    return value is not None and value != ""


class Track(ABC):
    """Base for audit records. Timestamps are epoch milliseconds."""

    @property
    @abstractmethod
    def table_name(self) -> str:
        ...

    @abstractmethod
    def formatted_track(self) -> Tuple[Any, ...]:
        ...

    @abstractmethod
    def validate(self) -> bool:
        ...


@dataclass
class QueryTrack(Track):
    """
    A run of a query, discriminated by its type (e.g. the root class,
    or the name of the template it came from).
    """

    type: Optional[str] = None
    timestamp: int = field(default_factory=_now_millis)

    @property
    def table_name(self) -> str:
        return QUERY_TRACKER_TABLE

    def formatted_track(self) -> Tuple[Optional[str], int]:
        return (self.type, self.timestamp)

    def validate(self) -> bool:
        return _has_text(self.type)

    @classmethod
    def from_template(cls, template: TemplateQuery, timestamp: Optional[int] = None) -> "QueryTrack":
        if timestamp is None:
            timestamp = _now_millis()
        return cls(template.name, timestamp)


@dataclass
class TemplateTrack(Track):
    """A run of a saved template, discriminated by template name."""

    template_name: Optional[str] = None
    timestamp: int = field(default_factory=_now_millis)

    @property
    def table_name(self) -> str:
        return TEMPLATE_TRACKER_TABLE

    def formatted_track(self) -> Tuple[Optional[str], int]:
        return (self.template_name, self.timestamp)

    def validate(self) -> bool:
        return _has_text(self.template_name)
