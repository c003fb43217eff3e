"""
Template Query
==============

A template is a saved `PathQuery` plus presentation metadata, some of
whose constraints are marked editable so a user can fill them in when
running it.

The template owns its query: the query passed to the constructor is
cloned on the way in, and `get_path_query()` hands out clones on the
way out. Two templates never share nodes, constraints or cached
possible values.

Summarisation
-------------
`summarise(executor)` checks, for each editable node, whether the
node's field takes a small set of values in the template's fixed
filtering context. It runs one precompute query per node with a limit
of `SUMMARY_CUTOFF` rows:

- fewer than `SUMMARY_CUTOFF` rows: the first column of each row,
  in returned order, is stored as the node's possible values
- otherwise: any stored values for the node are dropped

Entries left over from nodes that are no longer editable are removed
at the start of each run.

`get_possible_values` returns None both for "never summarised" and
"too many values"; `get_summary_status` tells the two apart.

Each node's entry is replaced only after its query has returned, so
an executor failure on one node leaves earlier nodes updated and
later nodes untouched.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pathquery.logging import get_logger
from pathquery.query.constraint import Constraint
from pathquery.query.path_node import PathNode
from pathquery.query.path_query import PathQuery
from pathquery.template.executor import QueryExecutor
from pathquery.template.precompute import build_precompute_query


LOG = get_logger(__name__)

# Row limit for precompute queries; a node is summarised only if its
# query returns strictly fewer rows than this.
SUMMARY_CUTOFF = 20


class SummaryStatus(str, Enum):
    NOT_SUMMARISED = "not_summarised"
    COMPLETE = "complete"
    TOO_MANY_VALUES = "too_many_values"


NodeRef = Union[PathNode, str]


def _key(node: NodeRef) -> str:
    return node.path if isinstance(node, PathNode) else node


class TemplateQuery:
    """
    A parameterisable saved query.

    Parameters
    ----------
    name : str
        Short unique name; the template's identity. A template with an
        empty name is invalid (see `is_valid`).
    title : str
        Title shown in template lists.
    description : str
        Long description shown on the template form.
    comment : str
        Private comment for the template's author.
    query : PathQuery
        The query itself. It is cloned; later changes to the argument
        do not reach the template.
    important : bool
        True if the template is featured for its related class.
    keywords : str
        Free-text keywords. None is stored as "".
    """

    def __init__(
        self,
        name: Optional[str],
        title: Optional[str],
        description: Optional[str],
        comment: Optional[str],
        query: PathQuery,
        important: bool = False,
        keywords: Optional[str] = "",
    ):
        self._query = query.clone()
        self._name = name
        self._title = title
        self._description = description
        self._comment = comment
        self._important = bool(important)
        self._keywords = keywords if keywords is not None else ""
        self._edited = False
        self._possible_values: Dict[str, List[Any]] = {}
        self._summary_status: Dict[str, SummaryStatus] = {}

    # --------------------------------------------------
    # Metadata
    # --------------------------------------------------

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def title(self) -> Optional[str]:
        return self._title

    @property
    def description(self) -> Optional[str]:
        return self._description

    @property
    def comment(self) -> Optional[str]:
        return self._comment

    @property
    def important(self) -> bool:
        return self._important

    @property
    def keywords(self) -> str:
        return self._keywords

    @property
    def edited(self) -> bool:
        """True if the user changed this template since it was loaded from storage."""
        return self._edited

    @edited.setter
    def edited(self, value: bool) -> None:
        self._edited = bool(value)

    def is_valid(self) -> bool:
        """A template is valid only if it has a non-empty name."""
        return self._name is not None and self._name != ""

    # --------------------------------------------------
    # Query access
    # --------------------------------------------------

    @property
    def nodes(self) -> Mapping[str, PathNode]:
        return self._query.nodes

    @property
    def model_name(self) -> Optional[str]:
        return self._query.model_name

    def get_path_query(self) -> PathQuery:
        """Return a copy of the template's query."""
        return self._query.clone()

    # --------------------------------------------------
    # Editable constraints
    # --------------------------------------------------

    def get_editable_constraints(self, node: NodeRef) -> List[Constraint]:
        """
        Editable constraints on a node, in declaration order.

        Unknown nodes and nodes without constraints give an empty list.
        """
        found = self._query.get_node(_key(node))
        if found is None:
            return []
        return found.editable_constraints()

    def get_all_editable_constraints(self) -> List[Constraint]:
        """Editable constraints of every node, in node order."""
        constraints: List[Constraint] = []
        for key in self._query.nodes:
            constraints.extend(self.get_editable_constraints(key))
        return constraints

    def get_editable_nodes(self) -> List[PathNode]:
        return [
            node for node in self._query.nodes.values()
            if self.get_editable_constraints(node)
        ]

    def clone_without_editable_constraints(self) -> "TemplateQuery":
        """
        Return a clone with every editable constraint removed.

        The result runs as "all possible results" of the template. The
        clone carries no possible values since it has no editable nodes.
        """
        clone = self.clone()
        for node in clone._query.nodes.values():
            node.remove_editable_constraints()
        clone._possible_values = {}
        clone._summary_status = {}
        return clone

    # --------------------------------------------------
    # Summarisation
    # --------------------------------------------------

    def summarise(
        self,
        executor: QueryExecutor,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Compute possible values for every editable node.

        Parameters
        ----------
        executor : QueryExecutor
            Backend that runs the precompute queries.
        logger : logging.Logger, optional
            Where to report progress. Defaults to this module's logger.

        Notes
        -----
        Executor errors propagate unchanged. Invalid templates are not
        summarised.
        """
        log = logger or LOG

        if not self.is_valid():
            log.warning("Refusing to summarise template without a name")
            return

        editable_nodes = self.get_editable_nodes()

        # Entries for nodes that are no longer editable are stale.
        current = {node.path for node in editable_nodes}
        for key in set(self._summary_status) - current:
            log.debug("Dropping summary for non-editable node %s", key)
            self._summary_status.pop(key, None)
            self._possible_values.pop(key, None)

        for node in editable_nodes:
            query = build_precompute_query(self, None, node)
            log.debug("Running precompute query for %s: %r", node.path, query)

            rows = list(executor.execute(
                query, 0, SUMMARY_CUTOFF, True, False, executor.get_sequence()
            ))

            if len(rows) < SUMMARY_CUTOFF:
                self._possible_values[node.path] = [row[0] for row in rows]
                self._summary_status[node.path] = SummaryStatus.COMPLETE
            else:
                self._possible_values.pop(node.path, None)
                self._summary_status[node.path] = SummaryStatus.TOO_MANY_VALUES

        log.info(
            "Summarised template %s: %d node(s) with possible values",
            self._name, len(self._possible_values),
        )

    def is_summarised(self) -> bool:
        return bool(self._possible_values)

    def get_possible_values(self, node: NodeRef) -> Optional[List[Any]]:
        """
        Possible values for a node, or None if it was not summarised or
        has too many values. Callers must treat None as unbounded.
        """
        values = self._possible_values.get(_key(node))
        return list(values) if values is not None else None

    def get_summary_status(self, node: NodeRef) -> SummaryStatus:
        return self._summary_status.get(_key(node), SummaryStatus.NOT_SUMMARISED)

    def restore_summary(
        self,
        node: NodeRef,
        status: SummaryStatus,
        values: Optional[List[Any]] = None,
    ) -> None:
        """
        Reinstate a previously computed summary entry, e.g. one read
        back from a saved template document.
        """
        key = _key(node)
        status = SummaryStatus(status)
        if status == SummaryStatus.NOT_SUMMARISED:
            self._summary_status.pop(key, None)
            self._possible_values.pop(key, None)
            return

        self._summary_status[key] = status
        if status == SummaryStatus.COMPLETE:
            self._possible_values[key] = list(values or [])
        else:
            self._possible_values.pop(key, None)

    @property
    def summary(self) -> Dict[str, SummaryStatus]:
        """Summary status of every summarised node, in summarisation order."""
        return dict(self._summary_status)

    # --------------------------------------------------
    # Copying and comparison
    # --------------------------------------------------

    def clone(self) -> "TemplateQuery":
        clone = TemplateQuery(
            self._name, self._title, self._description, self._comment,
            self._query, self._important, self._keywords,
        )
        clone._edited = self._edited
        clone._possible_values = {k: list(v) for k, v in self._possible_values.items()}
        clone._summary_status = dict(self._summary_status)
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, TemplateQuery):
            return NotImplemented
        return (
            self._name == other._name
            and self._title == other._title
            and self._description == other._description
            and self._comment == other._comment
            and self._important == other._important
            and self._keywords == other._keywords
            and self._edited == other._edited
            and self._query == other._query
            and self._possible_values == other._possible_values
            and self._summary_status == other._summary_status
        )

    def __repr__(self) -> str:
        return f"TemplateQuery(name={self._name!r}, title={self._title!r})"
