"""
Execution backend contract.

pathquery does not run queries. `TemplateQuery.summarise` hands its
precompute queries to an object implementing this protocol and reads
the rows it returns.
"""

from typing import Any, Optional, Protocol, Sequence

from pathquery.query.path_query import PathQuery


Row = Sequence[Any]


class QueryExecutor(Protocol):
    """
    A query execution backend.

    `execute` returns at most `limit` rows starting at `offset`; each row
    is a sequence of column values in view order. With `optimise` set the
    backend may return distinct rows only. `sequence` is an opaque
    consistency token obtained from `get_sequence()`.
    """

    def execute(
        self,
        query: PathQuery,
        offset: int,
        limit: int,
        optimise: bool,
        explain: bool,
        sequence: Optional[Any],
    ) -> Sequence[Row]:
        ...

    def get_sequence(self) -> Optional[Any]:
        ...
