"""
Shared fixtures for the pathquery test suite.

Provides the bundled sample schema model, a small template built on
it, and a scripted executor standing in for a query backend.
"""

import pytest

from pathquery.config.paths import DEFAULT_MODEL_PATH
from pathquery.query.constraint import Constraint
from pathquery.query.path_query import PathQuery
from pathquery.schema.model import load_model
from pathquery.template.template_query import TemplateQuery


class FakeExecutor:
    """
    Executor returning scripted rows per projected path.

    `rows_by_path` maps a view path to the rows returned for a query
    projecting it. A value that is an exception instance is raised
    instead. Every call is recorded in `calls`.
    """

    def __init__(self, rows_by_path):
        self.rows_by_path = rows_by_path
        self.calls = []

    def get_sequence(self):
        return "seq-1"

    def execute(self, query, offset, limit, optimise, explain, sequence):
        self.calls.append({
            "query": query,
            "offset": offset,
            "limit": limit,
            "optimise": optimise,
            "explain": explain,
            "sequence": sequence,
        })
        result = self.rows_by_path.get(query.view[0], [])
        if isinstance(result, Exception):
            raise result
        return result[offset:offset + limit]


@pytest.fixture(scope="session")
def model():
    return load_model(DEFAULT_MODEL_PATH)


@pytest.fixture
def gene_query(model):
    """
    Genes of H. sapiens with a length constraint and an editable
    symbol lookup:

    - Gene.organism.name = "H. sapiens"   (fixed)
    - Gene.length > 5000                  (editable)
    - Gene.symbol = "eve"                 (editable)
    - Gene.symbol != "zen"                (fixed)
    """
    query = PathQuery(model)
    query.set_view(["Gene.symbol", "Gene.length"])
    query.add_constraint(
        "Gene.organism.name",
        Constraint(op="=", value="H. sapiens", code="A"),
    )
    query.add_constraint(
        "Gene.length",
        Constraint(op=">", value=5000, editable=True, description="Minimum length", code="B"),
    )
    query.add_constraint(
        "Gene.symbol",
        Constraint(op="=", value="eve", editable=True, identifier="symbol", code="C"),
    )
    query.add_constraint(
        "Gene.symbol",
        Constraint(op="!=", value="zen", code="D"),
    )
    query.add_order_by("Gene.length", "desc")
    return query


@pytest.fixture
def gene_template(gene_query):
    return TemplateQuery(
        "gene_length",
        "Genes with long length",
        "Find genes longer than a given length",
        "private note",
        gene_query,
        True,
        "gene length",
    )


@pytest.fixture
def fake_executor_factory():
    return FakeExecutor
