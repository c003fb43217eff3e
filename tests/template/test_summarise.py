"""
Summarisation and Precompute Query Tests
========================================

Validates the precompute-query builder and the cutoff-based
summarisation of editable nodes.

Testing Strategy
----------------
A scripted executor returns canned rows keyed by the single path a
precompute query projects, so each editable node can be given a
small, a borderline or an oversized result set independently.
"""

import logging

import pytest

from pathquery.exceptions import PathError
from pathquery.query.constraint import Constraint
from pathquery.query.path_query import PathQuery
from pathquery.template.precompute import build_precompute_query
from pathquery.template.template_query import (
    SUMMARY_CUTOFF,
    SummaryStatus,
    TemplateQuery,
)


def _rows(values):
    return [[v, "ignored"] for v in values]


# --------------------------------------------------
# Precompute query builder
# --------------------------------------------------

def test_precompute_query_projects_single_column(gene_template):
    query = build_precompute_query(gene_template, None, "Gene.length")

    assert query.view == ["Gene.length"]
    assert query.sort_order == [("Gene.length", "asc")]


def test_precompute_query_keeps_only_fixed_constraints(gene_template):
    node = gene_template.nodes["Gene.length"]
    query = build_precompute_query(gene_template, None, node)

    assert list(query.nodes) == list(gene_template.nodes)
    assert query.get_node("Gene.length").constraints == []
    assert [c.value for c in query.get_node("Gene.organism.name").constraints] == ["H. sapiens"]
    assert [c.value for c in query.get_node("Gene.symbol").constraints] == ["zen"]
    assert all(not c.editable for c in query.all_constraints())


def test_precompute_query_leaves_template_untouched(gene_template):
    before = gene_template.clone()
    build_precompute_query(gene_template, None, "Gene.symbol")
    assert gene_template == before


def test_precompute_query_from_base_query(gene_template, model):
    base = PathQuery(model)
    base.add_constraint("Gene.length", Constraint(op=">", value=1, editable=True))
    base.add_constraint("Gene.chromosome.primaryIdentifier", Constraint(op="=", value="2L"))

    query = build_precompute_query(gene_template, base, "Gene.length")

    assert list(query.nodes) == ["Gene.length", "Gene.chromosome.primaryIdentifier"]
    assert query.get_node("Gene.length").constraints == []
    assert len(base.get_node("Gene.length").constraints) == 1


def test_precompute_query_unknown_node(gene_template):
    with pytest.raises(PathError):
        build_precompute_query(gene_template, None, "Gene.name")


# --------------------------------------------------
# Summarisation
# --------------------------------------------------

def test_summarise_calls_executor_per_editable_node(gene_template, fake_executor_factory):
    executor = fake_executor_factory({})
    gene_template.summarise(executor)

    assert [c["query"].view for c in executor.calls] == [["Gene.length"], ["Gene.symbol"]]
    for call in executor.calls:
        assert call["offset"] == 0
        assert call["limit"] == SUMMARY_CUTOFF
        assert call["optimise"] is True
        assert call["explain"] is False
        assert call["sequence"] == "seq-1"


def test_summarise_stores_first_column_in_order(gene_template, fake_executor_factory):
    lengths = [9000, 5100, 12000]
    executor = fake_executor_factory({"Gene.length": _rows(lengths)})

    gene_template.summarise(executor)

    assert gene_template.is_summarised()
    assert gene_template.get_possible_values("Gene.length") == lengths
    assert gene_template.get_summary_status("Gene.length") is SummaryStatus.COMPLETE


def test_summarise_cutoff(gene_template, fake_executor_factory):
    executor = fake_executor_factory({
        "Gene.length": _rows(range(SUMMARY_CUTOFF)),
        "Gene.symbol": _rows([f"s{i}" for i in range(SUMMARY_CUTOFF - 1)]),
    })

    gene_template.summarise(executor)

    assert gene_template.get_possible_values("Gene.length") is None
    assert gene_template.get_summary_status("Gene.length") is SummaryStatus.TOO_MANY_VALUES
    assert len(gene_template.get_possible_values("Gene.symbol")) == SUMMARY_CUTOFF - 1


def test_empty_result_is_complete_but_not_summarised(gene_template, fake_executor_factory):
    gene_template.summarise(fake_executor_factory({}))

    assert gene_template.get_possible_values("Gene.length") == []
    assert gene_template.get_summary_status("Gene.length") is SummaryStatus.COMPLETE
    # Empty value lists still count as entries.
    assert gene_template.is_summarised()


def test_summarise_overwrites_previous_values(gene_template, fake_executor_factory):
    gene_template.summarise(fake_executor_factory({"Gene.length": _rows([1, 2])}))
    gene_template.summarise(fake_executor_factory({"Gene.length": _rows([3])}))

    assert gene_template.get_possible_values("Gene.length") == [3]


def test_summarise_drops_nodes_no_longer_editable(gene_template, fake_executor_factory):
    gene_template.summarise(fake_executor_factory({
        "Gene.length": _rows([1]),
        "Gene.symbol": _rows(["eve"]),
    }))
    gene_template.nodes["Gene.symbol"].remove_editable_constraints()

    gene_template.summarise(fake_executor_factory({"Gene.length": _rows([2])}))

    assert gene_template.get_possible_values("Gene.symbol") is None
    assert gene_template.get_summary_status("Gene.symbol") == SummaryStatus.NOT_SUMMARISED
    assert gene_template.summary == {"Gene.length": SummaryStatus.COMPLETE}


def test_summarise_drops_values_that_grow_past_cutoff(gene_template, fake_executor_factory):
    gene_template.summarise(fake_executor_factory({
        "Gene.length": _rows([1]),
        "Gene.symbol": _rows(["x"] * SUMMARY_CUTOFF),
    }))
    gene_template.summarise(fake_executor_factory({
        "Gene.length": _rows(range(SUMMARY_CUTOFF + 5)),
        "Gene.symbol": _rows(["x"] * SUMMARY_CUTOFF),
    }))

    assert gene_template.get_possible_values("Gene.length") is None
    assert not gene_template.is_summarised()


def test_executor_failure_propagates_and_keeps_completed_nodes(gene_template, fake_executor_factory):
    gene_template.summarise(fake_executor_factory({"Gene.symbol": _rows(["old"])}))

    failing = fake_executor_factory({
        "Gene.length": _rows([42]),
        "Gene.symbol": RuntimeError("backend down"),
    })
    with pytest.raises(RuntimeError, match="backend down"):
        gene_template.summarise(failing)

    assert gene_template.get_possible_values("Gene.length") == [42]
    assert gene_template.get_possible_values("Gene.symbol") == ["old"]


def test_possible_values_are_copies(gene_template, fake_executor_factory):
    gene_template.summarise(fake_executor_factory({"Gene.length": _rows([1])}))

    gene_template.get_possible_values("Gene.length").append(2)
    assert gene_template.get_possible_values("Gene.length") == [1]


def test_clones_do_not_share_summary(gene_template, fake_executor_factory):
    clone = gene_template.clone()
    clone.summarise(fake_executor_factory({"Gene.length": _rows([1])}))

    assert not gene_template.is_summarised()
    assert gene_template.get_summary_status("Gene.length") is SummaryStatus.NOT_SUMMARISED


def test_invalid_template_is_not_summarised(gene_query, fake_executor_factory, caplog):
    template = TemplateQuery("", "T", None, None, gene_query)
    executor = fake_executor_factory({"Gene.length": _rows([1])})

    with caplog.at_level(logging.WARNING):
        template.summarise(executor)

    assert executor.calls == []
    assert not template.is_summarised()
    assert "without a name" in caplog.text


def test_injected_logger_receives_progress(gene_template, fake_executor_factory, caplog):
    log = logging.getLogger("tests.summarise")

    with caplog.at_level(logging.DEBUG, logger="tests.summarise"):
        gene_template.summarise(fake_executor_factory({}), logger=log)

    records = [r for r in caplog.records if r.name == "tests.summarise"]
    assert any("Gene.length" in r.getMessage() for r in records)
    assert any("Summarised template gene_length" in r.getMessage() for r in records)


def test_restore_summary(gene_template):
    gene_template.restore_summary("Gene.length", SummaryStatus.COMPLETE, [1, 2])
    gene_template.restore_summary("Gene.symbol", "too_many_values")

    assert gene_template.get_possible_values("Gene.length") == [1, 2]
    assert gene_template.get_summary_status("Gene.symbol") is SummaryStatus.TOO_MANY_VALUES

    gene_template.restore_summary("Gene.length", SummaryStatus.NOT_SUMMARISED)
    assert gene_template.summary == {"Gene.symbol": SummaryStatus.TOO_MANY_VALUES}


# --------------------------------------------------
# Worked example
# --------------------------------------------------

@pytest.fixture
def long_genes_template(model):
    query = PathQuery(model)
    query.set_view(["Gene.symbol", "Gene.length"])
    query.add_constraint("Gene.length", Constraint(op=">", value=1000, editable=True))
    query.add_constraint("Gene.organism.name", Constraint(op="=", value="H. sapiens"))
    return TemplateQuery("long_genes", "Genes with long length", None, None, query)


def test_long_genes_twelve_values(long_genes_template, fake_executor_factory):
    lengths = [1000 + 250 * i for i in range(12)]
    executor = fake_executor_factory({"Gene.length": _rows(lengths)})

    long_genes_template.summarise(executor)

    precompute = executor.calls[0]["query"]
    assert precompute.view == ["Gene.length"]
    assert precompute.get_node("Gene.organism.name").constraints[0].value == "H. sapiens"
    assert precompute.get_node("Gene.length").constraints == []

    assert long_genes_template.is_summarised()
    node = long_genes_template.nodes["Gene.length"]
    assert long_genes_template.get_possible_values(node) == lengths


def test_long_genes_twenty_values(long_genes_template, fake_executor_factory):
    executor = fake_executor_factory({"Gene.length": _rows(range(20))})

    long_genes_template.summarise(executor)

    assert not long_genes_template.is_summarised()
    assert long_genes_template.get_possible_values("Gene.length") is None
