"""
TemplateQuery Test Suite
========================

Validates template construction, the editable-constraint protocol and
cloning.

Checks
------
- The template owns a private copy of the query it was built from.
- Editable constraints and nodes are enumerated in node order, then
  constraint order, and the enumeration is reproducible.
- clone_without_editable_constraints() strips exactly the editable
  constraints and leaves the source untouched.
- clone() and get_path_query() never alias internal state.
"""

import pytest

from pathquery.query.constraint import Constraint
from pathquery.template.template_query import TemplateQuery


# --------------------------------------------------
# Construction and metadata
# --------------------------------------------------

def test_metadata(gene_template):
    assert gene_template.name == "gene_length"
    assert gene_template.title == "Genes with long length"
    assert gene_template.description == "Find genes longer than a given length"
    assert gene_template.comment == "private note"
    assert gene_template.important is True
    assert gene_template.keywords == "gene length"
    assert gene_template.edited is False
    assert gene_template.model_name == "genomic"


def test_keywords_default_to_empty_string(gene_query):
    template = TemplateQuery("t", None, None, None, gene_query, keywords=None)

    assert template.keywords == ""
    assert template.important is False


def test_edited_setter(gene_template):
    gene_template.edited = True
    assert gene_template.edited is True


def test_construction_copies_query(gene_query):
    template = TemplateQuery("t", "T", None, None, gene_query)

    gene_query.get_node("Gene.length").constraints[0].editable = False
    gene_query.add_node("Gene.name")

    assert [c.value for c in template.get_all_editable_constraints()] == [5000, "eve"]
    assert "Gene.name" not in template.nodes


def test_get_path_query_returns_copy(gene_template, gene_query):
    copy = gene_template.get_path_query()
    assert copy == gene_query

    copy.get_node("Gene.symbol").remove_editable_constraints()
    copy.add_node("Gene.name")

    assert gene_template.get_path_query() == gene_query


@pytest.mark.parametrize("name, valid", [("gene_length", True), ("", False), (None, False)])
def test_is_valid(gene_query, name, valid):
    assert TemplateQuery(name, "T", None, None, gene_query).is_valid() is valid


# --------------------------------------------------
# Editable constraints
# --------------------------------------------------

def test_get_editable_constraints_by_key_and_node(gene_template):
    node = gene_template.nodes["Gene.symbol"]

    by_key = gene_template.get_editable_constraints("Gene.symbol")
    by_node = gene_template.get_editable_constraints(node)

    assert by_key == by_node
    assert [c.value for c in by_key] == ["eve"]


@pytest.mark.parametrize("key", ["Gene.organism.name", "Gene.name", "Nothing.at.all"])
def test_get_editable_constraints_empty(gene_template, key):
    assert gene_template.get_editable_constraints(key) == []


def test_all_editable_constraints_is_concatenation_in_node_order(gene_template):
    expected = []
    for key in gene_template.nodes:
        expected.extend(gene_template.get_editable_constraints(key))

    assert gene_template.get_all_editable_constraints() == expected
    assert [c.code for c in expected] == ["B", "C"]


def test_enumeration_is_reproducible(gene_template):
    first = gene_template.get_all_editable_constraints()
    second = gene_template.get_all_editable_constraints()

    assert [id(c) for c in first] == [id(c) for c in second]


def test_get_editable_nodes(gene_template):
    assert [n.path for n in gene_template.get_editable_nodes()] == [
        "Gene.length",
        "Gene.symbol",
    ]


# --------------------------------------------------
# Cloning
# --------------------------------------------------

def test_clone_without_editable_constraints(gene_template):
    before = gene_template.clone()
    stripped = gene_template.clone_without_editable_constraints()

    assert list(stripped.nodes) == list(gene_template.nodes)
    assert stripped.get_all_editable_constraints() == []
    assert stripped.get_editable_nodes() == []

    for key, node in gene_template.nodes.items():
        kept = [c for c in node.constraints if not c.editable]
        assert stripped.nodes[key].constraints == kept

    assert gene_template == before
    assert len(gene_template.get_all_editable_constraints()) == 2


def test_clone_without_editable_constraints_keeps_metadata(gene_template):
    gene_template.edited = True
    stripped = gene_template.clone_without_editable_constraints()

    assert stripped.name == gene_template.name
    assert stripped.title == gene_template.title
    assert stripped.edited is True
    assert stripped.get_path_query().view == gene_template.get_path_query().view


def test_clone_copies_everything(gene_template):
    gene_template.edited = True
    clone = gene_template.clone()

    assert clone == gene_template
    assert clone.edited is True

    clone.nodes["Gene.length"].constraints[0].value = 1
    clone.nodes["Gene.symbol"].add_constraint(Constraint(op="=", value="x", editable=True))

    assert gene_template.nodes["Gene.length"].constraints[0].value == 5000
    assert len(gene_template.get_editable_constraints("Gene.symbol")) == 1


def test_independent_templates_from_same_query(gene_query):
    first = TemplateQuery("a", None, None, None, gene_query)
    second = TemplateQuery("b", None, None, None, gene_query)

    first.nodes["Gene.length"].remove_editable_constraints()

    assert len(second.get_editable_constraints("Gene.length")) == 1
