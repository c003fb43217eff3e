"""
Precompute Query Builder
========================

Builds the bounded, single-column query used to discover candidate
values for one editable node of a template.

Given a template and one of its nodes, the derived query:

1. Projects exactly that node's path (a single column).
2. Keeps every non-editable constraint, so the candidate values
   reflect the template's fixed filtering context.
3. Drops every editable constraint, including those on the target
   node itself.
4. Keeps all nodes, so it is rooted in the same object graph as the
   template and can be paged like any other query.

The template is never modified.
"""

from typing import TYPE_CHECKING, Optional, Union

from pathquery.exceptions import PathError
from pathquery.query.path_node import PathNode
from pathquery.query.path_query import PathQuery

if TYPE_CHECKING:
    from pathquery.template.template_query import TemplateQuery


def build_precompute_query(
    template: "TemplateQuery",
    base_query: Optional[PathQuery],
    node: Union[PathNode, str],
) -> PathQuery:
    """
    Build the precompute query for `node`.

    Parameters
    ----------
    template : TemplateQuery
        Template whose query supplies the filtering context.
    base_query : PathQuery, optional
        Query to derive from instead of the template's own query.
    node : PathNode or str
        Target node, or its path.

    Returns
    -------
    PathQuery
        A new query; neither the template nor `base_query` is modified.

    Raises
    ------
    PathError
        If the target node is not part of the source query.
    """
    path = node.path if isinstance(node, PathNode) else node

    if base_query is not None:
        query = base_query.clone()
    else:
        query = template.get_path_query()

    if query.get_node(path) is None:
        raise PathError(f"'{path}' is not a node of the query", path)

    for each in query.nodes.values():
        each.remove_editable_constraints()

    query.set_view([path])
    query.clear_sort_order()
    query.add_order_by(path, "asc")

    return query
