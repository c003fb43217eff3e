"""
Template XML Binding
====================

Converts `TemplateQuery` objects to and from XML.

Document Layout
---------------
<template name="gene_length" title="Genes with long length"
          important="true" keywords="gene length" edited="false">
  <description>Find genes longer than a given length</description>
  <comment>private note</comment>
  <query model="genomic" view="Gene.symbol Gene.length"
         sortOrder="Gene.length asc">
    <node path="Gene.length" type="int">
      <constraint op="&gt;" editable="true" code="A">
        <value>5000</value>
      </constraint>
    </node>
  </query>
  <summary path="Gene.length" status="complete">
    <value>1200</value>
    <value null="true"/>
  </summary>
</template>

Several templates can be stored together under a `<template-queries>`
root element.

Conventions
-----------
- An attribute or child element that is absent means None.
- Free text (description, comment, values) is element text so that
  newlines and tabs survive the round trip. Text the parser would not
  give back unchanged (carriage returns, control characters) is
  written base64-encoded and marked `encoding="base64"`.
- Values are typed by the node's `type`: `int`, `float`, `bool` are
  converted back, every other type (including class types) stays a
  string. A value whose own type differs from that, e.g. an int
  returned for a string node, carries a `type` attribute.

Errors
------
Every failure raises `TemplateBindingError`: a constraint value that
does not fit its node's type, a value that is not a str, int, float or
bool, an attribute holding characters XML cannot represent, a document
that is not XML, or one that does not follow the layout above. Paths
that fail to resolve against a supplied model raise `PathError`.

Dependencies
------------
- xml.etree.ElementTree
"""

import base64
import binascii
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, Optional

from pathquery.config.settings import Settings
from pathquery.exceptions import TemplateBindingError
from pathquery.query.constraint import Constraint, ConstraintOp
from pathquery.query.path_node import PathNode
from pathquery.query.path_query import PathQuery
from pathquery.schema.model import Model
from pathquery.schema.path import Path
from pathquery.template.template_query import SummaryStatus, TemplateQuery


TEMPLATES_TAG = "template-queries"
TEMPLATE_TAG = "template"
QUERY_TAG = "query"
NODE_TAG = "node"
CONSTRAINT_TAG = "constraint"
SUMMARY_TAG = "summary"
VALUE_TAG = "value"

CONSTRAINT_TEXT_ATTRIBUTES = ("description", "identifier", "code")

# Non-string value types; anything else is stored as text.
VALUE_TYPES = ("int", "float", "bool")

DEFAULT_INDENT = True

BASE64 = "base64"

# Characters outside the XML 1.0 Char production.
_INVALID_XML_CHAR = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

# Element text additionally loses carriage returns to end-of-line
# normalisation on parse.
_UNPARSEABLE_TEXT = re.compile("[^\t\n\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


# --------------------------------------------------
# Value conversion
# --------------------------------------------------

def _bool_to_text(value: bool) -> str:
    return "true" if value else "false"


def _text_to_bool(text: str, what: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise TemplateBindingError(f"Invalid boolean '{text}' for {what}")


def _fits(node_type: str, value: Any) -> bool:
    if node_type == "bool":
        return isinstance(value, bool)
    if node_type == "int":
        return isinstance(value, int) and not isinstance(value, bool)
    if node_type == "float":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, str)


def _value_type(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "str"
    return None


def _stored_type(node_type: str) -> str:
    # Class-typed nodes hold identifiers, which are strings.
    return node_type if node_type in VALUE_TYPES else "str"


def _value_to_text(value: Any) -> str:
    if isinstance(value, bool):
        return _bool_to_text(value)
    return str(value)


def _text_to_value(node_type: str, text: str) -> Any:
    try:
        if node_type == "int":
            return int(text)
        if node_type == "float":
            return float(text)
    except ValueError as e:
        raise TemplateBindingError(
            f"Value '{text}' is not a valid {node_type}"
        ) from e
    if node_type == "bool":
        return _text_to_bool(text, "value")
    return text


# --------------------------------------------------
# Free text
# --------------------------------------------------

def _set_text(element: ET.Element, text: str) -> None:
    if _UNPARSEABLE_TEXT.search(text):
        element.set("encoding", BASE64)
        text = base64.b64encode(text.encode("utf-8", "surrogatepass")).decode("ascii")
    element.text = text


def _get_text(element: ET.Element) -> str:
    text = element.text or ""
    encoding = element.get("encoding")
    if encoding is None:
        return text
    if encoding != BASE64:
        raise TemplateBindingError(f"Unsupported text encoding '{encoding}'")
    try:
        return base64.b64decode(text, validate=True).decode("utf-8", "surrogatepass")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise TemplateBindingError(f"Invalid {BASE64} text in <{element.tag}>") from e


def _value_element(parent: ET.Element, value: Any, node_type: str) -> ET.Element:
    element = ET.SubElement(parent, VALUE_TAG)
    if value is None:
        element.set("null", "true")
        return element

    value_type = _value_type(value)
    if value_type is None:
        raise TemplateBindingError(
            f"Cannot store value {value!r} of type {type(value).__name__}"
        )
    if value_type != _stored_type(node_type):
        element.set("type", value_type)
    _set_text(element, _value_to_text(value))
    return element


def _read_value(element: ET.Element, node_type: str) -> Any:
    if element.get("null") == "true":
        return None
    value_type = element.get("type", _stored_type(node_type))
    if value_type not in VALUE_TYPES and value_type != "str":
        raise TemplateBindingError(f"Unsupported value type '{value_type}'")
    return _text_to_value(value_type, _get_text(element))


# --------------------------------------------------
# Serialization
# --------------------------------------------------

def _set_optional(element: ET.Element, key: str, value: Optional[str]) -> None:
    if value is None:
        return
    if _INVALID_XML_CHAR.search(value):
        raise TemplateBindingError(
            f"Attribute '{key}' of <{element.tag}> contains characters XML cannot hold"
        )
    element.set(key, value)


def _text_child(parent: ET.Element, tag: str, text: Optional[str]) -> None:
    if text is not None:
        _set_text(ET.SubElement(parent, tag), text)


def _constraint_to_element(parent: ET.Element, node: PathNode, constraint: Constraint) -> None:
    if constraint.value is not None and not _fits(node.type, constraint.value):
        raise TemplateBindingError(
            f"Constraint {constraint} does not fit type '{node.type}' "
            f"of node {node.path}"
        )

    element = ET.SubElement(parent, CONSTRAINT_TAG)
    element.set("op", constraint.op.value)
    element.set("editable", _bool_to_text(constraint.editable))
    for key in CONSTRAINT_TEXT_ATTRIBUTES:
        _set_optional(element, key, getattr(constraint, key))
    if constraint.value is not None:
        _value_element(element, constraint.value, node.type)


def _query_to_element(parent: ET.Element, query: PathQuery) -> None:
    element = ET.SubElement(parent, QUERY_TAG)
    _set_optional(element, "model", query.model_name)
    element.set("view", " ".join(query.view))
    if query.sort_order:
        element.set(
            "sortOrder",
            " ".join(f"{path} {direction}" for path, direction in query.sort_order),
        )

    for node in query.nodes.values():
        node_element = ET.SubElement(element, NODE_TAG)
        node_element.set("path", node.path)
        node_element.set("type", node.type)
        for constraint in node.constraints:
            _constraint_to_element(node_element, node, constraint)


def _template_to_element(template: TemplateQuery) -> ET.Element:
    element = ET.Element(TEMPLATE_TAG)
    _set_optional(element, "name", template.name)
    _set_optional(element, "title", template.title)
    element.set("important", _bool_to_text(template.important))
    _set_optional(element, "keywords", template.keywords)
    element.set("edited", _bool_to_text(template.edited))
    _text_child(element, "description", template.description)
    _text_child(element, "comment", template.comment)

    query = template.get_path_query()
    _query_to_element(element, query)

    for path, status in template.summary.items():
        node = query.get_node(path)
        node_type = node.type if node is not None else "str"
        summary = ET.SubElement(element, SUMMARY_TAG)
        summary.set("path", path)
        summary.set("status", status.value)
        for value in template.get_possible_values(path) or []:
            _value_element(summary, value, node_type)

    return element


def _to_string(
    root: ET.Element,
    indent: Optional[bool],
    settings: Optional[Settings],
) -> str:
    if indent is None:
        indent = settings.serialization.xml_indent if settings is not None else DEFAULT_INDENT
    if indent:
        ET.indent(root)
    return ET.tostring(root, encoding="unicode")


def to_xml(
    template: TemplateQuery,
    indent: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Serialize a template to an XML document.

    Parameters
    ----------
    template : TemplateQuery
        Template to serialize.
    indent : bool, optional
        Pretty-print the output. When omitted, taken from
        `settings.serialization.xml_indent`, else `DEFAULT_INDENT`.
    settings : Settings, optional
        Already loaded settings. Nothing is read from disk here.

    Raises
    ------
    TemplateBindingError
        If a constraint value does not fit its node's type, a stored
        value is not a str, int, float or bool, or an attribute holds
        characters XML cannot represent.
    """
    return _to_string(_template_to_element(template), indent, settings)


def templates_to_xml(
    templates: Mapping[str, TemplateQuery],
    indent: Optional[bool] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Serialize several templates under one `<template-queries>` root."""
    root = ET.Element(TEMPLATES_TAG)
    for template in templates.values():
        root.append(_template_to_element(template))
    return _to_string(root, indent, settings)


# --------------------------------------------------
# Deserialization
# --------------------------------------------------

def _parse(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise TemplateBindingError(f"Malformed template XML: {e}") from e


def _required(element: ET.Element, key: str) -> str:
    value = element.get(key)
    if value is None:
        raise TemplateBindingError(f"<{element.tag}> is missing '{key}'")
    return value


def _child_text(element: ET.Element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None:
        return None
    return _get_text(child)


def _element_to_constraint(element: ET.Element, node_type: str) -> Constraint:
    op_text = _required(element, "op")
    try:
        op = ConstraintOp(op_text)
    except ValueError as e:
        raise TemplateBindingError(f"Unsupported constraint operator '{op_text}'") from e

    values = element.findall(VALUE_TAG)
    if len(values) > 1:
        raise TemplateBindingError("A constraint carries at most one <value>")

    return Constraint(
        op=op,
        value=_read_value(values[0], node_type) if values else None,
        editable=_text_to_bool(_required(element, "editable"), "editable"),
        **{key: element.get(key) for key in CONSTRAINT_TEXT_ATTRIBUTES},
    )


def _element_to_query(element: ET.Element, model: Optional[Model]) -> PathQuery:
    model_name = element.get("model")
    if model is not None and model_name is not None and model_name != model.name:
        raise TemplateBindingError(
            f"Query is for model '{model_name}', not '{model.name}'"
        )
    query = PathQuery(model, model_name)

    for node_element in element.findall(NODE_TAG):
        path = _required(node_element, "path")
        node_type = node_element.get("type")
        if model is not None:
            resolved = Path(model, path)
            node_type = node_type or resolved.end_type
        if node_type is None:
            raise TemplateBindingError(f"<node path=\"{path}\"> is missing 'type'")
        if query.get_node(path) is not None:
            raise TemplateBindingError(f"Duplicate node '{path}'")

        node = PathNode(path=path, type=node_type)
        for constraint_element in node_element.findall(CONSTRAINT_TAG):
            node.add_constraint(_element_to_constraint(constraint_element, node_type))
        query.add_or_replace_node(path, node)

    query.set_view((element.get("view") or "").split())

    sort_tokens = (element.get("sortOrder") or "").split()
    if len(sort_tokens) % 2:
        raise TemplateBindingError(f"Malformed sortOrder '{element.get('sortOrder')}'")
    for path, direction in zip(sort_tokens[0::2], sort_tokens[1::2]):
        try:
            query.add_order_by(path, direction)
        except ValueError as e:
            raise TemplateBindingError(str(e)) from e

    return query


def _element_to_template(element: ET.Element, model: Optional[Model]) -> TemplateQuery:
    if element.tag != TEMPLATE_TAG:
        raise TemplateBindingError(f"Expected <{TEMPLATE_TAG}>, found <{element.tag}>")

    query_elements = element.findall(QUERY_TAG)
    if len(query_elements) != 1:
        raise TemplateBindingError("A template must contain exactly one <query>")
    query = _element_to_query(query_elements[0], model)

    template = TemplateQuery(
        element.get("name"),
        element.get("title"),
        _child_text(element, "description"),
        _child_text(element, "comment"),
        query,
        _text_to_bool(element.get("important", "false"), "important"),
        element.get("keywords", ""),
    )
    template.edited = _text_to_bool(element.get("edited", "false"), "edited")

    for summary in element.findall(SUMMARY_TAG):
        path = _required(summary, "path")
        try:
            status = SummaryStatus(_required(summary, "status"))
        except ValueError as e:
            raise TemplateBindingError(f"Unknown summary status for '{path}'") from e
        node = query.get_node(path)
        node_type = node.type if node is not None else "str"
        values: List[Any] = [
            _read_value(v, node_type) for v in summary.findall(VALUE_TAG)
        ]
        template.restore_summary(path, status, values)

    return template


def from_xml(text: str, model: Optional[Model] = None) -> TemplateQuery:
    """
    Read a template from an XML document produced by `to_xml`.

    Parameters
    ----------
    text : str
        XML document.
    model : Model, optional
        Schema to bind the query to. When given, every node path is
        resolved against it.

    Raises
    ------
    TemplateBindingError
        If the document is malformed.
    PathError
        If a path does not resolve against `model`.
    """
    return _element_to_template(_parse(text), model)


def templates_from_xml(text: str, model: Optional[Model] = None) -> Dict[str, TemplateQuery]:
    """
    Read a `<template-queries>` document into a name -> template mapping,
    in document order.
    """
    root = _parse(text)
    if root.tag != TEMPLATES_TAG:
        raise TemplateBindingError(f"Expected <{TEMPLATES_TAG}>, found <{root.tag}>")

    templates: Dict[str, TemplateQuery] = {}
    for element in root:
        template = _element_to_template(element, model)
        if template.name in templates:
            raise TemplateBindingError(f"Duplicate template name '{template.name}'")
        templates[template.name] = template
    return templates
