"""Schema tree renderer.

Turns a schema fragment into a TypeScript-like declaration block::

    // #/components/schemas/Pet
    pet: {
      id: integer
      name?: string
      tags?: string[]
    }

Rendering is recursive. Every call carries the references already expanded
on the way down from the root; meeting one of them again prints the
reference string instead of expanding it a second time. Fragments that
contain themselves without a ``$ref`` (YAML aliases) are tracked by
``id`` on the same path and print as ``[Circular]``.
"""

import json
from typing import Any

from openapi_md.parser.base import ApiDocument
from openapi_md.render.nodes import (
    ArrayNode,
    CompositionNode,
    ObjectNode,
    PrimitiveNode,
    ReferenceNode,
    SchemaNode,
    classify,
)
from openapi_md.render.refs import ref_name, resolve

INDENT = "  "
CIRCULAR = "[Circular]"

COMPOSITION_OPERATORS = {
    "allOf": " & ",
    "anyOf": " & ",
    "oneOf": " | ",
}


def indent(level: int) -> str:
    return INDENT * level


def display_value(value: Any) -> str:
    """Format a literal (enum member, default) as it reads in a declaration."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def render_schema(
    api: ApiDocument,
    name: str | None,
    schema: Any,
    required: bool | None = None,
    visited: frozenset[str | int] = frozenset(),
    level: int = 0,
    comment: bool = True,
) -> str:
    """Render ``schema`` as a declaration of ``name``.

    ``required`` drops the ``?`` suffix when True. ``visited`` holds the
    references (and the ids of the fragments) expanded between the root
    and this node; top-level callers leave it empty. ``comment=False``
    suppresses the leading comment line, which is what inline (single
    expression) renders need.

    A reference missing from the document renders as an empty string.
    """
    seen = set(visited)
    target = _follow(api, schema, seen)
    if isinstance(target, dict):
        # reached again without a $ref: the fragment contains itself
        if target is schema and id(target) in seen:
            return _declare(name, required, level) + CIRCULAR + "\n"
        seen.add(id(target))
    node = classify(target)
    if node is None:
        return ""
    visited = frozenset(seen)

    if isinstance(node, ReferenceNode):
        # cycle, or a reference outside #/components/
        if name is None:
            return f"{indent(level)}{node.ref}\n"
        return f"{indent(level)}{name}: {node.ref}\n"

    if isinstance(node, ArrayNode):
        # the element declaration carries its own description
        head = _ref_comment(schema, level) if comment else ""
        return head + _render_array(api, name, node, required, visited, level)

    head = _comment(schema, node, level) if comment else ""
    if isinstance(node, ObjectNode):
        return head + _render_object(api, name, node, visited, level)
    if isinstance(node, PrimitiveNode):
        return head + _declare(name, required, level) + primitive_type(node) + "\n"
    if isinstance(node, CompositionNode):
        return head + _declare(name, required, level) + render_composition(api, node, visited, level) + "\n"

    head = _ref_comment(schema, level) if comment else ""
    return head + _dump(name, required, node.raw, level)


def render_composition(
    api: ApiDocument,
    node: CompositionNode,
    visited: frozenset[str | int] = frozenset(),
    level: int = 0,
) -> str:
    """Join the branch types of an anyOf / allOf / oneOf node into one expression.

    allOf -> ``A & B``, oneOf -> ``A | B``, anyOf -> ``Partial(A) & Partial(B)``.
    """
    names = [branch_type(api, branch, visited, level) for branch in node.branches]
    if node.kind == "anyOf":
        names = [f"Partial({n})" for n in names]
    return COMPOSITION_OPERATORS[node.kind].join(names)


def branch_type(
    api: ApiDocument,
    branch: Any,
    visited: frozenset[str | int] = frozenset(),
    level: int = 0,
) -> str:
    """Short type expression for one composition branch."""
    ref = ref_name(branch)
    if ref is not None:
        return ref
    if isinstance(branch, dict) and id(branch) in visited:
        return CIRCULAR
    node = classify(branch)
    if isinstance(node, ArrayNode):
        if node.items is None:
            return "any[]"
        return branch_type(api, node.items, visited | {id(branch)}, level) + "[]"
    if isinstance(node, (ObjectNode, CompositionNode)):
        return render_schema(api, None, branch, None, visited, level, comment=False).rstrip()
    if isinstance(node, PrimitiveNode):
        return " | ".join(node.types)
    return "any"


def primitive_type(node: PrimitiveNode) -> str:
    if node.enum is not None:
        text = "enum[" + ", ".join(display_value(v) for v in node.enum) + "]"
    else:
        text = " | ".join(node.types)
    if node.has_default:
        text += f" //default: {display_value(node.default)}"
    return text


def _follow(api: ApiDocument, schema: Any, seen: set[str | int]) -> Any:
    """Resolve a chain of references, recording each one in ``seen``."""
    target = schema
    while True:
        resolved = resolve(api, target, seen)
        if resolved is target:
            return target
        target = resolved


def _render_object(
    api: ApiDocument,
    name: str | None,
    node: ObjectNode,
    visited: frozenset[str | int],
    level: int,
) -> str:
    parts = [f"{indent(level)}{name}: {{\n" if name is not None else "{\n"]
    for key, value in node.properties.items():
        parts.append(render_schema(api, key, value, node.is_required(key), visited, level + 1))
    parts.append(indent(level) + "}\n")
    return "".join(parts)


def _render_array(
    api: ApiDocument,
    name: str | None,
    node: ArrayNode,
    required: bool | None,
    visited: frozenset[str | int],
    level: int,
) -> str:
    element = ""
    if node.items is not None:
        element = render_schema(api, name, node.items, required, visited, level)
    if not element.strip():
        return _declare(name, required, level) + "any[]\n"
    return element.rstrip() + "[]\n"


def _declare(name: str | None, required: bool | None, level: int) -> str:
    if name is None:
        return ""
    return f"{indent(level)}{name}{'' if required is True else '?'}: "


def _ref_comment(schema: Any, level: int) -> str:
    ref = ref_name(schema)
    return f"{indent(level)}// {ref}\n" if ref is not None else ""


def _comment(schema: Any, node: SchemaNode, level: int) -> str:
    # a $ref wins over the referenced node's description
    ref_comment = _ref_comment(schema, level)
    if ref_comment or not node.description:
        return ref_comment
    lines = node.description.rstrip().split("\n")
    return "".join(f"{indent(level)}// {line}\n" for line in lines)


def _dump(name: str | None, required: bool | None, raw: Any, level: int) -> str:
    try:
        text = json.dumps(raw, indent=2, ensure_ascii=False, default=str)
    except ValueError:
        text = repr(raw)
    first, *rest = text.split("\n")
    lines = [_declare(name, required, level) + first]
    lines.extend(indent(level) + line for line in rest)
    return "\n".join(lines) + "\n"
