"""Typed views over raw schema fragments.

``classify`` inspects a fragment once and wraps it in one of the node
classes below, so the renderer dispatches on the class instead of probing
for keys. The wrapped fragment is kept as ``raw`` and is never modified.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

COMPOSITION_KEYWORDS = ("anyOf", "allOf", "oneOf")


class SchemaNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: Any
    description: str | None = None


class ReferenceNode(SchemaNode):
    ref: str


class ObjectNode(SchemaNode):
    properties: dict[Any, Any] = {}
    required: list[Any] | bool | None = None

    def is_required(self, name: str) -> bool | None:
        """Requiredness of the child ``name``: list membership, or the boolean itself."""
        if isinstance(self.required, list):
            return name in self.required
        return self.required


class ArrayNode(SchemaNode):
    items: Any = None


class PrimitiveNode(SchemaNode):
    types: list[str]
    enum: list[Any] | None = None
    has_default: bool = False
    default: Any = None


class CompositionNode(SchemaNode):
    kind: Literal["anyOf", "allOf", "oneOf"]
    branches: list[Any]


class UnknownNode(SchemaNode):
    """A fragment with no recognised shape."""


def classify(raw: Any) -> SchemaNode | None:
    """Wrap ``raw`` in the matching node class. None stays None."""
    if raw is None:
        return None
    if not isinstance(raw, dict):
        return UnknownNode(raw=raw)

    description = raw.get("description")
    if not isinstance(description, str):
        description = None

    ref = raw.get("$ref")
    if isinstance(ref, str):
        return ReferenceNode(raw=raw, ref=ref, description=description)

    type_ = raw.get("type")
    if type_ == "object" or (type_ is None and isinstance(raw.get("properties"), dict)):
        properties = raw.get("properties")
        required = raw.get("required")
        if not isinstance(required, (list, bool)):
            required = None
        return ObjectNode(
            raw=raw,
            description=description,
            properties=properties if isinstance(properties, dict) else {},
            required=required,
        )
    if type_ == "array" or (type_ is None and "items" in raw):
        return ArrayNode(raw=raw, description=description, items=raw.get("items"))
    if type_:
        enum = raw.get("enum")
        return PrimitiveNode(
            raw=raw,
            description=description,
            types=[str(t) for t in type_] if isinstance(type_, list) else [str(type_)],
            enum=enum if isinstance(enum, list) else None,
            has_default="default" in raw,
            default=raw.get("default"),
        )
    for keyword in COMPOSITION_KEYWORDS:
        branches = raw.get(keyword)
        if isinstance(branches, list):
            return CompositionNode(raw=raw, description=description, kind=keyword, branches=branches)
    return UnknownNode(raw=raw, description=description)
