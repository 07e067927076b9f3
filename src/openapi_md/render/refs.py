"""Reference index and resolver.

References are looked up in a flat table keyed by their canonical string
(``#/components/schemas/Pet``), built once per document.
"""

from typing import Any

from openapi_md.parser.base import ApiDocument

COMPONENTS_PREFIX = "#/components/"


def build_references(document: dict[str, Any]) -> dict[str, Any]:
    """Flatten every ``components/<kind>/<name>`` entry into one mapping."""
    references: dict[str, Any] = {}
    components = document.get("components")
    if not isinstance(components, dict):
        return references
    for kind, entries in components.items():
        if not isinstance(entries, dict):
            continue
        for name, value in entries.items():
            references[f"{COMPONENTS_PREFIX}{kind}/{name}"] = value
    return references


def ref_name(obj: Any) -> str | None:
    """Return the ``$ref`` string of a reference object, or None."""
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            return ref
    return None


def resolve(api: ApiDocument, obj: Any, visited: set[str] | None = None) -> Any:
    """Follow ``obj`` if it is a reference.

    Non-references come back unchanged. A reference missing from the table
    resolves to None. When ``visited`` is given, a reference already in it is
    returned unresolved; otherwise it is recorded there before following it.
    References outside ``#/components/`` are never followed.
    """
    ref = ref_name(obj)
    if ref is None or not ref.startswith(COMPONENTS_PREFIX):
        return obj
    if visited is not None:
        if ref in visited:
            return obj
        visited.add(ref)
    return api.references.get(ref)
