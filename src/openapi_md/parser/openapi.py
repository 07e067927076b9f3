"""OpenAPI 3 document walker.

Collects (path, method, operation) triples and the flattened reference
table into an ApiDocument.
"""

from typing import Any

from openapi_md.render.refs import build_references

from .base import ApiDocument, PathMethod

# Path-level parameters are shared by every method of a path; not rendered.
SHARED_PARAMETERS_KEY = "parameters"


def create_api_document(document: dict[str, Any]) -> ApiDocument:
    """Walk ``document.paths`` and flatten ``components``."""
    path_methods: list[PathMethod] = []
    paths = document.get("paths")
    if not isinstance(paths, dict):
        paths = {}

    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method == SHARED_PARAMETERS_KEY or not isinstance(operation, dict):
                continue
            path_methods.append(
                PathMethod(path=str(path), method=str(method).upper(), operation=operation)
            )

    return ApiDocument(
        document=document,
        path_methods=tuple(path_methods),
        references=build_references(document),
    )
