"""Data models shared by the walker and the Markdown assembler.

The walker builds one ApiDocument per conversion run; everything downstream
only reads it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class PathMethod(BaseModel):
    """A single operation found under ``paths``."""

    model_config = ConfigDict(frozen=True)

    path: str  # /pets/{petId}
    method: str  # GET / POST / ... (upper-cased)
    operation: dict[str, Any]


class ApiDocument(BaseModel):
    """An OpenAPI v3 document plus its flattened operations and references."""

    model_config = ConfigDict(frozen=True)

    document: dict[str, Any]
    path_methods: tuple[PathMethod, ...] = ()
    references: dict[str, Any] = {}  # {"#/components/schemas/Pet": {...}}

    def sorted(self) -> "ApiDocument":
        """Return a copy with operations ordered by path then method, and references by key."""
        path_methods = tuple(sorted(self.path_methods, key=lambda pm: (pm.path, pm.method)))
        references = dict(sorted(self.references.items()))
        return self.model_copy(update={"path_methods": path_methods, "references": references})
