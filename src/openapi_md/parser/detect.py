"""Parse raw document text as YAML or JSON."""

import json
from typing import Any

import yaml


def read_document(text: str) -> dict[str, Any] | None:
    """Parse ``text`` as YAML first, then as JSON.

    Returns the parsed mapping, or None if neither parser yields one.
    """
    try:
        data = yaml.safe_load(text)
        if isinstance(data, dict):
            return data
    except yaml.YAMLError:
        pass

    # JSON that YAML rejects (tabs in indentation, for example)
    try:
        data = json.loads(text)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def is_swagger2(document: dict[str, Any]) -> bool:
    """A document without a top-level ``openapi`` key is treated as Swagger 2.0."""
    return "openapi" not in document
