"""Markdown assembler.

Builds the final document from an ApiDocument, in four parts: the header
with the path table, the reference table, per-operation details and the
reference appendix. Schemas are rendered through ``render_schema``.
"""

import json
import re
from typing import Any

from openapi_md.parser.base import ApiDocument, PathMethod
from openapi_md.render.refs import COMPONENTS_PREFIX, ref_name, resolve
from openapi_md.render.schema import render_schema

DEFAULT_TITLE = "Api-Document"
DEFAULT_VERSION = "1.0.0"
SCHEMA_FENCE = "typescript"

# (parameter location, section heading) in output order
PARAMETER_SECTIONS = (
    ("path", "Parameters(Path)"),
    ("query", "Parameters(Query)"),
    ("body", "Parameters(Body)"),
    ("header", "Headers"),
    ("cookie", "Cookies"),
)

# component kinds that hold no schema; the appendix shows them as JSON
DUMPED_COMPONENTS = ("securitySchemes", "examples", "links", "callbacks")

_ANCHOR_PUNCTUATION = re.compile(r"[!@#$%^&*()+|~=`\[\]{};':\",./<>?]")


def render_markdown(api: ApiDocument, sort: bool = False) -> str:
    """Render the whole document. ``sort`` orders paths and references first."""
    if sort:
        api = api.sorted()
    output = render_path_table(api)
    output += render_reference_table(api)
    output += render_path_details(api)
    output += render_references(api)
    return output.rstrip()


def anchor(text: str) -> str:
    """Link anchor for a heading: punctuation stripped, spaces to hyphens, lower-cased."""
    return _ANCHOR_PUNCTUATION.sub("", text).replace(" ", "-").lower()


def markdown_text(text: Any) -> str:
    """Keep line breaks: Markdown needs two trailing spaces before a newline."""
    return str(text).replace("\n", "  \n")


def table_cell(text: Any) -> str:
    if text is None:
        return ""
    return re.sub(r"\s*\n\s*", " ", str(text)).strip().replace("|", "\\|")


def render_path_table(api: ApiDocument) -> str:
    info = api.document.get("info") or {}
    output = f"# {info.get('title') or DEFAULT_TITLE}\n\n> Version {info.get('version') or DEFAULT_VERSION}\n"
    if info.get("description"):
        output += f"\n{info['description']}\n"
    output += "\n## Path Table\n\n| Method | Path | Description |\n| --- | --- | --- |\n"
    for pm in api.path_methods:
        link = anchor(_operation_heading(pm))
        output += f"| {pm.method} | [{pm.path}](#{link}) | {table_cell(pm.operation.get('summary'))} |\n"
    return output + "\n"


def render_reference_table(api: ApiDocument) -> str:
    output = "## Reference Table\n\n| Name | Path | Description |\n| --- | --- | --- |\n"
    for key, value in api.references.items():
        target = resolve(api, value)
        if not isinstance(target, dict):
            target = {}
        label = target.get("name") or target.get("title") or key.rsplit("/", 1)[-1]
        output += f"| {table_cell(label)} | [{key}](#{anchor(key)}) | {table_cell(target.get('description'))} |\n"
    return output + "\n"


def render_path_details(api: ApiDocument) -> str:
    output = "## Path Details\n\n"
    for pm in api.path_methods:
        output += render_operation(api, pm)
    return output


def render_operation(api: ApiDocument, pm: PathMethod) -> str:
    """Narrative block for one operation."""
    operation = pm.operation
    output = f"***\n\n### {_operation_heading(pm)}\n\n"
    if operation.get("summary"):
        output += f"- Summary  \n{markdown_text(operation['summary'])}\n\n"
    if operation.get("description"):
        output += f"- Description  \n{markdown_text(operation['description'])}\n\n"

    security = _security_names(operation.get("security", api.document.get("security")))
    if security:
        output += "- Security  \n" + markdown_text("".join(f"{name}\n" for name in security)) + "\n"

    if isinstance(operation.get("parameters"), list):
        output += render_parameters(api, operation["parameters"])
    if operation.get("requestBody"):
        output += render_request_body(api, operation["requestBody"])
    if operation.get("responses"):
        output += render_responses(api, operation["responses"])
    return output


def render_parameters(api: ApiDocument, parameters: list[Any]) -> str:
    groups: dict[str, list[Any]] = {}
    for param in parameters:
        target = resolve(api, param)
        if not isinstance(target, dict):
            continue
        groups.setdefault(target.get("in"), []).append(param)

    output = ""
    for location, title in PARAMETER_SECTIONS:
        if location in groups:
            output += f"#### {title}\n\n"
            output += "".join(schema_block(api, param) for param in groups[location])
    return output


def render_request_body(api: ApiDocument, request_body: Any) -> str:
    output = "#### RequestBody\n\n"
    body = resolve(api, request_body)
    if isinstance(body, dict) and body.get("description"):
        output += markdown_text(body["description"]) + "\n\n"
    return output + schema_block(api, request_body)


def render_responses(api: ApiDocument, responses: Any) -> str:
    responses = resolve(api, responses)
    if not isinstance(responses, dict):
        return ""
    output = "#### Responses\n\n"
    for code, response in responses.items():
        if str(code).startswith("x-"):
            continue
        response = resolve(api, response)
        if not isinstance(response, dict):
            continue
        output += f"- {code} {response.get('description') or ''}".rstrip() + "\n\n"

        content = response.get("content")
        if not isinstance(content, dict):
            continue
        for content_type, media in content.items():
            output += f"`{content_type}`\n\n"
            if isinstance(media, dict):
                output += schema_block(api, media.get("schema"))
                output += render_examples(api, media)
    return output


def render_examples(api: ApiDocument, media: dict[str, Any]) -> str:
    output = ""
    if "example" in media:
        output += f"- Example\n\n```json\n{_json(media['example'])}\n```\n\n"
    examples = resolve(api, media.get("examples"))
    if isinstance(examples, dict) and examples:
        output += "- Examples\n\n"
        for key, value in examples.items():
            output += f"  - {key}\n\n```json\n{_json(resolve(api, value))}\n```\n\n"
    return output


def render_references(api: ApiDocument) -> str:
    output = "## References\n\n"
    for key, value in api.references.items():
        output += f"### {key}\n\n"
        if _component_kind(key) in DUMPED_COMPONENTS:
            target = resolve(api, value)
            if target is not None:
                output += f"```{SCHEMA_FENCE}\n{_json(target)}\n```\n\n"
        else:
            output += schema_block(api, value)
    return output


def schema_block(api: ApiDocument, schema: Any) -> str:
    """Fenced render of a schema, parameter, request body or response.

    Objects carrying ``content`` list each media type with its schema.
    Parameter-like objects (``schema`` key) render their schema under the
    parameter name; a parameter without a schema is dumped as JSON.
    """
    target = resolve(api, schema)
    if target is None:
        return ""
    if isinstance(target, dict) and isinstance(target.get("content"), dict):
        output = ""
        for media_type, media in target["content"].items():
            output += f"- {media_type}\n\n"
            output += schema_block(api, media.get("schema") if isinstance(media, dict) else None)
        return output

    output = f"```{SCHEMA_FENCE}\n"
    if isinstance(target, dict) and "schema" in target:
        output += _parameter_comment(schema, target)
        output += render_schema(api, target.get("name"), target["schema"], _parameter_required(target))
    elif isinstance(target, dict) and "in" in target:
        output += _json(target) + "\n"
    else:
        output += render_schema(api, None, schema)
    return output + "```\n\n"


def _operation_heading(pm: PathMethod) -> str:
    return f"[{pm.method}]{pm.path}"


def _component_kind(key: str) -> str:
    # "#/components/<kind>/<name>"
    return key[len(COMPONENTS_PREFIX):].split("/", 1)[0]


def _security_names(security: Any) -> list[str]:
    if not isinstance(security, list):
        return []
    return [
        ", ".join(str(key) for key in requirement)
        for requirement in security
        if isinstance(requirement, dict) and requirement
    ]


def _parameter_required(param: dict[str, Any]) -> bool:
    required = param.get("required")
    if isinstance(required, list):
        return param.get("name") in required
    return required is True


def _parameter_comment(original: Any, param: dict[str, Any]) -> str:
    ref = ref_name(original)
    if ref is not None:
        return f"// {ref}\n"
    description = param.get("description")
    if not isinstance(description, str) or not description.strip():
        return ""
    return "".join(f"// {line}\n" for line in description.rstrip().split("\n"))


def _json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
