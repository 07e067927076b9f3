"""Swagger 2.0 to OpenAPI 3.0 upgrade.

Handles:
- definitions / parameters / responses / securityDefinitions -> components
- $ref prefixes rewritten to their #/components/ counterparts
- host + basePath + schemes -> servers
- body and formData parameters -> requestBody
- parameter and header type keywords -> schema
- response schema (+ examples) -> content, per produces type
"""

import copy
from typing import Any

OPENAPI_VERSION = "3.0.3"
DEFAULT_MEDIA_TYPE = "application/json"
MULTIPART = "multipart/form-data"
URL_ENCODED = "application/x-www-form-urlencoded"

REF_PREFIXES = {
    "#/definitions/": "#/components/schemas/",
    "#/parameters/": "#/components/parameters/",
    "#/responses/": "#/components/responses/",
}

# Swagger 2 keywords that live directly on a parameter/header but belong under `schema` in v3
SCHEMA_KEYWORDS = (
    "type", "format", "items", "enum", "default",
    "minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum",
    "minLength", "maxLength", "pattern",
    "minItems", "maxItems", "uniqueItems", "multipleOf",
)

OAUTH2_FLOWS = {
    "implicit": "implicit",
    "password": "password",
    "application": "clientCredentials",
    "accessCode": "authorizationCode",
}

OPERATION_KEYS_DROPPED = ("parameters", "responses", "consumes", "produces", "schemes")


def upgrade_document(document: dict[str, Any]) -> dict[str, Any]:
    """Return an OpenAPI 3.0 version of a Swagger 2.0 document. The input is not modified."""
    doc = _rewrite_refs(copy.deepcopy(document))
    consumes = doc.get("consumes") or [DEFAULT_MEDIA_TYPE]
    produces = doc.get("produces") or [DEFAULT_MEDIA_TYPE]

    global_params = doc.get("parameters") or {}
    body_params = {name for name, p in global_params.items() if _location(p) == "body"}
    form_params = {name: p for name, p in global_params.items() if _location(p) == "formData"}

    result: dict[str, Any] = {
        "openapi": OPENAPI_VERSION,
        "info": doc.get("info") or {"title": "", "version": ""},
    }
    servers = _servers(doc)
    if servers:
        result["servers"] = servers
    for key in ("tags", "security", "externalDocs"):
        if key in doc:
            result[key] = doc[key]

    context = _Context(consumes, produces, body_params, form_params)
    result["paths"] = {
        path: _upgrade_path_item(item, context) for path, item in (doc.get("paths") or {}).items()
    }

    components = _components(doc, global_params, context)
    if components:
        result["components"] = components
    return result


class _Context:
    """Document-level defaults needed while upgrading operations."""

    def __init__(
        self,
        consumes: list[str],
        produces: list[str],
        body_params: set[str],
        form_params: dict[str, Any],
    ):
        self.consumes = consumes
        self.produces = produces
        self.body_params = body_params
        self.form_params = form_params


def _rewrite_refs(obj: Any) -> Any:
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            for old, new in REF_PREFIXES.items():
                if ref.startswith(old):
                    obj["$ref"] = new + ref[len(old):]
                    break
        for value in obj.values():
            _rewrite_refs(value)
    elif isinstance(obj, list):
        for item in obj:
            _rewrite_refs(item)
    return obj


def _location(param: Any) -> str | None:
    return param.get("in") if isinstance(param, dict) else None


def _servers(doc: dict[str, Any]) -> list[dict[str, str]]:
    host = doc.get("host")
    base_path = doc.get("basePath") or ""
    if not host:
        return [{"url": base_path}] if base_path else []
    schemes = doc.get("schemes") or ["https"]
    return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]


def _components(doc: dict[str, Any], global_params: dict[str, Any], context: _Context) -> dict[str, Any]:
    components: dict[str, Any] = {}
    if doc.get("definitions"):
        components["schemas"] = doc["definitions"]

    parameters = {}
    request_bodies = {}
    for name, param in global_params.items():
        location = _location(param)
        if location == "body":
            request_bodies[name] = _body_request(param, context.consumes)
        elif location != "formData":
            parameters[name] = _upgrade_parameter(param)
    if parameters:
        components["parameters"] = parameters
    if request_bodies:
        components["requestBodies"] = request_bodies

    if doc.get("responses"):
        components["responses"] = {
            code: _upgrade_response(resp, context.produces) for code, resp in doc["responses"].items()
        }
    if doc.get("securityDefinitions"):
        components["securitySchemes"] = {
            name: _upgrade_security_scheme(scheme) for name, scheme in doc["securityDefinitions"].items()
        }
    return components


def _upgrade_path_item(item: Any, context: _Context) -> Any:
    if not isinstance(item, dict):
        return item
    upgraded: dict[str, Any] = {}
    for key, value in item.items():
        if key == "parameters" and isinstance(value, list):
            upgraded[key] = [
                _upgrade_parameter(p) for p in value if _location(p) not in ("body", "formData")
            ]
        elif isinstance(value, dict) and not key.startswith("x-"):
            upgraded[key] = _upgrade_operation(value, context)
        else:
            upgraded[key] = value
    return upgraded


def _upgrade_operation(operation: dict[str, Any], context: _Context) -> dict[str, Any]:
    consumes = operation.get("consumes") or context.consumes
    produces = operation.get("produces") or context.produces
    upgraded = {k: v for k, v in operation.items() if k not in OPERATION_KEYS_DROPPED}

    parameters = []
    form_data = []
    for param in operation.get("parameters") or []:
        ref_target = _global_param_name(param)
        if ref_target in context.body_params:
            upgraded["requestBody"] = {"$ref": f"#/components/requestBodies/{ref_target}"}
        elif ref_target in context.form_params:
            form_data.append(context.form_params[ref_target])
        elif _location(param) == "body":
            upgraded["requestBody"] = _body_request(param, consumes)
        elif _location(param) == "formData":
            form_data.append(param)
        else:
            parameters.append(_upgrade_parameter(param))

    if parameters:
        upgraded["parameters"] = parameters
    if form_data:
        upgraded["requestBody"] = _form_request(form_data, consumes)
    if "responses" in operation:
        upgraded["responses"] = {
            code: _upgrade_response(resp, produces) for code, resp in (operation["responses"] or {}).items()
        }
    return upgraded


def _global_param_name(param: Any) -> str | None:
    if not isinstance(param, dict) or not isinstance(param.get("$ref"), str):
        return None
    prefix = "#/components/parameters/"
    ref = param["$ref"]
    return ref[len(prefix):] if ref.startswith(prefix) else None


def _upgrade_parameter(param: Any) -> Any:
    if not isinstance(param, dict) or "$ref" in param:
        return param
    upgraded = {k: v for k, v in param.items() if k not in SCHEMA_KEYWORDS and k != "collectionFormat"}
    schema = _extract_schema(param)
    if schema:
        upgraded["schema"] = schema
    return upgraded


def _extract_schema(obj: dict[str, Any]) -> dict[str, Any]:
    schema = {k: obj[k] for k in SCHEMA_KEYWORDS if k in obj}
    if schema.get("type") == "file":
        schema["type"] = "string"
        schema["format"] = "binary"
    return schema


def _body_request(param: dict[str, Any], consumes: list[str]) -> dict[str, Any]:
    request: dict[str, Any] = {
        "content": {media_type: {"schema": param.get("schema") or {}} for media_type in consumes},
    }
    if param.get("description"):
        request["description"] = param["description"]
    if param.get("required"):
        request["required"] = True
    return request


def _form_request(params: list[dict[str, Any]], consumes: list[str]) -> dict[str, Any]:
    properties = {}
    required = []
    for param in params:
        schema = _extract_schema(param)
        if param.get("description"):
            schema["description"] = param["description"]
        properties[param.get("name")] = schema
        if param.get("required"):
            required.append(param.get("name"))

    has_file = any(p.get("type") == "file" for p in params)
    media_type = MULTIPART if has_file or MULTIPART in consumes else URL_ENCODED
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return {"content": {media_type: {"schema": schema}}}


def _upgrade_response(response: Any, produces: list[str]) -> Any:
    if not isinstance(response, dict) or "$ref" in response:
        return response
    upgraded = {k: v for k, v in response.items() if k not in ("schema", "examples", "headers")}
    upgraded.setdefault("description", "")

    if "schema" in response:
        examples = response.get("examples") or {}
        content = {}
        for media_type in produces:
            media: dict[str, Any] = {"schema": response["schema"]}
            if media_type in examples:
                media["example"] = examples[media_type]
            content[media_type] = media
        upgraded["content"] = content

    if isinstance(response.get("headers"), dict):
        upgraded["headers"] = {
            name: _upgrade_parameter(header) for name, header in response["headers"].items()
        }
    return upgraded


def _upgrade_security_scheme(scheme: Any) -> Any:
    if not isinstance(scheme, dict):
        return scheme
    kind = scheme.get("type")
    if kind == "basic":
        upgraded = {"type": "http", "scheme": "basic"}
        if scheme.get("description"):
            upgraded["description"] = scheme["description"]
        return upgraded
    if kind != "oauth2":
        return scheme

    flow = OAUTH2_FLOWS.get(scheme.get("flow"), scheme.get("flow"))
    details: dict[str, Any] = {"scopes": scheme.get("scopes") or {}}
    if "authorizationUrl" in scheme:
        details["authorizationUrl"] = scheme["authorizationUrl"]
    if "tokenUrl" in scheme:
        details["tokenUrl"] = scheme["tokenUrl"]
    upgraded = {"type": "oauth2", "flows": {flow: details}}
    if scheme.get("description"):
        upgraded["description"] = scheme["description"]
    return upgraded
