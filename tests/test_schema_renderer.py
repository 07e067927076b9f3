from openapi_md.parser.base import ApiDocument
from openapi_md.parser.openapi import create_api_document
from openapi_md.render.nodes import classify
from openapi_md.render.schema import display_value, render_composition, render_schema

REF_A = {"$ref": "#/components/schemas/A"}
REF_B = {"$ref": "#/components/schemas/B"}


def _api(schemas: dict | None = None) -> ApiDocument:
    return create_api_document({
        "openapi": "3.0.0",
        "info": {"title": "Test", "version": "1.0.0"},
        "paths": {},
        "components": {"schemas": schemas or {}},
    })


class TestRequired:
    def test_required_list_drops_question_mark(self):
        schema = {
            "type": "object",
            "required": ["id"],
            "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
        }
        assert render_schema(_api(), None, schema) == "{\n  id: integer\n  name?: string\n}\n"

    def test_boolean_true_applies_to_every_child(self):
        schema = {
            "type": "object",
            "required": True,
            "properties": {"a": {"type": "string"}, "b": {"type": "integer"}},
        }
        assert render_schema(_api(), None, schema) == "{\n  a: string\n  b: integer\n}\n"

    def test_boolean_false_marks_every_child_optional(self):
        schema = {
            "type": "object",
            "required": False,
            "properties": {"a": {"type": "string"}, "b": {"type": "integer"}},
        }
        assert render_schema(_api(), None, schema) == "{\n  a?: string\n  b?: integer\n}\n"

    def test_requiredness_is_recomputed_per_level(self):
        schema = {
            "type": "object",
            "required": ["inner"],
            "properties": {
                "inner": {"type": "object", "properties": {"x": {"type": "string"}}},
            },
        }
        assert render_schema(_api(), None, schema) == "{\n  inner: {\n    x?: string\n  }\n}\n"


class TestPrimitives:
    def test_array_of_strings(self):
        schema = {"type": "array", "items": {"type": "string"}}
        assert render_schema(_api(), "name", schema) == "name?: string[]\n"

    def test_required_array(self):
        schema = {"type": "array", "items": {"type": "string"}}
        assert render_schema(_api(), "tags", schema, required=True) == "tags: string[]\n"

    def test_array_without_items(self):
        assert render_schema(_api(), "name", {"type": "array"}) == "name?: any[]\n"

    def test_nested_arrays(self):
        schema = {"type": "array", "items": {"type": "array", "items": {"type": "number"}}}
        assert render_schema(_api(), "grid", schema) == "grid?: number[][]\n"

    def test_enum_overrides_type(self):
        schema = {"type": "string", "enum": ["a", "b"]}
        assert render_schema(_api(), "status", schema) == "status?: enum[a, b]\n"

    def test_multiple_types(self):
        assert render_schema(_api(), "v", {"type": ["string", "null"]}) == "v?: string | null\n"

    def test_default_comment(self):
        schema = {"type": "string", "default": "available"}
        assert render_schema(_api(), "s", schema) == "s?: string //default: available\n"

    def test_falsy_defaults_are_shown(self):
        assert render_schema(_api(), "count", {"type": "integer", "default": 0}) == "count?: integer //default: 0\n"
        assert render_schema(_api(), "flag", {"type": "boolean", "default": False}) == "flag?: boolean //default: false\n"

    def test_unnamed_primitive(self):
        assert render_schema(_api(), None, {"type": "string"}) == "string\n"

    def test_display_value(self):
        assert display_value(True) == "true"
        assert display_value(None) == "null"
        assert display_value([1, 2]) == "[1, 2]"
        assert display_value(1.5) == "1.5"


class TestComments:
    def test_description_lines(self):
        schema = {"type": "string", "description": "line one\nline two"}
        assert render_schema(_api(), "a", schema) == "// line one\n// line two\na?: string\n"

    def test_reference_wins_over_description(self):
        api = _api({"A": {"type": "object", "description": "An A", "properties": {"x": {"type": "string"}}}})
        result = render_schema(api, "a", REF_A)
        assert result == "// #/components/schemas/A\na: {\n  x?: string\n}\n"
        assert "An A" not in result

    def test_array_shows_only_the_element_description(self):
        schema = {
            "type": "object",
            "properties": {
                "tags": {"type": "array", "description": "Tag list", "items": {"type": "string", "description": "One tag"}},
                "ids": {"type": "array", "description": "Id list", "items": {"type": "integer"}},
            },
        }
        assert render_schema(_api(), None, schema) == (
            "{\n"
            "  // One tag\n"
            "  tags?: string[]\n"
            "  ids?: integer[]\n"
            "}\n"
        )

    def test_nested_comment_is_indented(self):
        api = _api({"A": {"type": "string"}})
        schema = {"type": "object", "properties": {"a": REF_A}}
        assert render_schema(api, None, schema) == "{\n  // #/components/schemas/A\n  a?: string\n}\n"


class TestReferences:
    def test_missing_reference_renders_empty(self):
        assert render_schema(_api(), "a", {"$ref": "#/components/schemas/Missing"}) == ""

    def test_missing_reference_keeps_siblings(self):
        schema = {
            "type": "object",
            "properties": {
                "a": {"$ref": "#/components/schemas/Missing"},
                "b": {"type": "string"},
            },
        }
        assert render_schema(_api(), None, schema) == "{\n  b?: string\n}\n"

    def test_external_reference_is_a_placeholder(self):
        assert render_schema(_api(), "pet", {"$ref": "other.yaml#/Pet"}) == "pet: other.yaml#/Pet\n"

    def test_alias_chain_is_followed(self):
        api = _api({"Alias": REF_A, "A": {"type": "string"}})
        result = render_schema(api, "x", {"$ref": "#/components/schemas/Alias"})
        assert result == "// #/components/schemas/Alias\nx?: string\n"

    def test_siblings_expand_the_same_reference(self):
        api = _api({"A": {"type": "string"}})
        schema = {"type": "object", "properties": {"first": REF_A, "second": REF_A}}
        assert render_schema(api, None, schema) == (
            "{\n"
            "  // #/components/schemas/A\n"
            "  first?: string\n"
            "  // #/components/schemas/A\n"
            "  second?: string\n"
            "}\n"
        )


class TestCycles:
    NODE = {
        "type": "object",
        "properties": {
            "value": {"type": "string"},
            "next": {"$ref": "#/components/schemas/Node"},
        },
    }

    def test_self_reference_from_reference_root(self):
        api = _api({"Node": self.NODE})
        assert render_schema(api, None, {"$ref": "#/components/schemas/Node"}) == (
            "// #/components/schemas/Node\n"
            "{\n"
            "  value?: string\n"
            "  next: #/components/schemas/Node\n"
            "}\n"
        )

    def test_self_reference_from_raw_root_expands_once_more(self):
        api = _api({"Node": self.NODE})
        assert render_schema(api, None, self.NODE) == (
            "{\n"
            "  value?: string\n"
            "  // #/components/schemas/Node\n"
            "  next: {\n"
            "    value?: string\n"
            "    next: #/components/schemas/Node\n"
            "  }\n"
            "}\n"
        )

    def test_cycle_through_intermediate_reference(self):
        api = _api({
            "A": {"type": "object", "properties": {"b": REF_B}},
            "B": {"type": "object", "properties": {"a": REF_A}},
        })
        assert render_schema(api, None, REF_A) == (
            "// #/components/schemas/A\n"
            "{\n"
            "  // #/components/schemas/B\n"
            "  b: {\n"
            "    a: #/components/schemas/A\n"
            "  }\n"
            "}\n"
        )

    def test_cycle_through_array_items(self):
        api = _api({
            "Tree": {
                "type": "object",
                "properties": {"children": {"type": "array", "items": {"$ref": "#/components/schemas/Tree"}}},
            },
        })
        assert render_schema(api, None, {"$ref": "#/components/schemas/Tree"}) == (
            "// #/components/schemas/Tree\n"
            "{\n"
            "  children: #/components/schemas/Tree[]\n"
            "}\n"
        )

    def test_object_containing_itself_without_reference(self):
        node = {"type": "object", "properties": {"value": {"type": "string"}}}
        node["properties"]["child"] = node
        assert render_schema(_api({"Node": node}), None, node) == (
            "{\n"
            "  value?: string\n"
            "  child?: [Circular]\n"
            "}\n"
        )

    def test_array_containing_itself(self):
        arr = {"type": "array"}
        arr["items"] = arr
        assert render_schema(_api(), "a", arr) == "a?: [Circular][]\n"

    def test_composition_containing_itself(self):
        choice = {"oneOf": [{"type": "string"}]}
        choice["oneOf"].append(choice)
        assert render_schema(_api(), "c", choice) == "c?: string | [Circular]\n"

    def test_rendering_is_deterministic(self):
        api = _api({"Node": self.NODE})
        first = render_schema(api, "root", {"$ref": "#/components/schemas/Node"})
        assert render_schema(api, "root", {"$ref": "#/components/schemas/Node"}) == first


class TestCompositions:
    def test_any_of_wraps_partial(self):
        schema = {"anyOf": [REF_A, REF_B]}
        assert render_schema(_api(), "v", schema) == (
            "v?: Partial(#/components/schemas/A) & Partial(#/components/schemas/B)\n"
        )

    def test_operators(self):
        branches = [{"type": "string"}, {"type": "integer"}]
        assert render_composition(_api(), classify({"anyOf": branches})) == "Partial(string) & Partial(integer)"
        assert render_composition(_api(), classify({"allOf": branches})) == "string & integer"
        assert render_composition(_api(), classify({"oneOf": branches})) == "string | integer"

    def test_required_composition(self):
        schema = {"allOf": [REF_A, REF_B]}
        assert render_schema(_api(), "v", schema, required=True) == (
            "v: #/components/schemas/A & #/components/schemas/B\n"
        )

    def test_inline_object_branch(self):
        schema = {
            "oneOf": [
                {"type": "object", "description": "hidden", "properties": {"x": {"type": "string"}}},
                {"type": "null"},
            ],
        }
        assert render_schema(_api(), "v", schema) == "v?: {\n  x?: string\n} | null\n"

    def test_inline_object_branch_is_indented_with_its_property(self):
        schema = {
            "type": "object",
            "properties": {
                "v": {"oneOf": [{"type": "object", "properties": {"x": {"type": "string"}}}, REF_A]},
            },
        }
        assert render_schema(_api(), None, schema) == (
            "{\n"
            "  v?: {\n"
            "    x?: string\n"
            "  } | #/components/schemas/A\n"
            "}\n"
        )

    def test_array_and_unknown_branches(self):
        assert render_composition(_api(), classify({"anyOf": [{"type": "array", "items": REF_A}]})) == (
            "Partial(#/components/schemas/A[])"
        )
        assert render_composition(_api(), classify({"oneOf": [{}, {"type": "string"}]})) == "any | string"

    def test_description_comment(self):
        schema = {"description": "Either", "oneOf": [{"type": "string"}, {"type": "integer"}]}
        assert render_schema(_api(), "v", schema) == "// Either\nv?: string | integer\n"

    def test_referenced_composition_comment_is_the_reference(self):
        api = _api({"Choice": {"description": "pick one", "oneOf": [{"type": "string"}, {"type": "integer"}]}})
        result = render_schema(api, "c", {"$ref": "#/components/schemas/Choice"})
        assert result == "// #/components/schemas/Choice\nc?: string | integer\n"


class TestFallback:
    def test_empty_schema_is_dumped(self):
        assert render_schema(_api(), "anything", {}) == "anything?: {}\n"

    def test_unrecognised_shape_is_dumped_as_json(self):
        assert render_schema(_api(), "x", {"nullable": True}) == 'x?: {\n  "nullable": true\n}\n'

    def test_nested_dump_is_indented(self):
        schema = {"type": "object", "properties": {"x": {"nullable": True}}}
        assert render_schema(_api(), None, schema) == '{\n  x?: {\n    "nullable": true\n  }\n}\n'
