"""
Tests for schemas: facets, the Schema metaclass, the adapter's two
renditions, and the built-in reusable shapes.
"""

import uuid

import pytest
from jsonschema import Draft202012Validator, FormatChecker

from strata.faults import ComponentConflictFault
from strata.schemas import (
    BoolFacet,
    ChoiceFacet,
    ComponentRegistry,
    ErrorResponse,
    IdParam,
    IntFacet,
    ListFacet,
    ObjectFacet,
    PaginationQuery,
    Schema,
    SuccessMessage,
    TextFacet,
    UnionFacet,
    UUIDFacet,
    ValidationErrorResponse,
    ValidationFault,
    ValidationIssue,
    component_ref,
    paginated,
    to_document_node,
    to_validator,
)
from strata.schemas.builtins import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

from tests.conftest import UserSchema


# ============================================================================
# Document conformance (JSON Schema 2020-12, the dialect of OpenAPI 3.1)
# ============================================================================

def conforms(node, value, components):
    """Whether a JSON value satisfies a document node."""
    root = dict(node, components={"schemas": components})
    validator = Draft202012Validator(root, format_checker=FormatChecker())
    return validator.is_valid(value)


# ============================================================================
# Facets
# ============================================================================

class TestFacets:

    def test_text_schema(self):
        node = TextFacet(min_length=2, max_length=5, help_text="Short").to_schema()
        assert node == {"type": "string", "description": "Short", "minLength": 2, "maxLength": 5}

    def test_text_rejects_non_string(self):
        with pytest.raises(ValidationFault) as exc_info:
            TextFacet().validate(12)
        assert exc_info.value.issues[0].kind == "type"

    def test_int_coercion_only_when_requested(self):
        facet = IntFacet()
        assert facet.validate("12", coerce=True) == 12
        with pytest.raises(ValidationFault):
            facet.validate("12")
        with pytest.raises(ValidationFault):
            facet.validate(True)

    def test_int_range(self):
        facet = IntFacet(min_value=1, max_value=10)
        assert facet.to_schema() == {"type": "integer", "minimum": 1, "maximum": 10}
        with pytest.raises(ValidationFault) as exc_info:
            facet.validate(11)
        assert exc_info.value.issues[0].kind == "maximum"

    def test_bool_coercion(self):
        facet = BoolFacet()
        assert facet.validate("yes", coerce=True) is True
        with pytest.raises(ValidationFault):
            facet.validate("yes")

    def test_choice(self):
        facet = ChoiceFacet(choices=["a", "b"])
        assert facet.to_schema() == {"type": "string", "enum": ["a", "b"]}
        with pytest.raises(ValidationFault) as exc_info:
            facet.validate("c")
        assert exc_info.value.issues[0].kind == "enum"

    def test_nullable(self):
        assert TextFacet(allow_null=True).to_schema()["type"] == ["string", "null"]
        assert TextFacet(allow_null=True).validate(None) is None
        with pytest.raises(ValidationFault) as exc_info:
            TextFacet().validate(None)
        assert exc_info.value.issues[0].kind == "nullable"

    def test_nullable_choice_lists_null(self):
        facet = ChoiceFacet(choices=["a", "b"], allow_null=True)
        assert facet.to_schema() == {"type": ["string", "null"], "enum": ["a", "b", None]}
        assert facet.validate(None) is None

    @pytest.mark.parametrize("value", [
        "12345678123456781234567812345678",
        "{12345678-1234-5678-1234-567812345678}",
        "urn:uuid:12345678-1234-5678-1234-567812345678",
        "12345678-1234-5678-1234-567812345678\n",
    ])
    def test_uuid_requires_canonical_form(self, value):
        with pytest.raises(ValidationFault) as exc_info:
            UUIDFacet().validate(value)
        assert exc_info.value.issues[0].kind == "format"
        assert not conforms(UUIDFacet().to_schema(), value, {})

    def test_uuid_accepts_canonical_upper_case(self):
        value = "12345678-ABCD-5678-1234-567812345678"
        assert UUIDFacet().validate(value) == uuid.UUID(value)

    def test_nullable_reference(self):
        registry = ComponentRegistry()
        facet = ObjectFacet({"a": TextFacet()}, component="Thing", allow_null=True)
        assert facet.to_schema(registry) == {"anyOf": [component_ref("Thing"), {"type": "null"}]}

    def test_list_paths_include_index(self):
        with pytest.raises(ValidationFault) as exc_info:
            ListFacet(IntFacet()).validate([1, "x", 3, "y"], path=("items",))
        assert [issue.path for issue in exc_info.value.issues] == [("items", 1), ("items", 3)]

    def test_object_aggregates_issues(self):
        facet = ObjectFacet({"a": IntFacet(), "b": TextFacet(), "c": IntFacet(default=3)})
        with pytest.raises(ValidationFault) as exc_info:
            facet.validate({"a": "x"})
        issues = {issue.path: issue.kind for issue in exc_info.value.issues}
        assert issues == {("a",): "type", ("b",): "required"}

    def test_object_fills_defaults_and_drops_unknown(self):
        facet = ObjectFacet({"a": IntFacet(), "c": IntFacet(default=3)})
        assert facet.validate({"a": 1, "zzz": True}) == {"a": 1, "c": 3}

    def test_object_additional_properties(self):
        facet = ObjectFacet({"a": IntFacet()}, additional_properties=True)
        assert facet.validate({"a": 1, "extra": "kept"}) == {"a": 1, "extra": "kept"}
        assert facet.to_schema()["additionalProperties"] is True

    def test_union_first_match_wins(self):
        facet = UnionFacet([IntFacet(), TextFacet()])
        assert facet.validate(3) == 3
        assert facet.validate("x") == "x"
        with pytest.raises(ValidationFault):
            facet.validate([1])

    def test_custom_validator(self):
        def even(value):
            if value % 2:
                raise ValueError("Must be even")

        facet = IntFacet(validators=[even])
        assert facet.validate(4) == 4
        with pytest.raises(ValidationFault) as exc_info:
            facet.validate(3)
        assert exc_info.value.issues[0] == ValidationIssue((), "Must be even", "custom")


# ============================================================================
# Schema classes
# ============================================================================

class TestSchemaMeta:

    def test_facets_collected_in_order(self):
        assert UserSchema.facet_names() == ["id", "email", "name", "age"]
        assert UserSchema.component_name() == "User"

    def test_facets_removed_from_class_namespace(self):
        assert "email" not in UserSchema.__dict__

    def test_inheritance(self):
        class Base(Schema):
            a = IntFacet()
            b = IntFacet()

        class Child(Base):
            b = TextFacet()
            c = BoolFacet()

        assert Child.facet_names() == ["a", "b", "c"]
        assert isinstance(Child.get_facet("b"), TextFacet)
        assert Base.component_name() is None

    def test_as_facet_cached(self):
        assert UserSchema.as_facet() is UserSchema.as_facet()


# ============================================================================
# Adapter
# ============================================================================

class TestAdapter:

    def test_named_schema_is_referenced(self):
        registry = ComponentRegistry()
        node = to_document_node(UserSchema, registry)
        assert node == {"$ref": "#/components/schemas/User"}
        assert "User" in registry
        component = registry.schemas()["User"]
        assert component["required"] == ["id", "email", "name"]
        assert set(component["properties"]) == {"id", "email", "name", "age"}

    def test_named_schema_inlined_without_registry(self):
        node = to_document_node(UserSchema)
        assert node["type"] == "object"
        assert "properties" in node

    def test_anonymous_schema_inlined(self):
        registry = ComponentRegistry()
        node = to_document_node(IdParam, registry)
        assert node["properties"]["id"]["format"] == "uuid"
        assert len(registry) == 0

    def test_nested_named_schema_referenced(self):
        class Team(Schema):
            members = ListFacet(UserSchema)

            class Spec:
                name = "Team"

        registry = ComponentRegistry()
        to_document_node(Team, registry)
        team = registry.schemas()["Team"]
        assert team["properties"]["members"]["items"] == {"$ref": "#/components/schemas/User"}

    def test_conflicting_component_names(self):
        class OtherUser(Schema):
            handle = TextFacet()

            class Spec:
                name = "User"

        registry = ComponentRegistry()
        to_document_node(UserSchema, registry)
        with registry.origin("UsersController.show"):
            with pytest.raises(ComponentConflictFault) as exc_info:
                to_document_node(OtherUser, registry)
        assert "UsersController.show" in exc_info.value.message
        assert exc_info.value.is_fatal

    def test_identical_component_registered_twice(self):
        registry = ComponentRegistry()
        to_document_node(UserSchema, registry)
        to_document_node(UserSchema, registry)
        assert len(registry) == 1

    def test_validator_result(self):
        validate = to_validator(UserSchema)
        user_id = str(uuid.uuid4())
        result = validate({"id": user_id, "email": "a@b.io", "name": "Ada"})
        assert result.ok and bool(result)
        assert result.value["id"] == uuid.UUID(user_id)
        assert validate.facet is UserSchema.as_facet()

    def test_validator_failure_to_fault(self):
        result = to_validator(UserSchema)({"email": "nope"})
        assert not result
        fault = result.to_fault()
        assert fault.status == 400
        kinds = {issue.path: issue.kind for issue in fault.issues}
        assert kinds[("id",)] == "required"
        assert kinds[("email",)] == "format"


class TestValidatorDocumentAgreement:

    SAMPLES = [
        (UserSchema, {"id": str(uuid.uuid4()), "email": "a@b.io", "name": "Ada"}),
        (UserSchema, {"id": str(uuid.uuid4()), "email": "a@b.io", "name": "Ada", "age": 3}),
        (UserSchema, {"id": str(uuid.uuid4()), "email": "a@b.io", "name": ""}),
        (UserSchema, {"id": str(uuid.uuid4()), "email": "a@b.io", "name": "Ada", "age": "3"}),
        (UserSchema, {"id": str(uuid.uuid4()), "email": "a@b.io", "name": "Ada", "age": True}),
        (UserSchema, {"email": "a@b.io", "name": "Ada"}),
        (UserSchema, "not an object"),
        (SuccessMessage, {"message": "ok"}),
        (SuccessMessage, {"message": 1}),
        (SuccessMessage, {}),
        (paginated(UserSchema), {"data": [], "pagination": {"page": 1, "limit": 20, "total": 0, "totalPages": 0}}),
        (paginated(UserSchema), {"data": [{}], "pagination": {"page": 1, "limit": 20, "total": 0, "totalPages": 0}}),
        (paginated(UserSchema), {"data": []}),
        (PaginationQuery, {"limit": 101}),
        (ObjectFacet({"tags": ListFacet(TextFacet(), min_items=0)}), {"tags": ["a", 2]}),
        (ObjectFacet({"v": UnionFacet([IntFacet(), TextFacet()], allow_null=True)}), {"v": None}),
        (ChoiceFacet(choices=["a", "b"], allow_null=True), None),
        (ChoiceFacet(choices=["a", "b"], allow_null=True), "a"),
        (ObjectFacet({"id": UUIDFacet()}), {"id": "12345678-1234-5678-1234-567812345678"}),
        (ObjectFacet({"id": UUIDFacet()}), {"id": "12345678123456781234567812345678"}),
        (ObjectFacet({"id": UUIDFacet()}), {"id": "{12345678-1234-5678-1234-567812345678}"}),
        (ObjectFacet({"id": UUIDFacet()}), {"id": "urn:uuid:12345678-1234-5678-1234-567812345678"}),
    ]

    @pytest.mark.parametrize("schema,value", SAMPLES)
    def test_accepted_values_conform(self, schema, value):
        registry = ComponentRegistry()
        node = to_document_node(schema, registry)
        result = to_validator(schema)(value)
        if result.ok:
            assert conforms(node, value, registry.schemas())

    @pytest.mark.parametrize("schema", [UserSchema, SuccessMessage, ErrorResponse, ValidationErrorResponse])
    def test_required_omission_rejected_by_both(self, schema):
        registry = ComponentRegistry()
        node = to_document_node(schema, registry)
        component = registry.schemas()[schema.component_name()]
        for name in component["required"]:
            payload = {other: None for other in component["properties"] if other != name}
            assert not conforms(node, payload, registry.schemas())
            result = to_validator(schema)(payload)
            assert not result.ok
            assert ValidationIssue((name,), "This field is required", "required") in result.issues


# ============================================================================
# Built-in schemas
# ============================================================================

class TestBuiltins:

    def test_id_param(self):
        result = to_validator(IdParam, coerce=True)({"id": "not-a-uuid"})
        assert not result.ok
        assert result.issues[0].path == ("id",)

    def test_pagination_defaults(self):
        result = to_validator(PaginationQuery, coerce=True)({})
        assert result.value == {"page": DEFAULT_PAGE, "limit": DEFAULT_LIMIT}
        assert (DEFAULT_PAGE, DEFAULT_LIMIT, MAX_LIMIT) == (1, 20, 100)

    def test_pagination_limit_bounds(self):
        validate = to_validator(PaginationQuery, coerce=True)
        assert validate({"page": "2", "limit": "100"}).value == {"page": 2, "limit": 100}
        assert not validate({"limit": "101"}).ok
        assert not validate({"page": "0"}).ok

    def test_pagination_document_defaults(self):
        node = to_document_node(PaginationQuery)
        assert node["properties"]["page"]["default"] == 1
        assert node["properties"]["limit"]["maximum"] == 100
        assert "required" not in node

    def test_error_response_shape(self):
        registry = ComponentRegistry()
        to_document_node(ErrorResponse, registry)
        node = registry.schemas()["ErrorResponse"]
        assert node["required"] == ["code", "message", "timestamp"]
        assert node["properties"]["timestamp"]["format"] == "date-time"

    def test_validation_error_extends_error(self):
        registry = ComponentRegistry()
        to_document_node(ValidationErrorResponse, registry)
        node = registry.schemas()["ValidationErrorResponse"]
        assert list(node["properties"]) == ["code", "message", "timestamp", "metadata", "issues"]
        assert node["properties"]["issues"]["items"] == {"$ref": "#/components/schemas/ValidationIssue"}
        assert "ValidationIssue" in registry

    def test_fault_body_matches_validation_error_schema(self):
        fault = ValidationFault([ValidationIssue(("body", "email"), "Invalid email address", "format")])
        body = fault.as_response_body()
        assert body["issues"] == [{"path": ["body", "email"], "message": "Invalid email address", "code": "format"}]
        assert to_validator(ValidationErrorResponse)(body).ok

    def test_paginated_named_after_item(self):
        envelope = paginated(UserSchema)
        assert envelope.component_name() == "PaginatedUser"
        registry = ComponentRegistry()
        to_document_node(envelope, registry)
        node = registry.schemas()["PaginatedUser"]
        assert node["properties"]["data"]["items"] == {"$ref": "#/components/schemas/User"}
        assert node["properties"]["pagination"] == {"$ref": "#/components/schemas/PaginationMeta"}

    def test_paginated_anonymous_item(self):
        envelope = paginated(ObjectFacet({"x": IntFacet()}))
        assert envelope.component_name() is None
        node = to_document_node(envelope, ComponentRegistry())
        assert node["properties"]["data"]["type"] == "array"
        assert node["properties"]["data"]["items"]["properties"] == {"x": {"type": "integer"}}

    def test_paginated_explicit_name(self):
        assert paginated(UserSchema, name="UserPage").component_name() == "UserPage"
