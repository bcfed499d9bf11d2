"""
Tests for OpenAPI document synthesis.
"""

import json
import logging
import threading

import pytest

from strata.controller import Controller, ControllerBuilder, ResponseSpec, Route, RouteRegistry
from strata.faults import (
    ComponentConflictFault,
    DuplicateRouteFault,
    MissingResponseSchemaFault,
    RouteConventionFault,
)
from strata.openapi import (
    AssemblyState,
    OpenAPIConfig,
    OpenAPIGenerator,
    render_document,
)
from strata.schemas import ErrorResponse, IdParam, ObjectFacet, Schema, SuccessMessage, TextFacet

from tests.conftest import AccountsController, UserSchema, UsersController


AUTO_ERRORS = {"400", "401", "403", "404", "409", "500"}


class TestEndToEnd:

    def test_users_controller(self, generator):
        spec = generator.render()

        assert list(spec["paths"]) == ["/api/users", "/api/users/{id}"]
        assert list(spec["paths"]["/api/users"]) == ["get"]
        assert list(spec["paths"]["/api/users/{id}"]) == ["get"]

        for item in spec["paths"].values():
            assert set(item["get"]["responses"]) == {"200"} | AUTO_ERRORS

    def test_top_level_keys(self, generator):
        spec = generator.render()
        assert spec["openapi"] == "3.1.0"
        assert spec["info"] == {"title": "Test API", "version": "2.0.0"}
        assert {"info", "paths", "components", "securitySchemes"} <= set(spec)
        assert spec["components"]["securitySchemes"] == spec["securitySchemes"]

    def test_show_parameters(self, generator):
        operation = generator.render()["paths"]["/api/users/{id}"]["get"]
        [param] = operation["parameters"]
        assert param["name"] == "id"
        assert param["in"] == "path"
        assert param["required"] is True
        assert param["schema"]["format"] == "uuid"

    def test_components_referenced(self, generator):
        spec = generator.render()
        response = spec["paths"]["/api/users"]["get"]["responses"]["200"]
        assert response["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/User"}
        schemas = spec["components"]["schemas"]
        assert {"User", "ErrorResponse", "ValidationErrorResponse", "ValidationIssue"} <= set(schemas)

    def test_validation_error_response(self, generator):
        responses = generator.render()["paths"]["/api/users"]["get"]["responses"]
        assert responses["400"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ValidationErrorResponse",
        }
        assert responses["404"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse",
        }

    def test_json_serializable(self, generator):
        json.dumps(generator.render())


class TestOperations:

    def test_tags_and_security_merged(self, full_registry):
        spec = OpenAPIGenerator(full_registry).render()
        archive = spec["paths"]["/api/accounts/{id}/archive"]["post"]
        assert archive["tags"] == ["Accounts", "Admin"]
        assert archive["security"] == [{"bearerAuth": []}]
        assert "security" not in spec["paths"]["/api/users"]["get"]

    def test_guarded_route_gets_session(self):
        controller = (
            ControllerBuilder("/api/admin", security=["bearerAuth"])
            .route("index", response=SuccessMessage, guards=["is_admin"])
            .build()
        )
        operation = OpenAPIGenerator(RouteRegistry([controller])).render()["paths"]["/api/admin"]["get"]
        assert operation["security"] == [{"bearerAuth": []}, {"sessionCookie": []}]

    def test_create_status_and_body(self, full_registry):
        operation = OpenAPIGenerator(full_registry).render()["paths"]["/api/accounts"]["post"]
        assert set(operation["responses"]) == {"201"} | AUTO_ERRORS
        assert operation["requestBody"] == {
            "required": True,
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/CreateUser"}}},
        }

    def test_query_parameters(self, full_registry):
        operation = OpenAPIGenerator(full_registry).render()["paths"]["/api/accounts"]["get"]
        params = {p["name"]: p for p in operation["parameters"]}
        assert params["page"]["in"] == "query"
        assert params["page"]["required"] is False
        assert params["limit"]["schema"]["maximum"] == 100
        assert operation["description"] == "List accounts."
        assert operation["responses"]["200"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/PaginatedUser",
        }

    def test_operation_ids(self, full_registry):
        spec = OpenAPIGenerator(full_registry).render()
        assert spec["paths"]["/api/users"]["get"]["operationId"] == "Users_index"
        assert spec["paths"]["/api/accounts/{id}/archive"]["post"]["operationId"] == "Accounts_archive"

    def test_summary_and_deprecated(self):
        controller = (
            ControllerBuilder("/api/things")
            .route("index", response=SuccessMessage, deprecated=True, operation_id="listThings")
            .route("bulk_delete", verb="DELETE", path="/bulk", response=SuccessMessage, summary="Bulk delete")
            .build()
        )
        paths = OpenAPIGenerator(RouteRegistry([controller])).render()["paths"]
        index = paths["/api/things"]["get"]
        assert index["deprecated"] is True
        assert index["operationId"] == "listThings"
        assert index["summary"] == "Index"
        assert paths["/api/things/bulk"]["delete"]["summary"] == "Bulk delete"

    def test_undeclared_path_placeholder_documented(self):
        controller = (
            ControllerBuilder("/api/orgs")
            .route("members", verb="GET", path="/:org/members", response=SuccessMessage)
            .build()
        )
        operation = OpenAPIGenerator(RouteRegistry([controller])).render()["paths"]["/api/orgs/{org}/members"]["get"]
        assert operation["parameters"] == [
            {"name": "org", "in": "path", "required": True, "schema": {"type": "string"}},
        ]

    def test_tag_descriptions(self, generator):
        assert generator.render()["tags"] == [{"name": "Users", "description": "User management"}]


class TestResponses:

    def test_explicit_404_kept(self):
        controller = (
            ControllerBuilder("/api/users")
            .route(
                "show",
                params=IdParam,
                response=UserSchema,
                responses={404: ResponseSpec("User not found", SuccessMessage)},
            )
            .build()
        )
        responses = OpenAPIGenerator(RouteRegistry([controller])).render()["paths"]["/api/users/{id}"]["get"]["responses"]
        assert responses["404"] == {
            "description": "User not found",
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/SuccessMessage"}}},
        }
        assert set(responses) == {"200"} | AUTO_ERRORS

    def test_explicit_response_forms(self):
        controller = (
            ControllerBuilder("/api/jobs")
            .route("create", response=SuccessMessage, responses={202: "Queued", 422: ErrorResponse})
            .build()
        )
        responses = OpenAPIGenerator(RouteRegistry([controller])).render()["paths"]["/api/jobs"]["post"]["responses"]
        assert responses["202"] == {"description": "Queued"}
        assert responses["422"]["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/ErrorResponse"}
        assert list(responses) == ["201", "202", "400", "401", "403", "404", "409", "422", "500"]


class TestAssemblyFaults:

    def test_missing_response(self):
        controller = ControllerBuilder("/api/x", name="X").route("index").build()
        generator = OpenAPIGenerator(RouteRegistry([controller]))
        with pytest.raises(MissingResponseSchemaFault) as exc_info:
            generator.assemble()
        assert "X" in exc_info.value.message
        assert "index" in exc_info.value.message
        assert generator.state is AssemblyState.COLLECTING

    def test_duplicate_route(self):
        controller = (
            ControllerBuilder("/api/x", name="X")
            .route("show", response=SuccessMessage)
            .route("lookup", verb="GET", path="/:slug", response=SuccessMessage)
            .build()
        )
        with pytest.raises(DuplicateRouteFault) as exc_info:
            OpenAPIGenerator(RouteRegistry([controller])).assemble()
        assert exc_info.value.metadata["owners"] == ["X.show", "X.lookup"]

    def test_duplicate_across_controllers(self):
        first = ControllerBuilder("/api/x", name="A").route("index", response=SuccessMessage).build()
        second = ControllerBuilder("/api/x", name="B").route("index", response=SuccessMessage).build()
        with pytest.raises(DuplicateRouteFault):
            OpenAPIGenerator(RouteRegistry([first, second])).assemble()

    def test_same_path_different_verbs_allowed(self, full_registry):
        spec = OpenAPIGenerator(full_registry).render()
        assert set(spec["paths"]["/api/accounts"]) == {"get", "post"}

    def test_hidden_duplicate_still_fatal(self):
        controller = (
            ControllerBuilder("/api/x")
            .route("index", response=SuccessMessage)
            .route("list", verb="GET", path="", response=SuccessMessage, hide_from_docs=True)
            .build()
        )
        with pytest.raises(DuplicateRouteFault):
            OpenAPIGenerator(RouteRegistry([controller])).assemble()

    def test_component_conflict(self):
        class OtherUser(Schema):
            handle = TextFacet()

            class Spec:
                name = "User"

        controller = (
            ControllerBuilder("/api/x", name="X")
            .route("index", response=UserSchema)
            .route("show", params=IdParam, response=OtherUser)
            .build()
        )
        with pytest.raises(ComponentConflictFault) as exc_info:
            OpenAPIGenerator(RouteRegistry([controller])).assemble()
        assert "X.show" in exc_info.value.message

    def test_unresolvable_route(self):
        controller = ControllerBuilder("/api/x").route("archive", response=SuccessMessage).build()
        with pytest.raises(RouteConventionFault):
            OpenAPIGenerator(RouteRegistry([controller])).assemble()


class TestAssemblyLifecycle:

    def test_cached_until_registry_changes(self, registry, generator):
        first = generator.assemble()
        assert generator.state is AssemblyState.READY
        assert generator.assemble() is first

        registry.register(AccountsController)
        assert generator.state is AssemblyState.COLLECTING

        second = generator.assemble()
        assert second is not first
        assert "/api/accounts" in second.paths
        assert "/api/accounts" not in first.paths

    def test_hot_reload_replace(self, registry, generator):
        assert "/api/users" in generator.render()["paths"]
        registry.replace([AccountsController])
        paths = generator.render()["paths"]
        assert "/api/users" not in paths
        assert "/api/accounts" in paths

    def test_render_returns_independent_copies(self, generator):
        spec = generator.render()
        spec["paths"]["/api/users"]["get"]["summary"] = "mutated"
        spec["components"]["schemas"].clear()
        again = generator.render()
        assert again["paths"]["/api/users"]["get"]["summary"] == "Index"
        assert "User" in again["components"]["schemas"]

    def test_concurrent_renders_share_one_assembly(self, generator):
        documents = []

        def worker():
            documents.append(generator.assemble())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(d) for d in documents}) == 1

    def test_hidden_routes_recorded(self):
        controller = (
            ControllerBuilder("/api/x", name="X", hide_from_docs=True)
            .route("index", response=SuccessMessage)
            .route("show", params=IdParam, response=SuccessMessage, hide_from_docs=False)
            .build()
        )
        document = OpenAPIGenerator(RouteRegistry([controller])).assemble()
        assert document.hidden == ("X.index",)
        assert list(document.paths) == ["/api/x/{id}"]

    def test_assembly_logged(self, generator, caplog):
        with caplog.at_level(logging.INFO, logger="strata.openapi"):
            generator.assemble()
        assert "2 paths" in caplog.text


class TestRendering:

    def test_config_info_and_servers(self, registry):
        config = OpenAPIConfig(
            title="Docs",
            description="All the things",
            contact_email="dev@example.com",
            license_name="MIT",
            servers=[{"url": "https://api.example.com"}],
            external_docs_url="https://docs.example.com",
        )
        spec = OpenAPIGenerator(registry).render(config)
        assert spec["info"] == {
            "title": "Docs",
            "version": "1.0.0",
            "description": "All the things",
            "contact": {"email": "dev@example.com"},
            "license": {"name": "MIT"},
        }
        assert spec["servers"] == [{"url": "https://api.example.com"}]
        assert spec["externalDocs"] == {"url": "https://docs.example.com"}

    def test_builtin_security_schemes(self, generator):
        schemes = generator.render()["securitySchemes"]
        assert schemes["bearerAuth"] == {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "JWT Bearer token authentication",
        }
        assert schemes["apiKey"]["in"] == "header"
        assert schemes["apiKey"]["name"] == "X-API-Key"
        assert schemes["sessionCookie"]["in"] == "cookie"
        assert schemes["sessionCookie"]["name"] == "session"

    def test_extra_security_schemes(self, registry):
        config = OpenAPIConfig(
            api_key_header="X-Token",
            security_schemes={"oauth": {"type": "oauth2", "flows": {}}},
        )
        schemes = OpenAPIGenerator(registry).render(config)["securitySchemes"]
        assert list(schemes) == ["bearerAuth", "apiKey", "sessionCookie", "oauth"]
        assert schemes["apiKey"]["name"] == "X-Token"

    def test_nested_security_schemes_not_shared(self, registry):
        config = OpenAPIConfig(
            security_schemes={"oauth": {"type": "oauth2", "flows": {"implicit": {"scopes": {}}}}},
        )
        generator = OpenAPIGenerator(registry, config)
        spec = generator.render()
        spec["components"]["securitySchemes"]["oauth"]["flows"]["implicit"]["scopes"]["leak"] = "x"
        assert spec["securitySchemes"]["oauth"]["flows"]["implicit"]["scopes"] == {}

        again = generator.render()
        assert again["components"]["securitySchemes"]["oauth"]["flows"]["implicit"]["scopes"] == {}
        assert config.security_schemes["oauth"]["flows"]["implicit"]["scopes"] == {}


    def test_dynamic_filter(self, full_registry):
        config = OpenAPIConfig(route_filter=lambda path, item: path.startswith("/api/users"))
        paths = OpenAPIGenerator(full_registry).render(config)["paths"]
        assert list(paths) == ["/api/users", "/api/users/{id}"]

    def test_raising_filter_omits_path(self, registry):
        def route_filter(path, item):
            if "{id}" in path:
                raise ValueError("boom")
            return True

        paths = OpenAPIGenerator(registry).render(OpenAPIConfig(route_filter=route_filter))["paths"]
        assert list(paths) == ["/api/users"]

    def test_filter_sees_path_item(self, registry):
        seen = {}

        def route_filter(path, item):
            seen[path] = sorted(item)
            return True

        OpenAPIGenerator(registry).render(OpenAPIConfig(route_filter=route_filter))
        assert seen == {"/api/users": ["get"], "/api/users/{id}": ["get"]}

    def test_render_document_helper(self, registry):
        assert list(render_document(registry)["paths"]) == ["/api/users", "/api/users/{id}"]

    def test_inline_param_schema_from_anonymous_facet(self):
        controller = (
            ControllerBuilder("/api/search")
            .route("index", response=SuccessMessage, query=ObjectFacet({"q": TextFacet(help_text="Search text")}))
            .build()
        )
        [param] = OpenAPIGenerator(RouteRegistry([controller])).render()["paths"]["/api/search"]["get"]["parameters"]
        assert param == {
            "name": "q",
            "in": "query",
            "required": True,
            "schema": {"type": "string", "description": "Search text"},
            "description": "Search text",
        }

    def test_controller_class_registration(self):
        class HealthController(Controller):
            prefix = "/health"

            @Route(response=SuccessMessage)
            async def index(self, ctx):
                ...

        spec = OpenAPIGenerator(RouteRegistry([HealthController])).render()
        assert spec["paths"]["/health"]["get"]["operationId"] == "Health_index"
        assert "tags" not in spec["paths"]["/health"]["get"]
