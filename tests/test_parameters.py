"""
Test: Parameter classification and body-parameter request bodies.
"""

from typing import Annotated, Optional

import pytest

from conftest import route_context, route_of
from routespec.controller import (
    Body,
    Controller,
    CookieValue,
    DELETE,
    GET,
    Header,
    Hidden,
    Parameter,
    PathVariable,
    POST,
    Principal,
    QueryValue,
    RequestBody,
    RequestCtx,
)
from routespec.faults import UnboundPathVariableFault
from routespec.model import UNSET, ParameterLocation
from routespec.openapi.parameters import (
    ParameterClassifier,
    hyphenate,
    permits_request_body,
    requires_request_body,
)


class UsersController(Controller):
    prefix = "/users"

    @GET("/{id}")
    def by_id(self, id: int):
        """
        Fetch a user.

        Args:
            id: The user identifier.
        """

    @GET("{?max,offset}")
    def search(self, max: int, offset: Optional[int] = None):
        ...

    @GET("/files/{path*}")
    def files(self, path: str):
        ...

    @GET("/{user_id}/renamed")
    def renamed(self, uid: Annotated[int, PathVariable("user_id")]):
        ...

    @GET("/{id}/unbound")
    def unbound(self, uid: Annotated[int, PathVariable("missing")]):
        ...

    @GET("/{id}/hidden-unbound")
    def hidden_unbound(self, id: int, uid: Annotated[int, PathVariable("missing"), Hidden()]):
        ...

    @GET("/{id}/marked")
    def marked(self, id: Annotated[int, QueryValue()]):
        ...

    @GET("/headers")
    def headers(
        self,
        trace_id: Annotated[str, Header()],
        request_id: Annotated[str, Header("X-Request-Id")],
        session: Annotated[str, CookieValue("SID")],
        page_size: Annotated[int, QueryValue("pageSize")] = 20,
        loose: str = "",
    ):
        ...

    @GET("/ignored")
    def ignored(self, principal: Principal, ctx: RequestCtx, q: Annotated[str, QueryValue()]):
        ...


class FragmentsController(Controller):
    prefix = "/f"

    @GET("/merge")
    def merge(self, max: Annotated[Optional[int], QueryValue(), Parameter(description="Max", required=True)]):
        """
        Merge.

        Args:
            max: From the docstring.
        """

    @GET("/location")
    def location(self, token: Annotated[str, Header(), Parameter(in_="query")]):
        ...

    @GET("/only")
    def only(self, q: Annotated[str, Parameter(name="query", in_="query")]):
        ...

    @GET("/unlocated")
    def unlocated(self, q: Annotated[str, Parameter(description="Search")]):
        ...

    @GET("/hidden")
    def hidden(
        self,
        a: Annotated[str, QueryValue(), Parameter(hidden=True)],
        b: Annotated[str, QueryValue(), Hidden()],
        c: Annotated[str, QueryValue()],
    ):
        ...

    @GET("/broken")
    def broken(self, n: Annotated[int, QueryValue(), Parameter(required="yes", description=3)]):
        ...

    @GET("/schema")
    def schema(self, n: Annotated[int, QueryValue(), Parameter(schema={"minimum": 1})]):
        ...


class BodiesController(Controller):
    prefix = "/bodies"

    @POST("/", consumes=["application/json", "application/xml"])
    def create(self, payload: Annotated[dict, Body()]):
        """
        Create.

        Args:
            payload: The new resource.
        """

    @POST("/optional")
    def optional(self, payload: Annotated[Optional[dict], Body()]):
        ...

    @POST("/fragment")
    def fragment(self, payload: Annotated[dict, Body(), RequestBody(description="From fragment")]):
        """
        Fragment.

        Args:
            payload: From the docstring.
        """

    @GET("/get")
    def get_with_body(self, payload: Annotated[dict, Body()]):
        ...

    @DELETE("/{id}")
    def delete(self, id: int, payload: Annotated[dict, Body()]):
        ...


def _classify(compilation, document, controller, handler, classifier=None, skip_bindings=False):
    ctx = route_context(compilation, document, route_of(controller, handler))
    (classifier or ParameterClassifier()).classify(ctx, skip_bindings=skip_bindings)
    return ctx.operation


def _params(operation):
    return {p.name: p for p in operation.parameters} if operation.parameters is not UNSET else {}


# ============================================================================
# Helpers
# ============================================================================

class TestHelpers:

    @pytest.mark.parametrize("name,expected", [
        ("trace_id", "trace-id"),
        ("traceId", "trace-id"),
        ("authorization", "authorization"),
    ])
    def test_hyphenate(self, name, expected):
        assert hyphenate(name) == expected

    def test_body_verbs(self):
        assert permits_request_body("delete")
        assert not permits_request_body("GET")
        assert requires_request_body("PATCH")
        assert not requires_request_body("DELETE")


# ============================================================================
# Binding precedence
# ============================================================================

class TestBindings:

    def test_path_variable_by_name(self, compilation, document):
        parameter = _params(_classify(compilation, document, UsersController, "by_id"))["id"]
        assert parameter.location is ParameterLocation.PATH
        assert parameter.required is True
        assert parameter.description == "The user identifier."
        assert parameter.schema == {"type": "integer", "format": "int64"}
        assert parameter.explode is UNSET

    def test_query_template_variable(self, compilation, document):
        params = _params(_classify(compilation, document, UsersController, "search"))
        assert params["max"].location is ParameterLocation.QUERY
        assert params["offset"].required is False

    def test_exploded_variable(self, compilation, document):
        parameter = _params(_classify(compilation, document, UsersController, "files"))["path"]
        assert parameter.explode is True

    def test_explicit_path_variable_renamed(self, compilation, document):
        params = _params(_classify(compilation, document, UsersController, "renamed"))
        assert list(params) == ["user_id"]
        assert params["user_id"].location is ParameterLocation.PATH

    def test_explicit_path_variable_unbound(self, compilation, document):
        with pytest.raises(UnboundPathVariableFault) as exc_info:
            _classify(compilation, document, UsersController, "unbound")
        assert exc_info.value.message == "Path variable name: 'missing' not found in path."

    def test_hidden_parameter_still_bound(self, compilation, document):
        with pytest.raises(UnboundPathVariableFault):
            _classify(compilation, document, UsersController, "hidden_unbound")

    def test_binding_marker_beats_name_match(self, compilation, document):
        parameter = _params(_classify(compilation, document, UsersController, "marked"))["id"]
        assert parameter.location is ParameterLocation.QUERY

    def test_header_cookie_query(self, compilation, document):
        params = _params(_classify(compilation, document, UsersController, "headers"))
        assert params["trace-id"].location is ParameterLocation.HEADER
        assert params["X-Request-Id"].location is ParameterLocation.HEADER
        assert params["SID"].location is ParameterLocation.COOKIE
        assert params["pageSize"].location is ParameterLocation.QUERY
        assert params["pageSize"].schema["default"] == 20
        assert "loose" not in params

    def test_ignored_types(self, compilation, document):
        params = _params(_classify(compilation, document, UsersController, "ignored"))
        assert list(params) == ["q"]

    def test_skip_bindings(self, compilation, document):
        operation = _classify(compilation, document, UsersController, "headers", skip_bindings=True)
        assert operation.parameters is UNSET

    def test_custom_rules(self, compilation, document):
        classifier = ParameterClassifier(rules=[])
        operation = _classify(compilation, document, UsersController, "by_id", classifier=classifier)
        assert operation.parameters is UNSET

    def test_explode_hook(self, compilation, document):
        classifier = ParameterClassifier(explode_resolver=lambda parameter, doc: False)
        parameter = _params(_classify(compilation, document, UsersController, "files", classifier))["path"]
        assert parameter.explode is False


# ============================================================================
# Parameter fragments
# ============================================================================

class TestParameterFragments:

    def test_fragment_merged_over_binding(self, compilation, document):
        parameter = _params(_classify(compilation, document, FragmentsController, "merge"))["max"]
        assert parameter.location is ParameterLocation.QUERY
        assert parameter.required is True
        assert parameter.description == "Max"

    def test_binding_location_wins(self, compilation, document):
        parameter = _params(_classify(compilation, document, FragmentsController, "location"))["token"]
        assert parameter.location is ParameterLocation.HEADER

    def test_fragment_without_binding(self, compilation, document):
        params = _params(_classify(compilation, document, FragmentsController, "only"))
        assert params["query"].location is ParameterLocation.QUERY
        assert params["query"].required is True

    def test_fragment_without_location_defaults_to_query(self, compilation, document):
        parameter = _params(_classify(compilation, document, FragmentsController, "unlocated"))["q"]
        assert parameter.location is ParameterLocation.QUERY
        assert parameter.description == "Search"

    def test_hidden_parameters_skipped(self, compilation, document):
        params = _params(_classify(compilation, document, FragmentsController, "hidden"))
        assert list(params) == ["c"]

    def test_conversion_failure_warns_and_keeps_binding(self, compilation, document, diagnostics):
        parameter = _params(_classify(compilation, document, FragmentsController, "broken"))["n"]
        assert parameter.location is ParameterLocation.QUERY
        assert parameter.required is True
        assert len(diagnostics.warnings) == 1
        assert diagnostics.warnings[0].fault.code == "FRAGMENT_CONVERSION"
        assert diagnostics.warnings[0].location == "FragmentsController.broken(n)"

    def test_schema_override_bound(self, compilation, document):
        parameter = _params(_classify(compilation, document, FragmentsController, "schema"))["n"]
        assert parameter.schema == {"type": "integer", "format": "int64", "minimum": 1}


# ============================================================================
# Body parameters
# ============================================================================

class TestBodyParameter:

    def test_body_parameter(self, compilation, document):
        operation = _classify(compilation, document, BodiesController, "create")
        body = operation.request_body
        assert body.required is True
        assert body.description == "The new resource."
        assert list(body.content) == ["application/json", "application/xml"]
        assert operation.parameters is UNSET

    def test_nullable_body_not_required(self, compilation, document):
        body = _classify(compilation, document, BodiesController, "optional").request_body
        assert body.required is False

    def test_fragment_description_wins(self, compilation, document):
        body = _classify(compilation, document, BodiesController, "fragment").request_body
        assert body.description == "From fragment"
        assert body.content == {"application/json": {"type": "object"}}

    def test_no_body_on_get(self, compilation, document):
        operation = _classify(compilation, document, BodiesController, "get_with_body")
        assert operation.request_body is UNSET
        assert operation.parameters is UNSET

    def test_body_permitted_on_delete(self, compilation, document):
        operation = _classify(compilation, document, BodiesController, "delete")
        assert operation.request_body is not UNSET
        assert list(_params(operation)) == ["id"]

    def test_body_runs_with_skip_bindings(self, compilation, document):
        operation = _classify(compilation, document, BodiesController, "create", skip_bindings=True)
        assert operation.request_body is not UNSET
