"""
routespec Controller System

Declarative route metadata for specification generation.

Example:
    from typing import Annotated, Optional
    from routespec.controller import Controller, GET, POST, QueryValue, HttpResponse

    class UsersController(Controller):
        prefix = "/users"

        @GET("/{id}")
        def retrieve(self, id: int) -> HttpResponse[User]:
            ...

        @POST("/")
        def create(self, name: str, age: int) -> User:
            ...
"""

from .base import Controller, Principal, Authentication, RequestCtx
from .decorators import (
    RouteDecorator,
    GET, POST, PUT, PATCH, DELETE,
    HEAD, OPTIONS, TRACE,
    route,
    operation,
    tag,
    security_requirement,
    server,
    api_response,
    callback,
    security_scheme,
    consumes,
    produces,
    hidden,
    deprecated,
)
from .params import (
    Bindable,
    PathVariable,
    QueryValue,
    Header,
    CookieValue,
    Body,
    JsonIgnore,
    Hidden,
    Nullable,
    Parameter,
    RequestBody,
)
from .types import HttpResponse, Single, Completable
from .metadata import (
    ControllerDeclarations,
    RouteDescriptor,
    ParameterDescriptor,
    extract_controller_declarations,
    extract_routes,
    unwrap_annotation,
)

__all__ = [
    # Base
    "Controller", "Principal", "Authentication", "RequestCtx",

    # Route decorators
    "RouteDecorator",
    "GET", "POST", "PUT", "PATCH", "DELETE",
    "HEAD", "OPTIONS", "TRACE",
    "route",

    # Specification decorators
    "operation", "tag", "security_requirement", "server", "api_response",
    "callback", "security_scheme", "consumes", "produces", "hidden", "deprecated",

    # Parameter markers
    "Bindable", "PathVariable", "QueryValue", "Header", "CookieValue", "Body",
    "JsonIgnore", "Hidden", "Nullable", "Parameter", "RequestBody",

    # Return wrappers
    "HttpResponse", "Single", "Completable",

    # Metadata
    "ControllerDeclarations",
    "RouteDescriptor",
    "ParameterDescriptor",
    "extract_controller_declarations",
    "extract_routes",
    "unwrap_annotation",
]
