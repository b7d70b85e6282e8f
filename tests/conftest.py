"""
Shared test fixtures and helpers for the routespec test suite.
"""

import pytest
from typing import Optional

from routespec.config import SpecConfig
from routespec.controller.metadata import RouteDescriptor, extract_routes
from routespec.diagnostics import Diagnostics
from routespec.model import ApiSpecDocument, OperationDocument
from routespec.openapi.builder import OperationBuilder
from routespec.openapi.context import CompilationContext, RouteContext
from routespec.openapi.paths import PathTemplateBinder
from routespec.openapi.placeholders import PlaceholderResolver
from routespec.openapi.registry import SpecDocumentRegistry


# ============================================================================
# Helpers
# ============================================================================


def route_of(controller: type, handler: str, method: Optional[str] = None) -> RouteDescriptor:
    """The route descriptor of ``controller.handler`` (optionally for one verb)."""
    for route in extract_routes(controller):
        if route.handler_name == handler and (method is None or route.http_method == method):
            return route
    raise LookupError(f"{controller.__name__}.{handler} has no route")


def route_context(
    compilation: CompilationContext,
    document: ApiSpecDocument,
    route: RouteDescriptor,
) -> RouteContext:
    """A route context with an empty operation, as the builder prepares it."""
    builder = OperationBuilder()
    return RouteContext(
        compilation=compilation,
        route=route,
        document=document,
        operation=OperationDocument(),
        path=PathTemplateBinder(compilation.placeholders).bind(route.controller_path, route.method_path),
        docs=compilation.documentation_parser.parse(route.documentation),
        converter=builder.converter_for(compilation, document),
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def config() -> SpecConfig:
    return SpecConfig(title="Test API", version="0.0.1")


@pytest.fixture
def diagnostics() -> Diagnostics:
    return Diagnostics()


@pytest.fixture
def compilation(config, diagnostics) -> CompilationContext:
    """Compilation context isolated from the process environment."""
    return CompilationContext(
        config=config,
        diagnostics=diagnostics,
        placeholders=PlaceholderResolver(properties=config.properties, environ={}),
    )


@pytest.fixture
def document(compilation) -> ApiSpecDocument:
    return SpecDocumentRegistry().resolve(compilation)


@pytest.fixture
def build(compilation, document):
    """Build one route of a controller into the shared document."""
    builder = OperationBuilder()

    def _build(controller: type, handler: str, method: Optional[str] = None):
        return builder.build(compilation, document, route_of(controller, handler, method))

    return _build
