"""
routespec OpenAPI engine

Route descriptors in, an OpenAPI 3.0 document out.
"""

from .paths import BoundPath, PathTemplateBinder, PathVariable, UriTemplate
from .placeholders import PlaceholderResolver
from .schema import SchemaResolver
from .docstrings import DocumentationParser, ParsedDocumentation
from .fragments import FragmentConverter
from .context import CompilationContext, RouteContext
from .parameters import (
    BINDING_RULES,
    Binding,
    ParameterClassifier,
    hyphenate,
    permits_request_body,
    requires_request_body,
)
from .responses import UNWRAP_RULES, ResponseSynthesizer
from .request_body import RequestBodySynthesizer
from .callbacks import CallbackResolver
from .builder import OperationBuilder
from .registry import SpecDocumentRegistry
from .generator import OpenAPIGenerator

__all__ = [
    # Paths
    "BoundPath", "PathTemplateBinder", "PathVariable", "UriTemplate",
    "PlaceholderResolver",

    # Collaborators
    "SchemaResolver", "DocumentationParser", "ParsedDocumentation", "FragmentConverter",

    # Engine
    "CompilationContext", "RouteContext",
    "BINDING_RULES", "Binding", "ParameterClassifier",
    "hyphenate", "permits_request_body", "requires_request_body",
    "UNWRAP_RULES", "ResponseSynthesizer",
    "RequestBodySynthesizer",
    "CallbackResolver",
    "OperationBuilder",
    "SpecDocumentRegistry",
    "OpenAPIGenerator",
]
