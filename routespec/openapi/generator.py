"""
OpenAPI 3.0 specification generator.

Drives one compilation pass over a set of controller classes::

    generator = OpenAPIGenerator(SpecConfig(title="Pets", version="2.0.0"))
    document = generator.generate([PetsController, OwnersController])
    spec = document.to_dict()

Route-level problems are reported through ``generator.diagnostics`` and
never abort the pass.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from ..config import SpecConfig
from ..controller.metadata import extract_controller_declarations, extract_routes
from ..diagnostics import Diagnostics
from ..model import ApiSpecDocument
from .builder import OperationBuilder
from .context import CompilationContext
from .docstrings import DocumentationParser
from .placeholders import PlaceholderResolver
from .registry import SpecDocumentRegistry
from .schema import SchemaResolver

logger = logging.getLogger("routespec.openapi.generator")


class OpenAPIGenerator:
    """
    Generates a specification document from controller classes.

    Args:
        config: Generation settings (defaults to ``SpecConfig()``)
        diagnostics: Sink collecting warnings and route failures
        builder: Operation builder (stock collaborators by default)
        registry: Document registry
        schema_resolver: Type-to-schema resolver
        documentation_parser: Docstring parser
        placeholders: ``${...}`` resolver (built from ``config`` by default)
    """

    def __init__(
        self,
        config: Optional[SpecConfig] = None,
        *,
        diagnostics: Optional[Diagnostics] = None,
        builder: Optional[OperationBuilder] = None,
        registry: Optional[SpecDocumentRegistry] = None,
        schema_resolver: Optional[SchemaResolver] = None,
        documentation_parser: Optional[DocumentationParser] = None,
        placeholders: Optional[PlaceholderResolver] = None,
    ):
        self.config = config or SpecConfig()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.builder = builder or OperationBuilder()
        self.registry = registry or SpecDocumentRegistry()
        self.schema_resolver = schema_resolver or SchemaResolver()
        self.documentation_parser = documentation_parser or DocumentationParser()
        self.placeholders = placeholders

    def context(self) -> CompilationContext:
        """Open a fresh compilation context."""
        return CompilationContext(
            config=self.config,
            diagnostics=self.diagnostics,
            schema_resolver=self.schema_resolver,
            documentation_parser=self.documentation_parser,
            placeholders=self.placeholders,
        )

    def generate(self, controllers: Iterable[type]) -> ApiSpecDocument:
        """
        Build the document for ``controllers``, in the given order.

        Diagnostics are cleared first and hold this pass's records only.
        """
        self.diagnostics.clear()
        context = self.context()
        document = self.registry.resolve(context)
        try:
            for controller in controllers:
                self.add_controller(context, document, controller)
        finally:
            self.registry.release(context)

        logger.info(
            "Generated %d path(s) with %d warning(s) and %d failure(s)",
            len(document.paths),
            len(self.diagnostics.warnings),
            len(self.diagnostics.failures),
        )
        return document

    def generate_dict(self, controllers: Iterable[type]) -> Dict[str, Any]:
        return self.generate(controllers).to_dict()

    def add_controller(
        self,
        context: CompilationContext,
        document: ApiSpecDocument,
        controller: type,
    ) -> None:
        declarations = extract_controller_declarations(controller)
        document.components.security_schemes.update(declarations.security_schemes)

        for route in extract_routes(controller):
            self.builder.build(context, document, route)
