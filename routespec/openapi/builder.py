"""
Operation building.

Turns one ``RouteDescriptor`` into an ``OperationDocument`` attached to
the document at its path and verb. Explicit fragments come first and
inferred values only fill what they left unset.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from ..controller.metadata import RouteDescriptor
from ..faults import FragmentConversionFault, RoutingFault, UnrecognizedVerbFault
from ..model import ApiSpecDocument, OperationDocument, is_empty
from .callbacks import CallbackResolver
from .context import CompilationContext, RouteContext
from .fragments import FragmentConverter, response_code
from .parameters import ParameterClassifier
from .paths import PathTemplateBinder
from .request_body import RequestBodySynthesizer
from .responses import ResponseSynthesizer

logger = logging.getLogger("routespec.openapi.builder")


class OperationBuilder:
    """
    Builds and attaches the operation of each route.

    The collaborators default to the stock implementations and can be
    replaced individually.
    """

    def __init__(
        self,
        classifier: Optional[ParameterClassifier] = None,
        responses: Optional[ResponseSynthesizer] = None,
        request_bodies: Optional[RequestBodySynthesizer] = None,
        callbacks: Optional[CallbackResolver] = None,
    ):
        self.classifier = classifier or ParameterClassifier()
        self.responses = responses or ResponseSynthesizer()
        self.request_bodies = request_bodies or RequestBodySynthesizer()
        self.callbacks = callbacks or CallbackResolver()

    def build(
        self,
        compilation: CompilationContext,
        document: ApiSpecDocument,
        route: RouteDescriptor,
    ) -> Optional[OperationDocument]:
        """
        Build the operation of ``route`` and attach it to ``document``.

        Returns:
            The attached operation, or None when the route is hidden,
            its verb has no path item slot or the route failed.
        """
        fragment = route.operation or {}
        if route.hidden or fragment.get("hidden"):
            logger.debug("Skipping hidden route %s", route.location)
            return None

        path = None
        operation = None
        try:
            bound = PathTemplateBinder(compilation.placeholders).bind(
                route.controller_path, route.method_path
            )
            path = bound.path
            path_item = document.path_item(path)

            converter = self.converter_for(compilation, document)
            operation = self.operation_from_fragment(compilation, converter, route, fragment)

            ctx = RouteContext(
                compilation=compilation,
                route=route,
                document=document,
                operation=operation,
                path=bound,
                docs=compilation.documentation_parser.parse(route.documentation),
                converter=converter,
            )
            self.apply_declarations(ctx)

            if is_empty(operation.description) and ctx.docs.description:
                operation.description = ctx.docs.description
            if is_empty(operation.summary) and ctx.docs.summary:
                operation.summary = ctx.docs.summary

            if not path_item.set_operation(route.http_method, operation):
                fault = UnrecognizedVerbFault(route.http_method)
                logger.debug("%s (%s)", fault.message, route.location)

            if route.deprecated:
                operation.deprecated = True
            if is_empty(operation.operation_id):
                operation.operation_id = route.handler_name

            self.responses.synthesize(ctx)
            self.classifier.classify(ctx, skip_bindings=not is_empty(operation.parameters))
            self.request_bodies.synthesize(ctx)

        except RoutingFault as fault:
            compilation.diagnostics.fail(fault.message, route.location, fault=fault)
            if path is not None:
                self.detach(document, path, operation)
            return None

        if path_item.operations.get(route.http_method.lower()) is not operation:
            self.detach(document, path, operation)
            return None

        logger.debug("Built %s %s from %s", route.http_method, path, route.location)
        return operation

    def converter_for(self, compilation: CompilationContext, document: ApiSpecDocument) -> FragmentConverter:
        resolver = compilation.schema_resolver
        return FragmentConverter(
            resolve_type=lambda tp, media_type: resolver.resolve_schema(document, None, tp, media_type),
            default_media_type=compilation.config.default_media_type,
        )

    def operation_from_fragment(
        self,
        compilation: CompilationContext,
        converter: FragmentConverter,
        route: RouteDescriptor,
        fragment: dict,
    ) -> OperationDocument:
        if not fragment:
            return OperationDocument()
        try:
            return converter.to_operation(fragment)
        except FragmentConversionFault as fault:
            compilation.diagnostics.warn(
                f"Error reading operation fragment for element [{route.location}]: {fault.reason}",
                route.location,
                fault=fault,
            )
            return OperationDocument()

    def apply_declarations(self, ctx: RouteContext) -> None:
        """Tags, security, explicit responses, servers and callbacks, in that order."""
        route = ctx.route
        operation = ctx.operation

        self._each(ctx, "tag", route.tags, lambda f: operation.add_tag(ctx.converter.to_tag(f)))
        self._each(
            ctx, "security requirement", route.security,
            lambda f: operation.add_security(ctx.converter.to_security_requirement(f)),
        )
        self._each(
            ctx, "response", route.responses,
            lambda f: operation.put_response(response_code(f), ctx.converter.to_response(f)),
        )
        self._each(ctx, "server", route.servers, lambda f: operation.add_server(ctx.converter.to_server(f)))
        self._each(ctx, "callback", route.callbacks, lambda f: self.callbacks.resolve(ctx, f))

    def _each(
        self,
        ctx: RouteContext,
        kind: str,
        fragments: Iterable[Any],
        apply: Callable[[Any], None],
    ) -> None:
        for fragment in fragments:
            try:
                apply(fragment)
            except FragmentConversionFault as fault:
                ctx.warn(f"Error reading {kind} for element [{ctx.route.location}]: {fault.reason}", fault=fault)

    def detach(self, document: ApiSpecDocument, path: str, operation: Optional[OperationDocument]) -> None:
        """Remove a partially built operation and drop its path item if it became empty."""
        path_item = document.paths.get(path)
        if path_item is None:
            return
        if operation is not None:
            path_item.remove_operation(operation)
        if not path_item.operations:
            del document.paths[path]
