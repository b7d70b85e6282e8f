"""
Specification document registry.

Exactly one document exists per compilation context. It is created on
first access, seeded from the context's configuration, and released at
the end of the pass.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from ..faults import ConfigInvalidFault, FragmentConversionFault
from ..model import ApiSpecDocument, CallbackDocument, PathItemDocument
from .context import CompilationContext
from .fragments import FragmentConverter

logger = logging.getLogger("routespec.openapi.registry")


class SpecDocumentRegistry:
    """Documents keyed by compilation context."""

    def __init__(self):
        self._documents: Dict[CompilationContext, ApiSpecDocument] = {}

    def __contains__(self, context: CompilationContext) -> bool:
        return context in self._documents

    def resolve(self, context: CompilationContext) -> ApiSpecDocument:
        """
        Return the document of ``context``, creating it on first access.

        Raises:
            ConfigInvalidFault: configured servers or components are malformed
        """
        document = self._documents.get(context)
        if document is None:
            document = self._create(context)
            self._documents[context] = document
            logger.debug("Created specification document for %r", context)
        return document

    def release(self, context: CompilationContext) -> Optional[ApiSpecDocument]:
        """Remove and return the document of ``context``."""
        return self._documents.pop(context, None)

    def _create(self, context: CompilationContext) -> ApiSpecDocument:
        config = context.config
        document = ApiSpecDocument(openapi=config.openapi_version)

        document.info = {"title": config.title, "version": config.version}
        if config.description:
            document.info["description"] = config.description

        converter = FragmentConverter(
            resolve_type=lambda tp, media_type: context.schema_resolver.resolve_schema(
                document, None, tp, media_type
            ),
            default_media_type=config.default_media_type,
        )

        try:
            for server in config.servers:
                document.servers.append(converter.to_server(server))
        except FragmentConversionFault as fault:
            raise ConfigInvalidFault("servers", fault.reason)

        components = config.components or {}
        if not isinstance(components, Mapping):
            raise ConfigInvalidFault("components", "expected a mapping")

        document.components.schemas.update(copy.deepcopy(dict(components.get("schemas") or {})))
        document.components.security_schemes.update(
            copy.deepcopy(dict(components.get("securitySchemes") or {}))
        )
        for name, definition in (components.get("callbacks") or {}).items():
            try:
                document.components.callbacks[name] = self._callback(converter, definition)
            except FragmentConversionFault as fault:
                raise ConfigInvalidFault(f"components.callbacks.{name}", fault.reason)

        return document

    def _callback(self, converter: FragmentConverter, definition: Any) -> CallbackDocument:
        """``{expression: {verb: operation fragment}}`` or ``{"$ref": ...}``."""
        if not isinstance(definition, Mapping):
            raise FragmentConversionFault("callback", "expected a mapping")
        if "$ref" in definition:
            return CallbackDocument(ref=str(definition["$ref"]))

        callback = CallbackDocument()
        for expression, operations in definition.items():
            if not isinstance(operations, Mapping):
                raise FragmentConversionFault("callback", f"'{expression}' must map verbs to operations")
            path_item = PathItemDocument()
            for verb, fragment in operations.items():
                if not path_item.set_operation(str(verb), converter.to_operation(fragment)):
                    logger.debug("Ignoring unrecognized verb '%s' in shared callback", verb)
            callback.expressions[str(expression)] = path_item
        return callback
