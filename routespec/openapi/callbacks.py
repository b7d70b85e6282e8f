"""
Callback resolution.

A callback declaration either defines the callback inline (a URL
expression plus nested operations keyed by verb) or names a shared
definition in ``components/callbacks``.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict

from ..faults import FragmentConversionFault, UnrecognizedVerbFault
from ..model import PATH_ITEM_VERBS, CallbackDocument, PathItemDocument
from .context import RouteContext

logger = logging.getLogger("routespec.openapi.callbacks")

CALLBACK_REF_PREFIX = "#/components/callbacks/"


class CallbackResolver:

    def resolve(self, ctx: RouteContext, declaration: Dict[str, Any]) -> None:
        """Attach the callback described by ``declaration`` to the operation."""
        name = declaration.get("name")
        if not name:
            return

        expression = declaration.get("callbackUrlExpression")
        if expression:
            ctx.operation.put_callback(name, self.inline(ctx, expression, declaration.get("operation")))
            return

        if name in ctx.document.components.callbacks:
            ctx.operation.put_callback(name, CallbackDocument(ref=CALLBACK_REF_PREFIX + name))
        else:
            logger.debug("No shared callback named '%s' for %s", name, ctx.route.location)

    def inline(self, ctx: RouteContext, expression: str, operations: Any) -> CallbackDocument:
        path_item = PathItemDocument()
        if isinstance(operations, Mapping):
            operations = [operations]

        for fragment in operations or []:
            try:
                verb = self._verb(fragment)
                operation = ctx.converter.to_operation(
                    {k: v for k, v in fragment.items() if k != "method"}
                )
            except UnrecognizedVerbFault as fault:
                logger.debug("%s; nested callback operation ignored", fault.message)
                continue
            except FragmentConversionFault as fault:
                ctx.warn(f"Error reading callback operation: {fault.reason}", fault=fault)
                continue
            path_item.set_operation(verb, operation)

        return CallbackDocument(expressions={expression: path_item})

    def _verb(self, fragment: Any) -> str:
        if not isinstance(fragment, Mapping):
            raise FragmentConversionFault("callback operation", "expected a mapping")
        verb = str(fragment.get("method") or "").lower()
        if verb not in PATH_ITEM_VERBS:
            raise UnrecognizedVerbFault(verb or "<none>")
        return verb
