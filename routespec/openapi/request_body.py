"""
Request body synthesis from loose parameters.

Handlers of body-carrying verbs may accept the fields of a JSON object
as individual parameters. Every parameter that is not bound elsewhere
becomes a property of one synthesized object schema.
"""

import logging
from typing import Any, Dict, List

from ..controller.metadata import ParameterDescriptor
from ..model import UNSET, RequestBodyDocument
from .context import RouteContext
from .parameters import requires_request_body

logger = logging.getLogger("routespec.openapi.request_body")


class RequestBodySynthesizer:

    def candidates(self, ctx: RouteContext) -> List[ParameterDescriptor]:
        variables = ctx.path.variable_map()
        return [
            parameter for parameter in ctx.route.parameters
            if parameter.name not in variables
            and not parameter.bindable
            and not parameter.json_ignored
            and not parameter.hidden
            and not ctx.compilation.is_ignored(parameter.type)
        ]

    def synthesize(self, ctx: RouteContext) -> None:
        if not requires_request_body(ctx.http_method) or ctx.operation.request_body is not UNSET:
            return

        parameters = self.candidates(ctx)
        if not parameters:
            return

        body = RequestBodyDocument(content={}, required=True)
        for media_type in ctx.consumes:
            body.content[media_type] = self.object_schema(ctx, parameters, media_type)

        logger.debug(
            "Synthesized request body for %s from %d parameter(s)",
            ctx.route.location, len(parameters),
        )
        ctx.operation.attach_request_body(body)

    def object_schema(
        self,
        ctx: RouteContext,
        parameters: List[ParameterDescriptor],
        media_type: str,
    ) -> Dict[str, Any]:
        resolver = ctx.compilation.schema_resolver
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for parameter in parameters:
            schema = ctx.resolve_schema(parameter, parameter.type, media_type)
            if schema is None:
                continue
            schema = resolver.bind_schema_for_element(parameter, parameter.type, schema)
            if parameter.nullable:
                schema["nullable"] = True
            if not schema.get("description"):
                description = ctx.docs.parameter(parameter.name)
                if description:
                    schema["description"] = description
            properties[parameter.name] = schema
            if not parameter.nullable:
                required.append(parameter.name)

        schema: Dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return schema
