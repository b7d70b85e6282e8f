"""
Parameter classification.

Every handler parameter is either folded into the request body, bound to
a location (path, query, header, cookie) or left out. Bindings are found
through an ordered table of ``(predicate, classifier)`` rules; the first
matching rule wins.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..controller.metadata import ParameterDescriptor
from ..controller.params import CookieValue, Header, PathVariable as PathVariableMarker, QueryValue
from ..faults import FragmentConversionFault, UnboundPathVariableFault
from ..model import (
    UNSET,
    ParameterDocument,
    ParameterLocation,
    RequestBodyDocument,
    is_empty,
)
from .context import RouteContext
from .fragments import PARAMETER_EXCLUDED_KEYS
from .paths import PathVariable

logger = logging.getLogger("routespec.openapi.parameters")

# Verbs that may carry a request body at all.
_NO_BODY_VERBS = frozenset({"GET", "HEAD", "TRACE", "CONNECT"})

# Verbs for which a body is synthesized from loose parameters.
_BODY_VERBS = frozenset({"POST", "PUT", "PATCH"})


def permits_request_body(verb: str) -> bool:
    return verb.upper() not in _NO_BODY_VERBS


def requires_request_body(verb: str) -> bool:
    return verb.upper() in _BODY_VERBS


def hyphenate(name: str) -> str:
    """``traceId`` / ``trace_id`` -> ``trace-id``."""
    name = re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", name)
    return name.replace("_", "-").lower()


# ============================================================================
# Bindings
# ============================================================================

@dataclass(frozen=True)
class Binding:
    """Where a parameter is bound, as decided by a binding rule."""
    location: ParameterLocation
    name: Optional[str] = None
    explode: bool = False

    def to_document(self) -> ParameterDocument:
        document = ParameterDocument(location=self.location)
        if self.name:
            document.name = self.name
        if self.explode:
            document.explode = True
        return document


Variables = Dict[str, PathVariable]
BindingRule = Tuple[
    Callable[[ParameterDescriptor, Variables], bool],
    Callable[[ParameterDescriptor, Variables], Binding],
]


def _names_path_variable(parameter: ParameterDescriptor, variables: Variables) -> bool:
    return parameter.name in variables and not parameter.bindable


def _bind_template_variable(parameter: ParameterDescriptor, variables: Variables) -> Binding:
    variable = variables[parameter.name]
    location = ParameterLocation.QUERY if variable.query else ParameterLocation.PATH
    return Binding(location, explode=variable.exploded)


def _bind_path_variable(parameter: ParameterDescriptor, variables: Variables) -> Binding:
    marker = parameter.marker(PathVariableMarker)
    name = marker.value or parameter.name
    variable = variables.get(name)
    if variable is None:
        raise UnboundPathVariableFault(name, parameter.location)
    return Binding(ParameterLocation.PATH, name=name, explode=variable.exploded)


def _bind_header(parameter: ParameterDescriptor, variables: Variables) -> Binding:
    marker = parameter.marker(Header)
    return Binding(ParameterLocation.HEADER, name=marker.header_name or hyphenate(parameter.name))


def _bind_cookie(parameter: ParameterDescriptor, variables: Variables) -> Binding:
    marker = parameter.marker(CookieValue)
    return Binding(ParameterLocation.COOKIE, name=marker.value or parameter.name)


def _bind_query(parameter: ParameterDescriptor, variables: Variables) -> Binding:
    marker = parameter.marker(QueryValue)
    return Binding(ParameterLocation.QUERY, name=marker.value or parameter.name)


def _marked(marker_type: type) -> Callable[[ParameterDescriptor, Variables], bool]:
    return lambda parameter, variables: parameter.has_marker(marker_type)


BINDING_RULES: List[BindingRule] = [
    (_names_path_variable, _bind_template_variable),
    (_marked(PathVariableMarker), _bind_path_variable),
    (_marked(Header), _bind_header),
    (_marked(CookieValue), _bind_cookie),
    (_marked(QueryValue), _bind_query),
]


# Computes ``explode`` for a finished parameter; None leaves it untouched.
ExplodeResolver = Callable[[ParameterDescriptor, ParameterDocument], Optional[bool]]


# ============================================================================
# Classifier
# ============================================================================

class ParameterClassifier:
    """
    Builds the parameter documents and the body-parameter request body.

    Args:
        rules: Binding rules, tried in order
        explode_resolver: Hook computing ``explode`` for every parameter.
            Without one, only exploded template variables set it.
    """

    def __init__(
        self,
        rules: Optional[List[BindingRule]] = None,
        explode_resolver: Optional[ExplodeResolver] = None,
    ):
        self.rules = list(rules) if rules is not None else list(BINDING_RULES)
        self.explode_resolver = explode_resolver

    def classify(self, ctx: RouteContext, skip_bindings: bool = False) -> None:
        """
        Classify every parameter of ``ctx.route``.

        Args:
            skip_bindings: The operation fragment already lists the
                parameters; only the body parameter is still processed.

        Raises:
            UnboundPathVariableFault: explicit path binding to an undeclared variable
        """
        variables = ctx.path.variable_map()
        permits_body = permits_request_body(ctx.http_method)

        for parameter in ctx.route.parameters:
            if ctx.compilation.is_ignored(parameter.type):
                continue

            if permits_body and ctx.operation.request_body is UNSET and parameter.carries_body:
                self.attach_body_parameter(ctx, parameter)

            if parameter.carries_body or skip_bindings:
                continue

            # Binding faults are raised for hidden parameters too.
            document = self.bind(parameter, variables)
            if parameter.hidden:
                continue
            document = self.apply_fragment(ctx, parameter, document)
            if document is None:
                continue

            self.finalize(ctx, parameter, document)
            ctx.operation.add_parameter(document)

    def bind(self, parameter: ParameterDescriptor, variables: Variables) -> Optional[ParameterDocument]:
        for predicate, classifier in self.rules:
            if predicate(parameter, variables):
                return classifier(parameter, variables).to_document()
        return None

    def apply_fragment(
        self,
        ctx: RouteContext,
        parameter: ParameterDescriptor,
        document: Optional[ParameterDocument],
    ) -> Optional[ParameterDocument]:
        """Merge the explicit ``Parameter`` fragment over the bound document."""
        fragment = parameter.fragment
        if fragment is None:
            return document

        values = {k: v for k, v in fragment.items() if k not in PARAMETER_EXCLUDED_KEYS}
        if document is not None and document.location is not UNSET:
            values["in"] = document.location.value

        try:
            partial = ctx.converter.to_parameter(values)
        except FragmentConversionFault as fault:
            ctx.warn(
                f"Error reading parameter fragment for element [{parameter.location}]: {fault.reason}",
                fault=fault,
                location=parameter.location,
            )
            return document

        if document is None:
            return partial
        return document.merge(partial)

    def finalize(self, ctx: RouteContext, parameter: ParameterDescriptor, document: ParameterDocument) -> None:
        if is_empty(document.name):
            document.name = parameter.name
        if document.location is UNSET:
            document.location = ParameterLocation.QUERY
        if document.required is UNSET:
            document.required = not parameter.nullable
        if is_empty(document.description):
            description = ctx.docs.parameter(parameter.name)
            if description:
                document.description = description

        schema = document.schema if document.schema is not UNSET else None
        if schema is None:
            schema = ctx.resolve_schema(parameter, parameter.type, ctx.consumes[0])

        override = (parameter.fragment or {}).get("schema")
        if isinstance(override, Mapping):
            schema = ctx.compilation.schema_resolver.bind_schema_override(parameter, schema, dict(override))
        elif override is not None:
            schema = ctx.resolve_schema(parameter, override, ctx.consumes[0])

        if schema is not None:
            document.schema = ctx.compilation.schema_resolver.bind_schema_for_element(
                parameter, parameter.type, schema
            )

        if self.explode_resolver is not None:
            explode = self.explode_resolver(parameter, document)
            if explode is not None:
                document.explode = explode

    # ── Body parameter ───────────────────────────────────────────────────

    def attach_body_parameter(self, ctx: RouteContext, parameter: ParameterDescriptor) -> None:
        """Build the request body from a parameter carrying the whole body."""
        body = RequestBodyDocument()
        fragment = parameter.body_fragment
        if fragment is not None:
            try:
                body = ctx.converter.to_request_body(fragment)
            except FragmentConversionFault as fault:
                ctx.warn(
                    f"Error reading request body fragment for element [{parameter.location}]: {fault.reason}",
                    fault=fault,
                    location=parameter.location,
                )

        if is_empty(body.description):
            description = ctx.docs.parameter(parameter.name)
            if description:
                body.description = description
        if body.required is UNSET:
            body.required = not parameter.nullable
        if body.content is UNSET:
            body.content = ctx.build_content(parameter, parameter.type, ctx.consumes)

        logger.debug("Request body of %s taken from parameter '%s'", ctx.route.location, parameter.name)
        ctx.operation.attach_request_body(body)
