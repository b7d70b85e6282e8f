"""
Controller Metadata Extraction

Static analysis of Controller classes into read-only route descriptors.
Nothing on the controller is instantiated or called.
"""

import inspect
import logging
import types
from dataclasses import dataclass, field
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from .params import Bindable, Hidden, JsonIgnore, Nullable, Parameter, RequestBody, Body

logger = logging.getLogger("routespec.controller.metadata")

M = TypeVar("M")


@dataclass(frozen=True)
class ParameterDescriptor:
    """
    Metadata for a handler parameter.

    Attributes:
        name: Parameter name
        type: Declared type with ``Annotated`` and ``Optional`` removed
        default: Default value if any
        nullable: ``Optional[...]`` or a ``Nullable`` marker
        markers: ``Annotated`` extras (binding markers and fragments)
        location: Human readable element path for diagnostics
    """
    name: str
    type: Any
    default: Any = inspect.Parameter.empty
    nullable: bool = False
    markers: Tuple[Any, ...] = ()
    location: str = ""

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty

    def marker(self, marker_type: Type[M]) -> Optional[M]:
        """First marker that is an instance of ``marker_type``."""
        for marker in self.markers:
            if isinstance(marker, marker_type):
                return marker
        return None

    def has_marker(self, marker_type: type) -> bool:
        return self.marker(marker_type) is not None

    @property
    def fragment(self) -> Optional[Dict[str, Any]]:
        """The explicit parameter fragment, if declared."""
        declared = self.marker(Parameter)
        return dict(declared.values) if declared is not None else None

    @property
    def body_fragment(self) -> Optional[Dict[str, Any]]:
        declared = self.marker(RequestBody)
        return dict(declared.values) if declared is not None else None

    @property
    def carries_body(self) -> bool:
        return self.has_marker(Body) or self.has_marker(RequestBody)

    @property
    def hidden(self) -> bool:
        declared = self.marker(Parameter)
        return self.has_marker(Hidden) or (declared is not None and declared.hidden)

    @property
    def json_ignored(self) -> bool:
        return self.has_marker(JsonIgnore)

    @property
    def bindable(self) -> bool:
        return self.has_marker(Bindable)


@dataclass(frozen=True)
class RouteDescriptor:
    """
    Structural facts about one HTTP handler.

    Attributes:
        http_method: GET, POST, etc.
        controller_path: Raw controller-level path template
        method_path: Raw method-level path template
        handler_name: Method name
        consumes: Declared consumed media types (may be empty)
        produces: Declared produced media types (may be empty)
        return_type: Declared return annotation
        parameters: Handler parameters in signature order
        hidden: Excluded from the document
        deprecated: Marked deprecated
        documentation: Handler docstring
        operation: Operation-level fragment
        tags, security, responses, servers, callbacks: Declarative fragments
        location: Human readable element path for diagnostics
    """
    http_method: str
    controller_path: str = "/"
    method_path: str = "/"
    handler_name: str = ""
    consumes: Tuple[str, ...] = ()
    produces: Tuple[str, ...] = ()
    return_type: Any = inspect.Parameter.empty
    parameters: Tuple[ParameterDescriptor, ...] = ()
    hidden: bool = False
    deprecated: bool = False
    documentation: Optional[str] = None
    operation: Optional[Dict[str, Any]] = None
    tags: Tuple[Dict[str, Any], ...] = ()
    security: Tuple[Dict[str, Any], ...] = ()
    responses: Tuple[Dict[str, Any], ...] = ()
    servers: Tuple[Dict[str, Any], ...] = ()
    callbacks: Tuple[Dict[str, Any], ...] = ()
    location: str = ""


@dataclass
class ControllerDeclarations:
    """Class-level declarations shared by every route of a controller."""
    prefix: str = "/"
    tags: List[Dict[str, Any]] = field(default_factory=list)
    security: List[Dict[str, Any]] = field(default_factory=list)
    servers: List[Dict[str, Any]] = field(default_factory=list)
    consumes: List[str] = field(default_factory=list)
    produces: List[str] = field(default_factory=list)
    security_schemes: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def extract_controller_declarations(controller_class: Type) -> ControllerDeclarations:
    """Collect prefix, tags and the class decorators along the MRO."""
    prefix = getattr(controller_class, 'prefix', '/')

    # Robustness: Handle incorrect prefix types
    if isinstance(prefix, list):
        prefix = str(prefix[0]) if prefix else "/"
    elif prefix is None:
        prefix = "/"
    elif not isinstance(prefix, str):
        prefix = str(prefix)

    declarations = ControllerDeclarations(prefix=prefix or "/")
    for name in getattr(controller_class, 'tags', []) or []:
        declarations.tags.append({"name": name})

    for klass in reversed(controller_class.__mro__):
        meta = klass.__dict__.get('__openapi__') or {}
        declarations.tags.extend(meta.get('tags', []))
        declarations.security.extend(meta.get('security', []))
        declarations.servers.extend(meta.get('servers', []))
        declarations.security_schemes.update(meta.get('security_schemes', {}))
        if 'consumes' in meta:
            declarations.consumes = list(meta['consumes'])
        if 'produces' in meta:
            declarations.produces = list(meta['produces'])

    return declarations


def extract_routes(controller_class: Type) -> List[RouteDescriptor]:
    """
    Extract route descriptors from a Controller class.

    Handlers are returned in declaration order, base classes first,
    one descriptor per route decorator.
    """
    declarations = extract_controller_declarations(controller_class)

    handlers: Dict[str, Any] = {}
    for klass in reversed(controller_class.__mro__):
        for name, member in vars(klass).items():
            if inspect.isfunction(member):
                handlers[name] = member

    routes = []
    for func in handlers.values():
        for route_meta in getattr(func, '__route_metadata__', []):
            routes.append(_extract_route(controller_class, func, route_meta, declarations))

    logger.debug("Extracted %d route(s) from %s", len(routes), controller_class.__name__)
    return routes


def _extract_route(
    controller_class: Type,
    func: Any,
    route_meta: Dict[str, Any],
    declarations: ControllerDeclarations,
) -> RouteDescriptor:
    meta = func.__dict__.get('__openapi__') or {}
    location = f"{controller_class.__name__}.{route_meta['func_name']}"
    signature = _signature(func)

    consumes = route_meta['consumes'] or meta.get('consumes') or declarations.consumes
    produces = route_meta['produces'] or meta.get('produces') or declarations.produces

    return RouteDescriptor(
        http_method=route_meta['http_method'],
        controller_path=declarations.prefix,
        method_path=route_meta['path'] or "/",
        handler_name=route_meta['func_name'],
        consumes=tuple(consumes),
        produces=tuple(produces),
        return_type=signature.return_annotation,
        parameters=tuple(_extract_parameters(signature, location)),
        hidden=bool(meta.get('hidden', False)),
        deprecated=bool(meta.get('deprecated', False)),
        documentation=inspect.getdoc(func),
        operation=meta.get('operation'),
        tags=tuple(declarations.tags + meta.get('tags', [])),
        security=tuple(declarations.security + meta.get('security', [])),
        responses=tuple(meta.get('responses', [])),
        servers=tuple(declarations.servers + meta.get('servers', [])),
        callbacks=tuple(meta.get('callbacks', [])),
        location=location,
    )


def _signature(func: Any) -> inspect.Signature:
    try:
        return inspect.signature(func, eval_str=True)
    except (NameError, TypeError, SyntaxError) as exc:
        logger.debug("Cannot evaluate annotations of %s: %s", func.__qualname__, exc)
        return inspect.signature(func)


def _extract_parameters(signature: inspect.Signature, location: str) -> List[ParameterDescriptor]:
    params = []
    for name, param in signature.parameters.items():
        if name in ('self', 'cls'):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        tp, markers, nullable = unwrap_annotation(param.annotation)
        params.append(ParameterDescriptor(
            name=name,
            type=tp,
            default=param.default,
            nullable=nullable or any(isinstance(m, Nullable) for m in markers),
            markers=markers,
            location=f"{location}({name})",
        ))
    return params


def unwrap_annotation(annotation: Any) -> Tuple[Any, Tuple[Any, ...], bool]:
    """
    Strip ``Annotated`` and ``Optional`` layers off an annotation.

    Returns:
        (inner type, collected Annotated extras, whether None was allowed)
    """
    markers: List[Any] = []
    nullable = False
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            args = get_args(annotation)
            markers.extend(args[1:])
            annotation = args[0]
        elif origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == len(args) or len(non_none) != 1:
                nullable = nullable or len(non_none) != len(args)
                break
            nullable = True
            annotation = non_none[0]
        else:
            break
    return annotation, tuple(markers), nullable
