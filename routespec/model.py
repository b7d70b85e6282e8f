"""
Specification document model.

Typed documents for an OpenAPI 3.0 specification, built additively while
routes are processed. Every field a fragment can supply starts as ``UNSET``
so a merge never mistakes ``None``, ``False``, ``""`` or ``[]`` for
"not provided".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class _Unset:
    """Marker for a field that was never explicitly set."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_Unset":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "_Unset":
        return self


UNSET: Any = _Unset()


def is_set(value: Any) -> bool:
    return value is not UNSET


def is_empty(value: Any) -> bool:
    """True for ``UNSET``, ``None`` and empty strings or collections."""
    if value is UNSET or value is None:
        return True
    if isinstance(value, (str, list, dict, tuple, set)):
        return len(value) == 0
    return False


class ParameterLocation(str, Enum):
    """Where a parameter's value comes from."""
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"

    @classmethod
    def parse(cls, value: Any) -> "ParameterLocation":
        """Normalize ``"PATH"``, ``"path"`` or a member into a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"invalid parameter location {value!r}")


# HTTP verbs with a slot on a path item, in OpenAPI order.
PATH_ITEM_VERBS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# ContentMap: media type -> schema (None when the type has no schema).
ContentMap = Dict[str, Optional[Dict[str, Any]]]


def _content_to_dict(content: ContentMap) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for media_type, schema in content.items():
        result[media_type] = {"schema": schema} if schema is not None else {}
    return result


def _put(target: Dict[str, Any], key: str, value: Any) -> None:
    if value is not UNSET:
        target[key] = value


# ============================================================================
# Parameter / Request body / Response
# ============================================================================

@dataclass
class ParameterDocument:
    """A single operation parameter."""
    name: Any = UNSET
    location: Any = UNSET
    required: Any = UNSET
    explode: Any = UNSET
    description: Any = UNSET
    schema: Any = UNSET
    deprecated: Any = UNSET
    allow_empty_value: Any = UNSET
    style: Any = UNSET
    example: Any = UNSET

    def merge(self, other: "ParameterDocument") -> "ParameterDocument":
        """Copy every field ``other`` explicitly set onto this document."""
        if other.name is not UNSET:
            self.name = other.name
        if other.location is not UNSET:
            self.location = other.location
        if other.required is not UNSET:
            self.required = other.required
        if other.explode is not UNSET:
            self.explode = other.explode
        if other.description is not UNSET:
            self.description = other.description
        if other.schema is not UNSET:
            self.schema = other.schema
        if other.deprecated is not UNSET:
            self.deprecated = other.deprecated
        if other.allow_empty_value is not UNSET:
            self.allow_empty_value = other.allow_empty_value
        if other.style is not UNSET:
            self.style = other.style
        if other.example is not UNSET:
            self.example = other.example
        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        _put(data, "name", self.name)
        if self.location is not UNSET:
            data["in"] = ParameterLocation.parse(self.location).value
        _put(data, "description", self.description)
        _put(data, "required", self.required)
        _put(data, "deprecated", self.deprecated)
        _put(data, "allowEmptyValue", self.allow_empty_value)
        _put(data, "style", self.style)
        _put(data, "explode", self.explode)
        _put(data, "schema", self.schema)
        _put(data, "example", self.example)
        return data


@dataclass
class RequestBodyDocument:
    """An operation's request body."""
    description: Any = UNSET
    content: Any = UNSET
    required: Any = UNSET

    def merge(self, other: "RequestBodyDocument") -> "RequestBodyDocument":
        """Copy every field ``other`` explicitly set onto this document."""
        if other.description is not UNSET:
            self.description = other.description
        if other.content is not UNSET:
            self.content = other.content
        if other.required is not UNSET:
            self.required = other.required
        return self

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        _put(data, "description", self.description)
        if self.content is not UNSET:
            data["content"] = _content_to_dict(self.content)
        _put(data, "required", self.required)
        return data


@dataclass
class ResponseDocument:
    """A single response keyed by status code or ``default``."""
    description: Any = UNSET
    content: Any = UNSET
    headers: Any = UNSET

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        _put(data, "description", self.description)
        _put(data, "headers", self.headers)
        if self.content is not UNSET:
            data["content"] = _content_to_dict(self.content)
        return data


@dataclass
class ServerDocument:
    url: str
    description: Any = UNSET
    variables: Any = UNSET

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url}
        _put(data, "description", self.description)
        _put(data, "variables", self.variables)
        return data


# ============================================================================
# Operation / Path item / Callback
# ============================================================================

@dataclass
class OperationDocument:
    """One verb on one path."""
    operation_id: Any = UNSET
    summary: Any = UNSET
    description: Any = UNSET
    tags: Any = UNSET
    parameters: Any = UNSET
    request_body: Any = UNSET
    responses: Any = UNSET
    security: Any = UNSET
    servers: Any = UNSET
    callbacks: Any = UNSET
    deprecated: Any = UNSET

    def add_tag(self, name: str) -> None:
        """Append ``name`` unless already present (tags are an ordered set)."""
        if self.tags is UNSET:
            self.tags = []
        if name not in self.tags:
            self.tags.append(name)

    def add_security(self, requirement: Dict[str, List[str]]) -> None:
        if self.security is UNSET:
            self.security = []
        self.security.append(requirement)

    def add_server(self, server: ServerDocument) -> None:
        if self.servers is UNSET:
            self.servers = []
        self.servers.append(server)

    def add_parameter(self, parameter: ParameterDocument) -> None:
        if not parameter.name:
            raise ValueError("parameter name must be set before it is attached")
        if self.parameters is UNSET:
            self.parameters = []
        self.parameters.append(parameter)

    def put_response(self, code: str, response: ResponseDocument) -> None:
        if self.responses is UNSET:
            self.responses = {}
        self.responses[code] = response

    def put_callback(self, name: str, callback: "CallbackDocument") -> None:
        if self.callbacks is UNSET:
            self.callbacks = {}
        self.callbacks[name] = callback

    def attach_request_body(self, body: RequestBodyDocument) -> None:
        if self.request_body is not UNSET:
            raise ValueError("operation already carries a request body")
        self.request_body = body

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        _put(data, "tags", self.tags)
        _put(data, "summary", self.summary)
        _put(data, "description", self.description)
        _put(data, "operationId", self.operation_id)
        if self.parameters is not UNSET:
            data["parameters"] = [p.to_dict() for p in self.parameters]
        if self.request_body is not UNSET:
            data["requestBody"] = self.request_body.to_dict()
        if self.responses is not UNSET:
            data["responses"] = {code: r.to_dict() for code, r in self.responses.items()}
        if self.callbacks is not UNSET:
            data["callbacks"] = {name: c.to_dict() for name, c in self.callbacks.items()}
        _put(data, "deprecated", self.deprecated)
        _put(data, "security", self.security)
        if self.servers is not UNSET:
            data["servers"] = [s.to_dict() for s in self.servers]
        return data


@dataclass
class PathItemDocument:
    """Operations keyed by lower-case verb."""
    operations: Dict[str, OperationDocument] = field(default_factory=dict)

    def set_operation(self, verb: str, operation: OperationDocument) -> bool:
        """Attach ``operation`` under ``verb``; False when the verb has no slot."""
        key = verb.lower()
        if key not in PATH_ITEM_VERBS:
            return False
        self.operations[key] = operation
        return True

    def remove_operation(self, operation: OperationDocument) -> None:
        for verb, existing in list(self.operations.items()):
            if existing is operation:
                del self.operations[verb]

    def to_dict(self) -> Dict[str, Any]:
        return {
            verb: self.operations[verb].to_dict()
            for verb in PATH_ITEM_VERBS
            if verb in self.operations
        }


@dataclass
class CallbackDocument:
    """Either path items keyed by URL expression or a component reference."""
    expressions: Dict[str, PathItemDocument] = field(default_factory=dict)
    ref: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.ref is not None:
            return {"$ref": self.ref}
        return {expr: item.to_dict() for expr, item in self.expressions.items()}


# ============================================================================
# Document
# ============================================================================

@dataclass
class ComponentsDocument:
    schemas: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    callbacks: Dict[str, CallbackDocument] = field(default_factory=dict)
    security_schemes: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.schemas:
            data["schemas"] = dict(self.schemas)
        if self.callbacks:
            data["callbacks"] = {name: c.to_dict() for name, c in self.callbacks.items()}
        if self.security_schemes:
            data["securitySchemes"] = dict(self.security_schemes)
        return data


@dataclass
class ApiSpecDocument:
    """The specification document of one compilation context."""
    openapi: str = "3.0.1"
    info: Dict[str, Any] = field(default_factory=dict)
    servers: List[ServerDocument] = field(default_factory=list)
    paths: Dict[str, PathItemDocument] = field(default_factory=dict)
    components: ComponentsDocument = field(default_factory=ComponentsDocument)

    def path_item(self, path: str) -> PathItemDocument:
        """Return the path item for ``path``, creating it on first use."""
        item = self.paths.get(path)
        if item is None:
            item = PathItemDocument()
            self.paths[path] = item
        return item

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"openapi": self.openapi, "info": dict(self.info)}
        if self.servers:
            data["servers"] = [s.to_dict() for s in self.servers]
        data["paths"] = {path: item.to_dict() for path, item in self.paths.items()}
        components = self.components.to_dict()
        if components:
            data["components"] = components
        return data
