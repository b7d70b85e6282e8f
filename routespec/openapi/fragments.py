"""
Fragment conversion.

Declarative fragments are plain key/value mappings (OpenAPI spelling)
collected from decorators and ``Annotated`` markers. The converter turns
each one into a typed document and raises ``FragmentConversionFault``
when the mapping does not describe a valid document.
"""

import copy
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from ..faults import FragmentConversionFault
from ..model import (
    UNSET,
    ContentMap,
    OperationDocument,
    ParameterDocument,
    ParameterLocation,
    RequestBodyDocument,
    ResponseDocument,
    ServerDocument,
)

logger = logging.getLogger("routespec.openapi.fragments")

# Resolves a Python type declared inside a fragment for a media type.
TypeResolver = Callable[[Any, str], Optional[Dict[str, Any]]]

# Fragment keys that are never copied onto the parameter document.
PARAMETER_EXCLUDED_KEYS = frozenset({"schema", "hidden"})


def _expect_mapping(kind: str, value: Any) -> Mapping:
    if not isinstance(value, Mapping):
        raise FragmentConversionFault(kind, f"expected a mapping, got {type(value).__name__}")
    return value


def _expect(kind: str, key: str, value: Any, types: Any) -> Any:
    if not isinstance(value, types):
        raise FragmentConversionFault(kind, f"'{key}' has invalid type {type(value).__name__}")
    return value


def _expect_list(kind: str, key: str, value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    raise FragmentConversionFault(kind, f"'{key}' must be a list")


class FragmentConverter:
    """
    Converts specification fragments into document objects.

    Args:
        resolve_type: Resolves a Python type found in a ``schema`` slot of
            a fragment's content. Without one, only literal schema
            mappings are accepted.
        default_media_type: Media type used when content is given as a
            bare schema or type.
    """

    def __init__(
        self,
        resolve_type: Optional[TypeResolver] = None,
        default_media_type: str = "application/json",
    ):
        self.resolve_type = resolve_type
        self.default_media_type = default_media_type

    # ── Operation ────────────────────────────────────────────────────────

    def to_operation(self, fragment: Any) -> OperationDocument:
        data = _expect_mapping("operation", fragment)
        operation = OperationDocument()

        if "operationId" in data:
            operation.operation_id = _expect("operation", "operationId", data["operationId"], str)
        if "summary" in data:
            operation.summary = _expect("operation", "summary", data["summary"], str)
        if "description" in data:
            operation.description = _expect("operation", "description", data["description"], str)
        if "deprecated" in data:
            operation.deprecated = _expect("operation", "deprecated", data["deprecated"], bool)

        for tag in _expect_list("operation", "tags", data.get("tags", [])):
            operation.add_tag(self.to_tag(tag))

        parameters = _expect_list("operation", "parameters", data.get("parameters", []))
        for parameter in parameters:
            parameter = _expect_mapping("parameter", parameter)
            if parameter.get("hidden"):
                continue
            document = self.to_parameter(parameter)
            if is_unnamed(document):
                raise FragmentConversionFault("operation", "parameter without a name")
            if "schema" in parameter:
                document.schema = self.to_schema("parameter", parameter["schema"], self.default_media_type)
            operation.add_parameter(document)

        if "requestBody" in data:
            operation.attach_request_body(self.to_request_body(data["requestBody"]))

        for code, response in self.iter_responses(data.get("responses", [])):
            operation.put_response(code, self.to_response(response))

        for requirement in _expect_list("operation", "security", data.get("security", [])):
            operation.add_security(self.to_security_requirement(requirement))

        for server in _expect_list("operation", "servers", data.get("servers", [])):
            operation.add_server(self.to_server(server))

        return operation

    def to_tag(self, fragment: Any) -> str:
        if isinstance(fragment, str) and fragment:
            return fragment
        data = _expect_mapping("tag", fragment)
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise FragmentConversionFault("tag", "'name' is required")
        return name

    # ── Parameter ────────────────────────────────────────────────────────

    def to_parameter(self, fragment: Any) -> ParameterDocument:
        """Partial parameter document; ``schema`` and ``hidden`` are left out."""
        data = _expect_mapping("parameter", fragment)
        parameter = ParameterDocument()

        if "name" in data:
            parameter.name = _expect("parameter", "name", data["name"], str)
        if "in" in data:
            try:
                parameter.location = ParameterLocation.parse(data["in"])
            except ValueError as exc:
                raise FragmentConversionFault("parameter", str(exc))
        if "required" in data:
            parameter.required = _expect("parameter", "required", data["required"], bool)
        if "explode" in data:
            parameter.explode = _expect("parameter", "explode", data["explode"], bool)
        if "description" in data:
            parameter.description = _expect("parameter", "description", data["description"], str)
        if "deprecated" in data:
            parameter.deprecated = _expect("parameter", "deprecated", data["deprecated"], bool)
        if "allowEmptyValue" in data:
            parameter.allow_empty_value = _expect(
                "parameter", "allowEmptyValue", data["allowEmptyValue"], bool
            )
        if "style" in data:
            parameter.style = _expect("parameter", "style", data["style"], str)
        if "example" in data:
            parameter.example = copy.deepcopy(data["example"])
        return parameter

    # ── Request body / responses ─────────────────────────────────────────

    def to_request_body(self, fragment: Any) -> RequestBodyDocument:
        data = _expect_mapping("request body", fragment)
        body = RequestBodyDocument()
        if "description" in data:
            body.description = _expect("request body", "description", data["description"], str)
        if "required" in data:
            body.required = _expect("request body", "required", data["required"], bool)
        if "content" in data:
            body.content = self.to_content("request body", data["content"])
        return body

    def to_response(self, fragment: Any) -> ResponseDocument:
        data = _expect_mapping("response", fragment)
        response = ResponseDocument()
        if "description" in data:
            response.description = _expect("response", "description", data["description"], str)
        if "content" in data:
            response.content = self.to_content("response", data["content"])
        if "headers" in data:
            response.headers = copy.deepcopy(dict(_expect_mapping("response", data["headers"])))
        return response

    def iter_responses(self, responses: Any):
        """Yield ``(code, fragment)`` pairs from a list or a mapping of responses."""
        if isinstance(responses, Mapping):
            for code, fragment in responses.items():
                yield str(code), fragment
            return
        for fragment in _expect_list("operation", "responses", responses):
            data = _expect_mapping("response", fragment)
            yield response_code(data), data

    # ── Servers / security ───────────────────────────────────────────────

    def to_server(self, fragment: Any) -> ServerDocument:
        data = _expect_mapping("server", fragment)
        url = data.get("url")
        if not isinstance(url, str) or not url:
            raise FragmentConversionFault("server", "'url' is required")
        server = ServerDocument(url=url)
        if "description" in data:
            server.description = _expect("server", "description", data["description"], str)
        if data.get("variables"):
            server.variables = copy.deepcopy(dict(_expect_mapping("server", data["variables"])))
        return server

    def to_security_requirement(self, fragment: Any) -> Dict[str, List[str]]:
        """``{"name": n, "scopes": [...]}`` or ``{n: [...]}`` -> ``{n: [...]}``."""
        data = _expect_mapping("security requirement", fragment)
        if "name" in data:
            name = data["name"]
            if not isinstance(name, str) or not name:
                raise FragmentConversionFault("security requirement", "'name' is required")
            scopes = _expect_list("security requirement", "scopes", data.get("scopes", []))
            return {name: [str(scope) for scope in scopes]}

        requirement: Dict[str, List[str]] = {}
        for name, scopes in data.items():
            scopes = _expect_list("security requirement", str(name), scopes)
            requirement[str(name)] = [str(scope) for scope in scopes]
        return requirement

    # ── Content ──────────────────────────────────────────────────────────

    def to_content(self, kind: str, content: Any) -> ContentMap:
        """
        Accepts ``[{"mediaType": ..., "schema": ...}, ...]`` or
        ``{media_type: {"schema": ...}}`` / ``{media_type: type}``.
        """
        result: ContentMap = {}
        if isinstance(content, Mapping):
            for media_type, entry in content.items():
                if isinstance(entry, Mapping) and "schema" not in entry:
                    result[str(media_type)] = None
                    continue
                schema = entry["schema"] if isinstance(entry, Mapping) else entry
                result[str(media_type)] = self.to_schema(kind, schema, str(media_type))
            return result

        for entry in _expect_list(kind, "content", content):
            entry = _expect_mapping(kind, entry)
            media_type = entry.get("mediaType") or self.default_media_type
            if not isinstance(media_type, str):
                raise FragmentConversionFault(kind, "'mediaType' must be a string")
            schema = entry.get("schema")
            result[media_type] = self.to_schema(kind, schema, media_type) if schema is not None else None
        return result

    def to_schema(self, kind: str, schema: Any, media_type: str) -> Optional[Dict[str, Any]]:
        if isinstance(schema, Mapping):
            return copy.deepcopy(dict(schema))
        if self.resolve_type is None:
            raise FragmentConversionFault(kind, f"cannot resolve schema {schema!r}")
        return self.resolve_type(schema, media_type)


def response_code(fragment: Any) -> str:
    code = _expect_mapping("response", fragment).get("responseCode", "default")
    if code is None or code == "":
        return "default"
    return str(code)


def is_unnamed(parameter: ParameterDocument) -> bool:
    return parameter.name is UNSET or not parameter.name
