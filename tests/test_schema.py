"""
Test: Type-to-JSON-Schema resolution.
"""

import datetime
import enum
import inspect
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Literal, Optional, Set, Tuple, Union

import pytest

from routespec.controller.metadata import ParameterDescriptor
from routespec.model import ApiSpecDocument
from routespec.openapi.schema import SchemaResolver


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"


class Priority(enum.IntEnum):
    LOW = 1
    HIGH = 2


@dataclass
class Address:
    street: str
    city: Optional[str] = None


@dataclass
class Customer:
    """A paying customer."""
    name: str
    address: Address
    tags: List[str] = field(default_factory=list)


@dataclass
class Node:
    value: int
    children: List["Node"] = field(default_factory=list)


@pytest.fixture
def resolver():
    return SchemaResolver()


@pytest.fixture
def doc():
    return ApiSpecDocument()


def _schema(resolver, doc, tp, media_type="application/json"):
    return resolver.resolve_schema(doc, None, tp, media_type)


# ============================================================================
# Scalars and containers
# ============================================================================

class TestTypeToSchema:

    @pytest.mark.parametrize("tp,expected", [
        (str, {"type": "string"}),
        (int, {"type": "integer", "format": "int64"}),
        (float, {"type": "number", "format": "double"}),
        (bool, {"type": "boolean"}),
        (datetime.datetime, {"type": "string", "format": "date-time"}),
        (datetime.date, {"type": "string", "format": "date"}),
        (uuid.UUID, {"type": "string", "format": "uuid"}),
    ])
    def test_scalars(self, resolver, doc, tp, expected):
        assert _schema(resolver, doc, tp) == expected

    def test_no_body_types(self, resolver, doc):
        assert _schema(resolver, doc, inspect.Parameter.empty) is None
        assert _schema(resolver, doc, None) is None
        assert _schema(resolver, doc, type(None)) is None

    def test_any(self, resolver, doc):
        assert _schema(resolver, doc, Any) == {}

    def test_bytes_depends_on_media_type(self, resolver, doc):
        assert _schema(resolver, doc, bytes)["format"] == "byte"
        assert _schema(resolver, doc, bytes, "application/octet-stream")["format"] == "binary"
        assert _schema(resolver, doc, bytes, "multipart/form-data")["format"] == "binary"

    def test_optional(self, resolver, doc):
        assert _schema(resolver, doc, Optional[str]) == {"type": "string", "nullable": True}

    def test_union(self, resolver, doc):
        schema = _schema(resolver, doc, Union[str, int])
        assert len(schema["anyOf"]) == 2
        assert "nullable" not in schema

    def test_list(self, resolver, doc):
        assert _schema(resolver, doc, List[int]) == {
            "type": "array", "items": {"type": "integer", "format": "int64"},
        }

    def test_builtin_generic_list(self, resolver, doc):
        assert _schema(resolver, doc, list[str])["items"] == {"type": "string"}

    def test_set(self, resolver, doc):
        schema = _schema(resolver, doc, Set[str])
        assert schema["uniqueItems"] is True

    def test_fixed_tuple(self, resolver, doc):
        schema = _schema(resolver, doc, Tuple[str, str])
        assert schema["minItems"] == 2
        assert schema["items"] == {"type": "string"}

    def test_dict(self, resolver, doc):
        schema = _schema(resolver, doc, Dict[str, float])
        assert schema["type"] == "object"
        assert schema["additionalProperties"]["type"] == "number"

    def test_literal(self, resolver, doc):
        assert _schema(resolver, doc, Literal["a", "b"]) == {"type": "string", "enum": ["a", "b"]}

    def test_annotated(self, resolver, doc):
        assert _schema(resolver, doc, Annotated[int, "meta"])["type"] == "integer"

    def test_enum(self, resolver, doc):
        assert _schema(resolver, doc, Color) == {"type": "string", "enum": ["red", "green"]}

    def test_int_enum(self, resolver, doc):
        assert _schema(resolver, doc, Priority) == {"type": "integer", "enum": [1, 2]}

    def test_unknown_fallback(self, resolver, doc):
        assert _schema(resolver, doc, 42) == {"type": "object"}

    def test_fresh_dict_each_call(self, resolver, doc):
        first = _schema(resolver, doc, str)
        first["description"] = "mutated"
        assert _schema(resolver, doc, str) == {"type": "string"}


# ============================================================================
# Components
# ============================================================================

class TestComponentSchemas:

    def test_dataclass_registered_as_ref(self, resolver, doc):
        assert _schema(resolver, doc, Customer) == {"$ref": "#/components/schemas/Customer"}
        customer = doc.components.schemas["Customer"]
        assert customer["required"] == ["name", "address"]
        assert customer["description"] == "A paying customer."
        assert customer["properties"]["address"] == {"$ref": "#/components/schemas/Address"}
        assert "Address" in doc.components.schemas

    def test_generated_dataclass_doc_skipped(self, resolver, doc):
        _schema(resolver, doc, Address)
        assert "description" not in doc.components.schemas["Address"]

    def test_optional_field_nullable(self, resolver, doc):
        _schema(resolver, doc, Address)
        assert doc.components.schemas["Address"]["properties"]["city"] == {
            "type": "string", "nullable": True,
        }

    def test_self_reference_terminates(self, resolver, doc):
        _schema(resolver, doc, Node)
        node = doc.components.schemas["Node"]
        assert node["properties"]["children"]["items"] == {"$ref": "#/components/schemas/Node"}

    def test_registered_once(self, resolver, doc):
        _schema(resolver, doc, Customer)
        registered = doc.components.schemas["Customer"]
        _schema(resolver, doc, Customer)
        assert doc.components.schemas["Customer"] is registered


# ============================================================================
# Binding
# ============================================================================

class TestBinding:

    def test_override(self, resolver):
        base = {"type": "integer", "format": "int64"}
        bound = resolver.bind_schema_override(None, base, {"minimum": 1, "format": "int32"})
        assert bound == {"type": "integer", "format": "int32", "minimum": 1}
        assert base == {"type": "integer", "format": "int64"}

    def test_override_without_schema(self, resolver):
        assert resolver.bind_schema_override(None, None, {"type": "string"}) == {"type": "string"}

    def test_element_default(self, resolver):
        element = ParameterDescriptor(name="limit", type=int, default=20)
        assert resolver.bind_schema_for_element(element, int, {"type": "integer"}) == {
            "type": "integer", "default": 20,
        }

    def test_enum_default(self, resolver):
        element = ParameterDescriptor(name="color", type=Color, default=Color.RED)
        schema = resolver.bind_schema_for_element(element, Color, {"type": "string"})
        assert schema["default"] == "red"

    def test_none_default_not_bound(self, resolver):
        element = ParameterDescriptor(name="q", type=str, default=None)
        assert resolver.bind_schema_for_element(element, str, {"type": "string"}) == {"type": "string"}

    def test_build_content_per_media_type(self, resolver, doc):
        content = resolver.build_content(doc, None, str, ["application/json", "text/plain"])
        assert list(content) == ["application/json", "text/plain"]

    def test_build_content_idempotent(self, resolver, doc):
        first = resolver.build_content(doc, None, Customer, ["application/json"])
        second = resolver.build_content(doc, None, Customer, ["application/json"])
        assert first == second
        assert first["application/json"] is not second["application/json"]
