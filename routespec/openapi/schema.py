"""
Python type -> JSON Schema resolution.

Scalar, container and union types become inline schema fragments.
Dataclasses and annotated classes are registered once under
``components/schemas`` and referenced with ``$ref``.
"""

from __future__ import annotations

import copy
import dataclasses
import datetime
import decimal
import enum
import inspect
import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)
import types

from ..model import ApiSpecDocument, ContentMap

logger = logging.getLogger("routespec.openapi.schema")


# ─── Type → JSON Schema mapping ──────────────────────────────────────────────

_PYTHON_TYPE_MAP: Dict[type, Dict[str, str]] = {
    str: {"type": "string"},
    int: {"type": "integer", "format": "int64"},
    float: {"type": "number", "format": "double"},
    bool: {"type": "boolean"},
    decimal.Decimal: {"type": "number"},
    datetime.datetime: {"type": "string", "format": "date-time"},
    datetime.date: {"type": "string", "format": "date"},
    datetime.time: {"type": "string", "format": "time"},
    uuid.UUID: {"type": "string", "format": "uuid"},
}

# Media types whose bytes travel raw rather than base64 encoded.
_BINARY_MEDIA_PREFIXES = ("application/octet-stream", "multipart/", "image/", "audio/", "video/")

_JSON_SCALARS = (str, int, float, bool)

REF_PREFIX = "#/components/schemas/"


def _is_union(origin: Any) -> bool:
    return origin is Union or origin is types.UnionType


def _is_model_class(tp: Any) -> bool:
    return isinstance(tp, type) and (
        dataclasses.is_dataclass(tp) or bool(getattr(tp, "__annotations__", None))
    )


class SchemaResolver:
    """
    Default structural schema resolver.

    ``resolve_schema`` returns a fresh dict on every call, so schemas
    can be mutated by callers without touching shared components.
    """

    def resolve_schema(
        self,
        document: ApiSpecDocument,
        element: Any,
        tp: Any,
        media_type: str,
    ) -> Optional[Dict[str, Any]]:
        """Schema for ``tp`` as sent with ``media_type``; None when ``tp`` has no body."""
        if tp is inspect.Parameter.empty or tp is None or tp is type(None):
            return None
        return self._schema_for(document, tp, media_type)

    def build_content(
        self,
        document: ApiSpecDocument,
        element: Any,
        tp: Any,
        media_types: Sequence[str],
    ) -> ContentMap:
        """One content entry per media type, in declaration order."""
        content: ContentMap = {}
        for media_type in media_types:
            schema = self.resolve_schema(document, element, tp, media_type)
            if schema is not None:
                schema = self.bind_schema_for_element(element, tp, schema)
            content[media_type] = schema
        return content

    def bind_schema_override(
        self,
        element: Any,
        schema: Optional[Dict[str, Any]],
        override: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Return ``schema`` with the explicitly declared ``override`` keys applied."""
        bound = copy.deepcopy(schema) if schema else {}
        _deep_update(bound, override)
        return bound

    def bind_schema_for_element(
        self,
        element: Any,
        tp: Any,
        schema: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Apply element-level facts (a declared default value) to ``schema``."""
        default = getattr(element, "default", inspect.Parameter.empty)
        if isinstance(default, enum.Enum):
            default = default.value
        if (
            default is not inspect.Parameter.empty
            and isinstance(default, _JSON_SCALARS)
            and "default" not in schema
            and "$ref" not in schema
        ):
            schema["default"] = default
        return schema

    # ── Type dispatch ────────────────────────────────────────────────────

    def _schema_for(self, document: ApiSpecDocument, tp: Any, media_type: str) -> Dict[str, Any]:
        if tp is Any or tp is inspect.Parameter.empty:
            return {}

        if tp is bytes or tp is bytearray:
            binary = media_type.startswith(_BINARY_MEDIA_PREFIXES)
            return {"type": "string", "format": "binary" if binary else "byte"}

        if isinstance(tp, type) and tp in _PYTHON_TYPE_MAP:
            return dict(_PYTHON_TYPE_MAP[tp])

        origin = get_origin(tp)
        args = get_args(tp)

        if origin is Annotated:
            return self._schema_for(document, args[0], media_type)

        # Optional[X] → nullable
        if _is_union(origin):
            non_none = [a for a in args if a is not type(None)]
            if len(non_none) == 1:
                schema = self._schema_for(document, non_none[0], media_type)
                schema["nullable"] = True
                return schema
            schema = {"anyOf": [self._schema_for(document, a, media_type) for a in non_none]}
            if len(non_none) != len(args):
                schema["nullable"] = True
            return schema

        if origin is Literal:
            values = list(args)
            schema = self._schema_for(document, type(values[0]), media_type) if values else {}
            schema["enum"] = values
            return schema

        if origin in (set, frozenset):
            items = self._schema_for(document, args[0], media_type) if args else {}
            return {"type": "array", "items": items, "uniqueItems": True}

        if origin is tuple:
            if args and args[-1] is not Ellipsis:
                return {
                    "type": "array",
                    "items": {"anyOf": [self._schema_for(document, a, media_type) for a in args]}
                    if len(set(args)) > 1 else self._schema_for(document, args[0], media_type),
                    "minItems": len(args),
                    "maxItems": len(args),
                }
            items = self._schema_for(document, args[0], media_type) if args else {}
            return {"type": "array", "items": items}

        if origin is not None and isinstance(origin, type) and issubclass(origin, Mapping):
            values = self._schema_for(document, args[1], media_type) if len(args) > 1 else {}
            return {"type": "object", "additionalProperties": values}

        if (
            origin is not None
            and isinstance(origin, type)
            and issubclass(origin, (Sequence, Iterable))
            and origin not in (str, bytes)
        ):
            items = self._schema_for(document, args[0], media_type) if args else {}
            return {"type": "array", "items": items}

        if tp in (list, tuple, set, frozenset):
            return {"type": "array", "items": {}}
        if tp is dict:
            return {"type": "object"}

        if isinstance(tp, type) and issubclass(tp, enum.Enum):
            return self._enum_schema(tp)

        if _is_model_class(tp):
            return {"$ref": REF_PREFIX + self._register(document, tp, media_type)}

        return {"type": "object"}

    def _enum_schema(self, tp: type) -> Dict[str, Any]:
        values = [member.value for member in tp]
        if values and all(isinstance(v, int) and not isinstance(v, bool) for v in values):
            return {"type": "integer", "enum": values}
        return {"type": "string", "enum": [str(v) for v in values]}

    # ── Components ───────────────────────────────────────────────────────

    def _register(self, document: ApiSpecDocument, cls: type, media_type: str) -> str:
        """Register ``cls`` under ``components/schemas`` and return its name."""
        name = cls.__name__
        schemas = document.components.schemas
        if name in schemas:
            return name

        # Placeholder first so self-referencing models terminate.
        schemas[name] = {"type": "object"}
        schemas[name] = self._model_schema(document, cls, media_type)
        logger.debug("Registered component schema %s", name)
        return name

    def _model_schema(self, document: ApiSpecDocument, cls: type, media_type: str) -> Dict[str, Any]:
        try:
            hints = get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as exc:
            logger.debug("Cannot evaluate annotations of %s: %s", cls.__name__, exc)
            hints = dict(getattr(cls, "__annotations__", {}))

        required_names = _required_fields(cls, hints)
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for field_name, field_type in hints.items():
            if field_name.startswith("_"):
                continue
            properties[field_name] = self._schema_for(document, field_type, media_type)
            if field_name in required_names:
                required.append(field_name)

        schema: Dict[str, Any] = {
            "type": "object",
            "properties": properties,
        }
        if required:
            schema["required"] = required

        # Dataclasses without a docstring get a generated "Name(field: ...)" one.
        doc = inspect.getdoc(cls)
        if doc and not doc.startswith(cls.__name__ + "("):
            schema["description"] = doc.split("\n")[0]

        return schema


def _required_fields(cls: type, hints: Dict[str, Any]) -> Tuple[str, ...]:
    if dataclasses.is_dataclass(cls):
        return tuple(
            f.name for f in dataclasses.fields(cls)
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        )
    return tuple(
        name for name in hints
        if getattr(cls, name, inspect.Parameter.empty) is inspect.Parameter.empty
    )


def _deep_update(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = copy.deepcopy(value)
