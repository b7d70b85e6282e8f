"""
Parameter markers for handler signatures.

Markers are attached with ``typing.Annotated``::

    def retrieve(
        self,
        id: Annotated[int, PathVariable()],
        trace: Annotated[str, Header("X-Trace-Id")],
        fields: Annotated[Optional[str], QueryValue(), Parameter(description="Fields")],
    ):
        ...
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


def camelize(name: str) -> str:
    """``operation_id`` -> ``operationId``; a trailing ``_`` is dropped (``in_``)."""
    name = name.rstrip("_")
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def fragment(**values: Any) -> Dict[str, Any]:
    """Build a key/value specification fragment from keyword arguments.

    Keys are converted to their OpenAPI spelling and ``None`` values are
    dropped, so the fragment only holds what was explicitly declared.
    """
    return {camelize(key): value for key, value in values.items() if value is not None}


# ============================================================================
# Binding markers
# ============================================================================

@dataclass(frozen=True)
class Bindable:
    """Generic binding marker: the framework binds this value itself."""


@dataclass(frozen=True)
class PathVariable(Bindable):
    """Bind to a path variable, ``value`` overrides the variable name."""
    value: Optional[str] = None


@dataclass(frozen=True)
class QueryValue(Bindable):
    """Bind to a query parameter, ``value`` overrides the parameter name."""
    value: Optional[str] = None


@dataclass(frozen=True)
class Header(Bindable):
    """Bind to a header; defaults to the hyphenated parameter name."""
    value: Optional[str] = None
    name: Optional[str] = None

    @property
    def header_name(self) -> Optional[str]:
        return self.name or self.value


@dataclass(frozen=True)
class CookieValue(Bindable):
    """Bind to a cookie, ``value`` overrides the cookie name."""
    value: Optional[str] = None


@dataclass(frozen=True)
class Body(Bindable):
    """The parameter carries the whole request body."""


# ============================================================================
# Element flags
# ============================================================================

@dataclass(frozen=True)
class JsonIgnore:
    """Never serialized, so never part of a synthesized body."""


@dataclass(frozen=True)
class Hidden:
    """Excluded from the generated specification."""


@dataclass(frozen=True)
class Nullable:
    """The value may be absent; same effect as ``Optional[...]``."""


# ============================================================================
# Specification fragments
# ============================================================================

class Parameter:
    """
    Explicit parameter fragment.

    Keyword arguments use Python spelling and are stored with their
    OpenAPI keys (``allow_empty_value`` -> ``allowEmptyValue``, ``in_`` ->
    ``in``). ``hidden=True`` removes the parameter from the document and
    ``schema`` is bound onto the parameter's resolved schema.
    """

    def __init__(self, name: Optional[str] = None, **values: Any):
        self.values: Dict[str, Any] = fragment(name=name, **values)

    @property
    def hidden(self) -> bool:
        return bool(self.values.get("hidden", False))

    def __repr__(self) -> str:
        return f"Parameter({self.values!r})"


class RequestBody:
    """Explicit request body fragment declared on the body parameter."""

    def __init__(self, **values: Any):
        self.values: Dict[str, Any] = fragment(**values)

    def __repr__(self) -> str:
        return f"RequestBody({self.values!r})"
