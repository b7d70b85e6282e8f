"""
routespec faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- ROUTING faults
- SPEC faults
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# ROUTING Faults
# ============================================================================

class RoutingFault(Fault):
    """Base class for faults that abort the route being processed."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.ROUTING,
            severity=severity,
            metadata=metadata,
        )


class UnboundPathVariableFault(RoutingFault):
    """An explicit path binding names a variable the template does not declare."""

    def __init__(self, variable: str, path: str, **kwargs):
        super().__init__(
            code="UNBOUND_PATH_VARIABLE",
            message=f"Path variable name: '{variable}' not found in path.",
            metadata={"variable": variable, "path": path, **kwargs.get("metadata", {})},
        )


class PlaceholderResolutionFault(RoutingFault):
    """A ``${...}`` placeholder in a path template could not be parsed."""

    def __init__(self, template: str, reason: str, **kwargs):
        super().__init__(
            code="PLACEHOLDER_UNRESOLVABLE",
            message=f"Cannot resolve placeholders in '{template}': {reason}",
            metadata={"template": template, "reason": reason, **kwargs.get("metadata", {})},
        )


class UnrecognizedVerbFault(RoutingFault):
    """The route's HTTP verb has no slot on a path item."""

    def __init__(self, verb: str, **kwargs):
        super().__init__(
            code="UNRECOGNIZED_VERB",
            message=f"HTTP method '{verb}' cannot be attached to a path item",
            severity=Severity.INFO,
            metadata={"verb": verb, **kwargs.get("metadata", {})},
        )


# ============================================================================
# SPEC Faults
# ============================================================================

class SpecFault(Fault):
    """Base class for specification document faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.WARN,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.SPEC,
            severity=severity,
            metadata=metadata,
        )


class FragmentConversionFault(SpecFault):
    """An explicit specification fragment cannot be converted into a document."""

    def __init__(self, kind: str, reason: str, **kwargs):
        super().__init__(
            code="FRAGMENT_CONVERSION",
            message=f"Error reading {kind}: {reason}",
            metadata={"kind": kind, "reason": reason, **kwargs.get("metadata", {})},
        )
        self.kind = kind
        self.reason = reason
