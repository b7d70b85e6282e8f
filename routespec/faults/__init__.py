"""
routespec faults - structured error handling for spec generation.

Faults are typed signals with a stable code, a domain and a severity.
They unwind at most the route being processed and are reported
through the diagnostics sink.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)
from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    RoutingFault,
    UnboundPathVariableFault,
    PlaceholderResolutionFault,
    UnrecognizedVerbFault,
    SpecFault,
    FragmentConversionFault,
)

__all__ = [
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",
    "ConfigFault",
    "ConfigInvalidFault",
    "RoutingFault",
    "UnboundPathVariableFault",
    "PlaceholderResolutionFault",
    "UnrecognizedVerbFault",
    "SpecFault",
    "FragmentConversionFault",
]
