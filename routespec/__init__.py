"""
routespec - OpenAPI 3.0 documents from declarative route metadata.

Controllers describe their routes with decorators and ``Annotated``
parameter markers; the generator turns them into a specification
document at build time, without running the application.
"""

__version__ = "0.1.0"

from .config import ConfigLoader, SpecConfig
from .diagnostics import Diagnostic, Diagnostics
from .faults import Fault, FaultDomain, Severity
from .model import ApiSpecDocument, OperationDocument, ParameterDocument, UNSET
from .openapi import OpenAPIGenerator

__all__ = [
    "__version__",
    "ConfigLoader",
    "SpecConfig",
    "Diagnostic",
    "Diagnostics",
    "Fault",
    "FaultDomain",
    "Severity",
    "ApiSpecDocument",
    "OperationDocument",
    "ParameterDocument",
    "UNSET",
    "OpenAPIGenerator",
]
