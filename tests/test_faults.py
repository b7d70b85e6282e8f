"""
Test: Fault taxonomy and the diagnostics sink.
"""

import logging

import pytest

from routespec.diagnostics import Diagnostics
from routespec.faults import (
    ConfigInvalidFault,
    Fault,
    FaultDomain,
    FragmentConversionFault,
    PlaceholderResolutionFault,
    Severity,
    UnboundPathVariableFault,
    UnrecognizedVerbFault,
)


# ============================================================================
# Faults
# ============================================================================

class TestFault:

    def test_requires_code_message_domain(self):
        with pytest.raises(TypeError):
            Fault(code="X", message="no domain")

    def test_domain_default_severity(self):
        fault = Fault(code="X", message="m", domain=FaultDomain.SPEC)
        assert fault.severity is Severity.WARN

    def test_str(self):
        fault = Fault(code="X", message="broken", domain=FaultDomain.SYSTEM)
        assert str(fault) == "[X] broken"

    def test_to_dict(self):
        fault = UnboundPathVariableFault("id", "UsersController.get(id)")
        assert fault.to_dict() == {
            "code": "UNBOUND_PATH_VARIABLE",
            "message": "Path variable name: 'id' not found in path.",
            "domain": "routing",
            "severity": "error",
            "metadata": {"variable": "id", "path": "UsersController.get(id)"},
        }

    def test_domain_equality(self):
        assert FaultDomain.ROUTING == "routing"
        assert FaultDomain.ROUTING != FaultDomain.SPEC


class TestDomainFaults:

    def test_fragment_conversion(self):
        fault = FragmentConversionFault("parameter", "'required' has invalid type str")
        assert fault.code == "FRAGMENT_CONVERSION"
        assert fault.severity is Severity.WARN
        assert fault.domain == FaultDomain.SPEC
        assert fault.kind == "parameter"
        assert fault.message == "Error reading parameter: 'required' has invalid type str"

    def test_unrecognized_verb_is_informational(self):
        fault = UnrecognizedVerbFault("CONNECT")
        assert fault.severity is Severity.INFO
        assert fault.metadata["verb"] == "CONNECT"

    def test_placeholder(self):
        fault = PlaceholderResolutionFault("/${x", "unterminated placeholder at 1")
        assert fault.severity is Severity.ERROR
        assert "/${x" in fault.message

    def test_config_invalid_is_fatal(self):
        fault = ConfigInvalidFault("servers", "'url' is required")
        assert fault.severity is Severity.FATAL
        assert fault.metadata["key"] == "servers"


# ============================================================================
# Diagnostics
# ============================================================================

class TestDiagnostics:

    def test_records_warnings_and_failures(self):
        diagnostics = Diagnostics()
        diagnostics.warn("discarded", "A.b")
        diagnostics.fail("aborted", "A.c")
        assert [d.message for d in diagnostics.warnings] == ["discarded"]
        assert [d.message for d in diagnostics.failures] == ["aborted"]
        assert diagnostics.failed

    def test_not_failed_with_warnings_only(self):
        diagnostics = Diagnostics()
        diagnostics.warn("discarded")
        assert not diagnostics.failed

    def test_format(self):
        diagnostics = Diagnostics()
        diagnostics.fail("aborted", "A.c")
        assert diagnostics.records[0].format() == "error: aborted [A.c]"

    def test_to_dict_includes_fault(self):
        diagnostics = Diagnostics()
        fault = UnboundPathVariableFault("id", "A.c")
        diagnostics.fail(fault.message, "A.c", fault=fault)
        data = diagnostics.records[0].to_dict()
        assert data["fault"]["code"] == "UNBOUND_PATH_VARIABLE"
        assert data["location"] == "A.c"

    def test_logs(self, caplog):
        diagnostics = Diagnostics()
        with caplog.at_level(logging.WARNING, logger="routespec.diagnostics"):
            diagnostics.warn("discarded", "A.b")
            diagnostics.fail("aborted", "A.c")
        levels = [record.levelno for record in caplog.records]
        assert levels == [logging.WARNING, logging.ERROR]
