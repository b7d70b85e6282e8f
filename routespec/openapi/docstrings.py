"""
Handler docstring parsing.

Google style (``Args:`` / ``Returns:`` sections) and reST style
(``:param name:`` / ``:returns:`` fields) are both understood.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

_REST_PARAM = re.compile(r"^:param\s+(?:[\w\[\], ]+\s+)?(\w+)\s*:\s*(.*)$")
_REST_RETURNS = re.compile(r"^:returns?\s*:\s*(.*)$")
_REST_FIELD = re.compile(r"^:\w+")
_GOOGLE_PARAM = re.compile(r"^\s*(\w+)\s*(?:\([^)]*\))?\s*:\s*(.*)")

_PARAM_HEADERS = ("args:", "arguments:", "params:", "parameters:")
_RETURN_HEADERS = ("returns:", "return:")
_OTHER_HEADERS = ("raises:", "raise:", "yields:", "examples:", "example:", "note:", "notes:")


@dataclass
class ParsedDocumentation:
    """Parsed handler docstring with structured sections."""
    summary: str = ""
    description: str = ""
    parameters: Dict[str, str] = field(default_factory=dict)
    returns: str = ""

    def parameter(self, name: str) -> Optional[str]:
        return self.parameters.get(name) or None


class DocumentationParser:
    """Default free-text documentation parser."""

    def parse(self, text: Optional[str]) -> ParsedDocumentation:
        if not text:
            return ParsedDocumentation()

        lines = text.strip().split("\n")
        result = ParsedDocumentation()

        # First non-empty line is the summary
        body_start = 0
        for index, line in enumerate(lines):
            stripped = line.strip()
            if stripped:
                result.summary = stripped
                body_start = index + 1
                break

        description_lines: List[str] = []
        returns_lines: List[str] = []
        section: Optional[str] = None
        current_key: Optional[str] = None
        param_indent: Optional[int] = None

        for line in lines[body_start:]:
            stripped = line.strip()
            lower = stripped.lower()

            rest_param = _REST_PARAM.match(stripped)
            if rest_param:
                current_key = rest_param.group(1)
                result.parameters[current_key] = rest_param.group(2).strip()
                section = "rest-param"
                continue
            rest_returns = _REST_RETURNS.match(stripped)
            if rest_returns:
                returns_lines = [rest_returns.group(1).strip()]
                section = "returns"
                continue
            if _REST_FIELD.match(stripped):
                section = "other"
                continue

            if lower in _PARAM_HEADERS:
                section = "params"
                param_indent = None
                continue
            if lower.startswith(_RETURN_HEADERS):
                section = "returns"
                inline = stripped.split(":", 1)[1].strip()
                returns_lines = [inline] if inline else []
                continue
            if lower.startswith(_OTHER_HEADERS):
                section = "other"
                continue

            if section == "params":
                indent = len(line) - len(line.lstrip())
                param_match = _GOOGLE_PARAM.match(stripped)
                # Only lines at the first entry's indent start a new parameter.
                if param_match and (param_indent is None or indent == param_indent):
                    param_indent = indent
                    current_key = param_match.group(1)
                    result.parameters[current_key] = param_match.group(2).strip()
                elif current_key and stripped:
                    result.parameters[current_key] += " " + stripped
            elif section == "rest-param":
                if current_key and stripped:
                    result.parameters[current_key] += " " + stripped
            elif section == "returns":
                if stripped:
                    returns_lines.append(stripped)
            elif section is None:
                description_lines.append(stripped)

        result.description = "\n".join(description_lines).strip()
        result.returns = " ".join(line for line in returns_lines if line).strip()
        for name, value in list(result.parameters.items()):
            result.parameters[name] = value.strip()
        return result
