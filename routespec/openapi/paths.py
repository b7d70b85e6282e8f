"""
Path template binding.

Route templates follow the URI template syntax used by route
declarations::

    /users/{id}            simple variable
    /files/{path*}         exploded variable
    /items/{id:\\d+}       variable with a match modifier (ignored here)
    /search{?q,limit}      query-style variables
    /a{/b}{.ext}           path-segment and label expansions

A controller template and a method template are nested into one route
template; its variables and OpenAPI path string are derived from it.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .placeholders import PlaceholderResolver

_EXPRESSION = re.compile(r"\{([^{}]*)\}")
_OPERATORS = "+#./;?&"
_QUERY_OPERATORS = "?&"
_DIRECT_NEST = "?&/#."


@dataclass(frozen=True)
class PathVariable:
    """A variable declared by a route template."""
    name: str
    query: bool = False
    exploded: bool = False


@dataclass(frozen=True)
class BoundPath:
    """Result of nesting a method template into a controller template."""
    template: str
    path: str
    variables: Tuple[PathVariable, ...] = ()

    def variable_map(self) -> Dict[str, PathVariable]:
        return {v.name: v for v in self.variables}


def _split_expression(expression: str) -> Tuple[str, List[Tuple[str, bool]]]:
    operator = ""
    if expression and expression[0] in _OPERATORS:
        operator, expression = expression[0], expression[1:]

    specs = []
    for raw in expression.split(","):
        raw = raw.strip()
        exploded = raw.endswith("*")
        if exploded:
            raw = raw[:-1]
        name = raw.split(":", 1)[0].strip()
        if name:
            specs.append((name, exploded))
    return operator, specs


class UriTemplate:
    """A parsed route template."""

    def __init__(self, template: Optional[str]):
        template = (template or "/").strip()
        if not template.startswith("/") and not template.startswith("{/"):
            template = "/" + template
        self.template = template

    def __repr__(self) -> str:
        return f"UriTemplate({self.template!r})"

    def nest(self, other: Optional[str]) -> "UriTemplate":
        """Append ``other`` below this template."""
        other = (other or "").strip()
        base = self.template.rstrip("/")
        if not other or other == "/":
            joined = base
        elif other.startswith("{") and len(other) > 1 and other[1] in _DIRECT_NEST:
            joined = base + other
        else:
            joined = base + "/" + other.lstrip("/")

        joined = re.sub(r"/{2,}", "/", joined)
        if len(joined) > 1 and joined.endswith("/"):
            joined = joined.rstrip("/")
        return UriTemplate(joined or "/")

    @property
    def variables(self) -> List[PathVariable]:
        """Variables in order of appearance, first declaration wins."""
        seen: Dict[str, PathVariable] = {}
        for match in _EXPRESSION.finditer(self.template):
            operator, specs = _split_expression(match.group(1))
            for name, exploded in specs:
                if name not in seen:
                    seen[name] = PathVariable(
                        name=name,
                        query=bool(operator) and operator in _QUERY_OPERATORS,
                        exploded=exploded,
                    )
        return list(seen.values())

    def to_path_string(self) -> str:
        """OpenAPI path: query expressions dropped, variables rendered as ``{name}``."""

        def render(match: "re.Match[str]") -> str:
            operator, specs = _split_expression(match.group(1))
            if operator and operator in _QUERY_OPERATORS:
                return ""
            names = ["{%s}" % name for name, _ in specs]
            if operator == "/":
                return "".join("/" + n for n in names)
            if operator == ".":
                return "".join("." + n for n in names)
            return ",".join(names)

        path = _EXPRESSION.sub(render, self.template)
        path = re.sub(r"/{2,}", "/", path)
        if len(path) > 1 and path.endswith("/"):
            path = path.rstrip("/")
        return path or "/"


class PathTemplateBinder:
    """Resolves placeholders in both templates and nests them."""

    def __init__(self, placeholders: Optional[PlaceholderResolver] = None):
        self.placeholders = placeholders or PlaceholderResolver()

    def bind(self, controller_template: Optional[str], method_template: Optional[str]) -> BoundPath:
        """
        Nest ``method_template`` under ``controller_template``.

        Raises:
            PlaceholderResolutionFault: when a template has a malformed placeholder
        """
        controller_template = self.placeholders.resolve(controller_template or "/")
        method_template = self.placeholders.resolve(method_template or "/")

        template = UriTemplate(controller_template).nest(method_template)
        return BoundPath(
            template=template.template,
            path=template.to_path_string(),
            variables=tuple(template.variables),
        )
