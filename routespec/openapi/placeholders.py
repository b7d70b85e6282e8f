"""
``${...}`` placeholder resolution for path templates.

``${name}`` is replaced by the value of ``name``; ``${name:default}``
falls back to ``default``. Lookup order: configured properties, the
``.env`` file, then the process environment (``api.base-path`` is also
looked up as ``API_BASE_PATH``). A placeholder without a definition or
default is left in place.
"""

import logging
import os
import re
from typing import Any, Dict, Mapping, Optional

from dotenv import dotenv_values

from ..faults import PlaceholderResolutionFault

logger = logging.getLogger("routespec.openapi.placeholders")

_PREFIX = "${"


def _env_key(name: str) -> str:
    return re.sub(r"[.\-]", "_", name).upper()


class PlaceholderResolver:
    """Resolves placeholders against properties, a .env file and the environment."""

    def __init__(
        self,
        properties: Optional[Mapping[str, Any]] = None,
        env_file: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.properties: Dict[str, Any] = dict(properties or {})
        self.dotenv: Dict[str, Optional[str]] = dict(dotenv_values(env_file)) if env_file else {}
        self.environ = environ if environ is not None else os.environ

    def lookup(self, name: str) -> Optional[str]:
        if name in self.properties:
            return str(self.properties[name])
        for source in (self.dotenv, self.environ):
            for key in (name, _env_key(name)):
                value = source.get(key)
                if value is not None:
                    return value
        return None

    def resolve(self, template: str) -> str:
        """
        Replace every placeholder in ``template``.

        Raises:
            PlaceholderResolutionFault: on an unterminated or empty placeholder
        """
        if _PREFIX not in template:
            return template

        out = []
        pos = 0
        while True:
            start = template.find(_PREFIX, pos)
            if start < 0:
                out.append(template[pos:])
                break
            end = template.find("}", start)
            if end < 0:
                raise PlaceholderResolutionFault(template, f"unterminated placeholder at {start}")

            out.append(template[pos:start])
            expression = template[start + 2:end]
            name, sep, default = expression.partition(":")
            name = name.strip()
            if not name:
                raise PlaceholderResolutionFault(template, f"empty placeholder at {start}")

            value = self.lookup(name)
            if value is None and sep:
                value = default
            if value is None:
                logger.debug("No definition for placeholder '%s', leaving it unresolved", name)
                value = template[start:end + 1]
            out.append(value)
            pos = end + 1

        return "".join(out)
