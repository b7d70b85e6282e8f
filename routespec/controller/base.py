"""
Controller Base Class

Provides the base Controller class and the principal-like types that are
never documented as request parameters.
"""

from typing import Any, Dict, List


class Principal:
    """Authenticated principal injected by the security layer."""

    name: str = ""


class Authentication(Principal):
    """Principal plus the attributes resolved during authentication."""

    attributes: Dict[str, Any] = {}


class RequestCtx:
    """Request context handed to controller methods by the framework."""


class Controller:
    """
    Base Controller class.

    Controllers group handler methods under a shared path template.

    Class Attributes:
        prefix: Controller-level path template (e.g., "/users")
        tags: Tags added to every operation of the controller

    Example:
        class UsersController(Controller):
            prefix = "/users"
            tags = ["users"]

            @GET("/{id}")
            def retrieve(self, id: int) -> HttpResponse[User]:
                ...
    """

    prefix: str = "/"
    tags: List[str] = []
