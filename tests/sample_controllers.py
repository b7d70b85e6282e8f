"""
Controllers shared by the generator and CLI tests.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, List, Optional

from routespec.controller import (
    Body,
    Controller,
    DELETE,
    GET,
    Header,
    HttpResponse,
    PathVariable,
    POST,
    Principal,
    QueryValue,
    api_response,
    hidden,
    security_requirement,
    security_scheme,
    tag,
)


class Status(str, Enum):
    AVAILABLE = "available"
    SOLD = "sold"


@dataclass
class Pet:
    """A pet in the store."""
    name: str
    status: Status
    tags: List[str] = field(default_factory=list)
    id: Optional[int] = None


@security_scheme("bearer", type="http", scheme="bearer")
@security_requirement("bearer")
@tag("pets", description="Pet operations")
class PetsController(Controller):
    prefix = "/pets"

    @GET("/")
    def list_pets(
        self,
        limit: Annotated[int, QueryValue()] = 20,
        trace_id: Annotated[Optional[str], Header()] = None,
    ) -> List[Pet]:
        """
        List pets.

        Args:
            limit: Maximum number of pets to return.
        """

    @GET("/{pet_id}")
    def get_pet(self, pet_id: int, principal: Principal) -> HttpResponse[Pet]:
        """
        Fetch a pet.

        Returns:
            The requested pet.
        """

    @POST("/")
    def create_pet(self, pet: Annotated[Pet, Body()]) -> HttpResponse[Pet]:
        """Create a pet."""

    @api_response(204, description="Deleted")
    @DELETE("/{pet_id}")
    def delete_pet(self, pet_id: int) -> None:
        """Delete a pet."""

    @hidden
    @GET("/internal")
    def internal(self) -> str:
        ...


class BrokenController(Controller):
    prefix = "/broken"

    @GET("/ok")
    def ok(self) -> str:
        ...

    @GET("/{id}")
    def mismatch(self, name: Annotated[str, PathVariable("missing")]) -> str:
        ...
