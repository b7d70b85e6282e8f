"""
Handler return wrapper types.

Handlers may declare their payload wrapped in a response or reactive
container. The response synthesizer unwraps these to find the payload.
"""

from typing import Generic, TypeVar

T = TypeVar("T")


class HttpResponse(Generic[T]):
    """Response wrapper carrying status and headers around a ``T`` body."""


class Single(Generic[T]):
    """Reactive container emitting exactly one ``T``."""


class Completable:
    """Reactive container that completes without emitting a value."""
