"""
Default response synthesis.

When an operation declares no responses, one ``default`` response is
derived from the handler's return type. Wrapper types are peeled off
through an ordered ``(predicate, unwrap)`` table until no rule matches.
Reactive containers are peeled too, so ``Single[T]`` documents ``T``.
"""

import inspect
import logging
from typing import Any, Callable, List, Optional, Tuple, get_args, get_origin

from ..controller.types import Completable, HttpResponse, Single
from ..model import UNSET, ResponseDocument
from .context import RouteContext

logger = logging.getLogger("routespec.openapi.responses")

UnwrapRule = Tuple[Callable[[Any], bool], Callable[[Any], Any]]


def _has_no_body(tp: Any) -> bool:
    if tp is inspect.Parameter.empty or tp is type(None):
        return True
    return isinstance(tp, type) and issubclass(tp, Completable)


def _no_body(tp: Any) -> None:
    return None


def _is_wrapped(container: type) -> Callable[[Any], bool]:
    return lambda tp: get_origin(tp) is container


def _is_single_response(tp: Any) -> bool:
    if get_origin(tp) is not Single:
        return False
    args = get_args(tp)
    return bool(args) and get_origin(args[0]) is HttpResponse


def _first_argument(tp: Any) -> Any:
    args = get_args(tp)
    return args[0] if args else tp


def _single_response_payload(tp: Any) -> Any:
    return _first_argument(_first_argument(tp))


UNWRAP_RULES: List[UnwrapRule] = [
    (_has_no_body, _no_body),
    (_is_single_response, _single_response_payload),
    (_is_wrapped(Single), _first_argument),
    (_is_wrapped(HttpResponse), _first_argument),
]


class ResponseSynthesizer:
    """Builds the ``default`` response of operations without responses."""

    def __init__(self, rules: Optional[List[UnwrapRule]] = None):
        self.rules = list(rules) if rules is not None else list(UNWRAP_RULES)

    def unwrap(self, tp: Any) -> Any:
        """The payload type of ``tp``; None when the handler returns no body."""
        while tp is not None:
            for predicate, unwrap in self.rules:
                if predicate(tp):
                    unwrapped = unwrap(tp)
                    break
            else:
                return tp
            if unwrapped is tp:
                return tp
            tp = unwrapped
        return None

    def synthesize(self, ctx: RouteContext) -> None:
        operation = ctx.operation
        if operation.responses is not UNSET and operation.responses:
            return

        response = ResponseDocument()
        if ctx.docs.returns:
            response.description = ctx.docs.returns
        else:
            response.description = f"{operation.operation_id} default response"

        payload = self.unwrap(ctx.route.return_type)
        if payload is not None:
            response.content = ctx.build_content(None, payload, ctx.produces)

        logger.debug("Synthesized default response for %s", ctx.route.location)
        operation.put_response("default", response)
