"""
Controller Method Decorators

HTTP method decorators and declarative specification decorators.
They only attach metadata; nothing runs at import time.
"""

from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar, Union

from .params import fragment


F = TypeVar('F', bound=Callable[..., Any])


class RouteDecorator:
    """
    Base route decorator.

    Attaches metadata to controller methods for compile-time extraction.
    """

    method: Optional[str] = None

    def __init__(
        self,
        path: Optional[str] = None,
        *,
        consumes: Optional[List[str]] = None,
        produces: Optional[List[str]] = None,
    ):
        """
        Initialize route decorator.

        Args:
            path: Method-level path template (e.g., "/", "/{id}"), defaults to "/"
            consumes: Media types accepted by the handler
            produces: Media types returned by the handler
        """
        self.path = path
        self.consumes = list(consumes or [])
        self.produces = list(produces or [])

    def __call__(self, func: F) -> F:
        if not hasattr(func, '__route_metadata__'):
            func.__route_metadata__ = []

        func.__route_metadata__.append({
            'http_method': self.method,
            'path': self.path,
            'consumes': self.consumes,
            'produces': self.produces,
            'func_name': func.__name__,
        })
        return func


class GET(RouteDecorator):
    """GET request decorator."""
    method = 'GET'


class POST(RouteDecorator):
    """POST request decorator."""
    method = 'POST'


class PUT(RouteDecorator):
    """PUT request decorator."""
    method = 'PUT'


class PATCH(RouteDecorator):
    """PATCH request decorator."""
    method = 'PATCH'


class DELETE(RouteDecorator):
    """DELETE request decorator."""
    method = 'DELETE'


class HEAD(RouteDecorator):
    """HEAD request decorator."""
    method = 'HEAD'


class OPTIONS(RouteDecorator):
    """OPTIONS request decorator."""
    method = 'OPTIONS'


class TRACE(RouteDecorator):
    """TRACE request decorator."""
    method = 'TRACE'


def route(
    method: Union[str, List[str]],
    path: Optional[str] = None,
    **kwargs
) -> Callable[[F], F]:
    """
    Generic route decorator.

    Unlike the verb decorators, any method name is accepted here; verbs
    without a path item slot are built but not attached to the document.

    Example:
        @route(["GET", "HEAD"], "/items")
        def items(self):
            ...
    """
    methods = [method] if isinstance(method, str) else method

    def decorator(func: F) -> F:
        for http_method in methods:
            route_decorator = RouteDecorator(path, **kwargs)
            route_decorator.method = http_method.upper()
            func = route_decorator(func)
        return func

    return decorator


# ============================================================================
# Specification decorators
# ============================================================================

def _openapi(target: Any) -> Dict[str, Any]:
    # Own __dict__ only, so a subclass never shares its parent's declarations.
    meta = target.__dict__.get('__openapi__')
    if meta is None:
        meta = {}
        setattr(target, '__openapi__', meta)
    return meta


def _prepend(target: Any, key: str, value: Any) -> Any:
    # Decorators apply bottom-up; prepending keeps declaration order.
    _openapi(target).setdefault(key, []).insert(0, value)
    return target


def operation(
    operation_id: Optional[str] = None,
    *,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    parameters: Optional[List[Dict[str, Any]]] = None,
    responses: Optional[Dict[str, Any]] = None,
    security: Optional[List[Dict[str, List[str]]]] = None,
    servers: Optional[List[Dict[str, Any]]] = None,
    deprecated: Optional[bool] = None,
    hidden: Optional[bool] = None,
) -> Callable[[F], F]:
    """Declare the operation-level specification fragment of a handler."""
    values = fragment(
        operation_id=operation_id,
        summary=summary,
        description=description,
        tags=tags,
        parameters=parameters,
        responses=responses,
        security=security,
        servers=servers,
        deprecated=deprecated,
        hidden=hidden,
    )

    def decorator(func: F) -> F:
        _openapi(func)['operation'] = values
        return func

    return decorator


def tag(name: str, description: Optional[str] = None):
    """Add a tag to a handler, or to every handler of a controller class."""
    return lambda target: _prepend(target, 'tags', fragment(name=name, description=description))


def security_requirement(name: str, scopes: Optional[Iterable[str]] = None):
    """Require the named security scheme (with optional scopes)."""
    values = fragment(name=name, scopes=list(scopes) if scopes is not None else None)
    return lambda target: _prepend(target, 'security', values)


def server(url: str, description: Optional[str] = None, variables: Optional[Dict[str, Any]] = None):
    """Declare an alternative server for a handler or controller."""
    values = fragment(url=url, description=description, variables=variables)
    return lambda target: _prepend(target, 'servers', values)


def api_response(
    response_code: Optional[Union[str, int]] = None,
    *,
    description: Optional[str] = None,
    content: Optional[Any] = None,
    headers: Optional[Dict[str, Any]] = None,
):
    """Declare an explicit response; without ``response_code`` it is the default response."""
    values = fragment(
        response_code=str(response_code) if response_code is not None else None,
        description=description,
        content=content,
        headers=headers,
    )
    return lambda target: _prepend(target, 'responses', values)


def callback(
    name: str,
    callback_url_expression: Optional[str] = None,
    operations: Optional[List[Dict[str, Any]]] = None,
):
    """
    Declare a callback.

    With ``callback_url_expression`` the callback is defined inline and
    ``operations`` (fragments carrying a ``method`` key) describe it.
    Without it, ``name`` refers to a shared definition registered under
    ``components/callbacks``.
    """
    values = fragment(
        name=name,
        callback_url_expression=callback_url_expression,
        operation=operations,
    )
    return lambda target: _prepend(target, 'callbacks', values)


def security_scheme(name: str, **values: Any):
    """Register a security scheme in ``components/securitySchemes`` (class decorator)."""
    definition = fragment(**values)

    def decorator(cls):
        _openapi(cls).setdefault('security_schemes', {})[name] = definition
        return cls

    return decorator


def consumes(*media_types: str):
    """Media types accepted by a handler or by every handler of a controller."""
    def decorator(target):
        _openapi(target)['consumes'] = list(media_types)
        return target
    return decorator


def produces(*media_types: str):
    """Media types produced by a handler or by every handler of a controller."""
    def decorator(target):
        _openapi(target)['produces'] = list(media_types)
        return target
    return decorator


def hidden(target):
    """Exclude a handler from the generated specification."""
    _openapi(target)['hidden'] = True
    return target


def deprecated(target):
    """Mark a handler as deprecated."""
    _openapi(target)['deprecated'] = True
    return target
