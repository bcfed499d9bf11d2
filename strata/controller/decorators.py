"""
Controller Method Decorators

Attach inert route metadata to controller methods. Nothing is resolved
or registered at import time; the assembly pass reads the metadata and
builds descriptors.

Conventional methods (index/show/create/update/patch/destroy) use
``@Route(...)``; any other method name needs a verb decorator carrying an
explicit path.
"""

import inspect
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar


F = TypeVar('F', bound=Callable[..., Any])

ROUTE_METADATA_ATTR = "__route_metadata__"


class Route:
    """
    Base route decorator.

    Example:
        class UsersController(Controller):
            prefix = "/api/users"

            @Route(response=UserSchema, params=IdParam)
            async def show(self, ctx):
                ...
    """

    method: Optional[str] = None

    def __init__(
        self,
        path: Optional[str] = None,
        *,
        response: Any = None,
        body: Any = None,
        params: Any = None,
        query: Any = None,
        responses: Optional[Mapping[int, Any]] = None,
        status: Optional[int] = None,
        summary: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        security: Optional[Sequence[str]] = None,
        hide_from_docs: Optional[bool] = None,
        guards: Optional[Sequence[Any]] = None,
        deprecated: bool = False,
        operation_id: Optional[str] = None,
        name: Optional[str] = None,
    ):
        """
        Initialize route decorator.

        Args:
            path: Explicit path suffix (custom routes), e.g. "/:id/archive"
            response: Success response schema
            body: Request body schema
            params: Path parameter schema
            query: Query parameter schema
            responses: Extra responses by status code
            status: Explicit success status
            summary: Document summary
            description: Document description (defaults to the docstring)
            tags: Route tags (appended after controller tags)
            security: Route security schemes; None leaves it unset
            hide_from_docs: Route hide flag; None inherits
            guards: Access guards for this route
            deprecated: Mark as deprecated in the document
            operation_id: Explicit operationId
            name: Route name (defaults to the method name)
        """
        self.path = path
        self.response = response
        self.body = body
        self.params = params
        self.query = query
        self.responses = dict(responses or {})
        self.status = status
        self.summary = summary
        self.description = description
        self.tags = list(tags or [])
        self.security = list(security) if security is not None else None
        self.hide_from_docs = hide_from_docs
        self.guards = list(guards or [])
        self.deprecated = deprecated
        self.operation_id = operation_id
        self.name = name

    def __call__(self, func: F) -> F:
        if not hasattr(func, ROUTE_METADATA_ATTR):
            setattr(func, ROUTE_METADATA_ATTR, [])

        metadata: Dict[str, Any] = {
            'name': self.name or func.__name__,
            'verb': self.method,
            'path': self.path,
            'response': self.response,
            'body': self.body,
            'params': self.params,
            'query': self.query,
            'responses': self.responses,
            'status': self.status,
            'summary': self.summary,
            'description': self.description or _first_paragraph(func.__doc__),
            'tags': self.tags,
            'security': self.security,
            'hide_from_docs': self.hide_from_docs,
            'guards': self.guards,
            'deprecated': self.deprecated,
            'operation_id': self.operation_id,
            'func_name': func.__name__,
        }

        getattr(func, ROUTE_METADATA_ATTR).append(metadata)
        return func


def _first_paragraph(doc: Optional[str]) -> Optional[str]:
    if not doc:
        return None
    cleaned = inspect.cleandoc(doc)
    return cleaned.split("\n\n", 1)[0].strip() or None


class GET(Route):
    """GET route decorator."""
    method = 'GET'


class POST(Route):
    """POST route decorator."""
    method = 'POST'


class PUT(Route):
    """PUT route decorator."""
    method = 'PUT'


class PATCH(Route):
    """PATCH route decorator."""
    method = 'PATCH'


class DELETE(Route):
    """DELETE route decorator."""
    method = 'DELETE'


def route_metadata(func: Any) -> List[Dict[str, Any]]:
    """Metadata entries attached to ``func`` (empty when undecorated)."""
    return list(getattr(func, ROUTE_METADATA_ATTR, []))
