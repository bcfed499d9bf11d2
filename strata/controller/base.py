"""
Controller Base Class and Builder

Two ways to declare a controller, both ending in a ``ControllerDescriptor``:

- Subclass ``Controller`` and decorate methods (class attributes hold the
  controller-level settings).
- Use ``ControllerBuilder`` to register routes explicitly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

from .decorators import route_metadata
from .metadata import ControllerDescriptor, RouteDescriptor


class Controller:
    """
    Base Controller class.

    Class Attributes:
        prefix: Base path for all routes (e.g., "/api/users")
        tags: Controller tags, prepended to every route's tags
        security: Security scheme names; None leaves it unset
        hide_from_docs: Hide every route unless a route says otherwise
        guards: Access guards applied to every route
        description: Tag description for the document

    Example:
        class UsersController(Controller):
            prefix = "/api/users"
            tags = ["Users"]
            security = ["bearerAuth"]

            @Route(response=paginated(UserSchema), query=PaginationQuery)
            async def index(self, ctx):
                ...

            @POST("/:id/archive", params=IdParam, response=SuccessMessage)
            async def archive(self, ctx):
                ...
    """

    prefix: str = ""
    tags: List[str] = []
    security: Optional[List[str]] = None
    hide_from_docs: Optional[bool] = None
    guards: List[Any] = []
    description: Optional[str] = None

    @classmethod
    def describe(cls) -> ControllerDescriptor:
        return extract_controller_descriptor(cls)


def extract_controller_descriptor(controller_class: Type) -> ControllerDescriptor:
    """
    Build the descriptor for a decorated controller class.

    Routes keep method definition order; a subclass method replaces the
    inherited one of the same name.
    """
    methods: Dict[str, Any] = {}
    for klass in reversed(controller_class.__mro__):
        for attr, member in vars(klass).items():
            if callable(member) and route_metadata(member):
                methods.pop(attr, None)
                methods[attr] = member

    routes: List[RouteDescriptor] = []
    for member in methods.values():
        for meta in route_metadata(member):
            routes.append(RouteDescriptor(
                name=meta['name'],
                response=meta['response'],
                verb=meta['verb'],
                path=meta['path'],
                status=meta['status'],
                body=meta['body'],
                params=meta['params'],
                query=meta['query'],
                responses=meta['responses'],
                summary=meta['summary'],
                description=meta['description'],
                tags=meta['tags'],
                security=meta['security'],
                hide_from_docs=meta['hide_from_docs'],
                guards=meta['guards'],
                deprecated=meta['deprecated'],
                operation_id=meta['operation_id'],
                handler=member,
            ))

    security = getattr(controller_class, 'security', None)
    return ControllerDescriptor(
        base_path=getattr(controller_class, 'prefix', ''),
        routes=tuple(routes),
        name=controller_class.__name__,
        tags=getattr(controller_class, 'tags', ()) or (),
        security=security,
        hide_from_docs=getattr(controller_class, 'hide_from_docs', None),
        guards=getattr(controller_class, 'guards', ()) or (),
        description=getattr(controller_class, 'description', None),
    )


class ControllerBuilder:
    """
    Explicit builder for controller descriptors.

    Example:
        users = (
            ControllerBuilder("/api/users", tags=["Users"])
            .route("index", response=UserList)
            .route("show", params=IdParam, response=UserSchema)
            .route("archive", verb="POST", path="/:id/archive", response=SuccessMessage)
            .build()
        )
    """

    def __init__(
        self,
        base_path: str,
        *,
        name: Optional[str] = None,
        tags: Sequence[str] = (),
        security: Optional[Sequence[str]] = None,
        hide_from_docs: Optional[bool] = None,
        guards: Sequence[Any] = (),
        description: Optional[str] = None,
    ):
        self.base_path = base_path
        self.name = name
        self.tags = tuple(tags)
        self.security = tuple(security) if security is not None else None
        self.hide_from_docs = hide_from_docs
        self.guards = tuple(guards)
        self.description = description
        self._routes: List[RouteDescriptor] = []

    def route(
        self,
        name: str,
        *,
        response: Any = None,
        verb: Optional[str] = None,
        path: Optional[str] = None,
        status: Optional[int] = None,
        body: Any = None,
        params: Any = None,
        query: Any = None,
        responses: Optional[Mapping[int, Any]] = None,
        summary: Optional[str] = None,
        description: Optional[str] = None,
        tags: Sequence[str] = (),
        security: Optional[Sequence[str]] = None,
        hide_from_docs: Optional[bool] = None,
        guards: Sequence[Any] = (),
        deprecated: bool = False,
        operation_id: Optional[str] = None,
        handler: Any = None,
    ) -> "ControllerBuilder":
        self._routes.append(RouteDescriptor(
            name=name,
            response=response,
            verb=verb,
            path=path,
            status=status,
            body=body,
            params=params,
            query=query,
            responses=dict(responses or {}),
            summary=summary,
            description=description,
            tags=tuple(tags),
            security=tuple(security) if security is not None else None,
            hide_from_docs=hide_from_docs,
            guards=tuple(guards),
            deprecated=deprecated,
            operation_id=operation_id,
            handler=handler,
        ))
        return self

    def build(self) -> ControllerDescriptor:
        return ControllerDescriptor(
            base_path=self.base_path,
            routes=tuple(self._routes),
            name=self.name or "",
            tags=self.tags,
            security=self.security,
            hide_from_docs=self.hide_from_docs,
            guards=self.guards,
            description=self.description,
        )
