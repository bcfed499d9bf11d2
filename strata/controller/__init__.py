"""
Strata Controller System

Convention-routed controllers declared as explicit descriptors.

Key Features:
- Convention routing: index/show/create/update/patch/destroy derive verb,
  path and success status from the method name
- Assembly-first: decorators attach inert metadata, descriptors are built
  in one assembly pass
- One schema per payload drives both validation and documentation

Example:
    from strata.controller import Controller, Route, POST
    from strata.schemas import IdParam, SuccessMessage

    class UsersController(Controller):
        prefix = "/api/users"
        tags = ["Users"]

        @Route(response=UserList)
        async def index(self, ctx):
            ...

        @Route(params=IdParam, response=UserSchema)
        async def show(self, ctx):
            ...

        @POST("/:id/archive", params=IdParam, response=SuccessMessage)
        async def archive(self, ctx):
            ...
"""

from .base import Controller, ControllerBuilder, extract_controller_descriptor
from .conventions import (
    CONVENTIONS,
    RouteResolution,
    is_conventional,
    path_parameters,
    resolve,
    to_openapi_path,
)
from .decorators import Route, GET, POST, PUT, PATCH, DELETE
from .metadata import ControllerDescriptor, RouteDescriptor, ResponseSpec
from .registry import RouteRegistry
from .validation import RequestValidator, ValidatedRequest

__all__ = [
    # Base
    "Controller",
    "ControllerBuilder",
    "extract_controller_descriptor",
    # Conventions
    "CONVENTIONS",
    "RouteResolution",
    "is_conventional",
    "path_parameters",
    "resolve",
    "to_openapi_path",
    # Decorators
    "Route",
    "GET", "POST", "PUT", "PATCH", "DELETE",
    # Metadata
    "ControllerDescriptor",
    "RouteDescriptor",
    "ResponseSpec",
    # Registry
    "RouteRegistry",
    # Validation
    "RequestValidator",
    "ValidatedRequest",
]
