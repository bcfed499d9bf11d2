"""
Shared test fixtures and helpers for the Strata test suite.
"""

import pytest

from strata.controller import Controller, Route, POST, RouteRegistry
from strata.openapi import OpenAPIConfig, OpenAPIGenerator
from strata.schemas import (
    EmailFacet,
    IdParam,
    IntFacet,
    PaginationQuery,
    Schema,
    SuccessMessage,
    TextFacet,
    UUIDFacet,
    paginated,
)


# ============================================================================
# Schemas
# ============================================================================


class UserSchema(Schema):
    id = UUIDFacet()
    email = EmailFacet()
    name = TextFacet(min_length=1, max_length=80)
    age = IntFacet(min_value=0, required=False)

    class Spec:
        name = "User"
        description = "A registered user"


class CreateUserSchema(Schema):
    email = EmailFacet()
    name = TextFacet(min_length=1, max_length=80)

    class Spec:
        name = "CreateUser"


# ============================================================================
# Controllers
# ============================================================================


class UsersController(Controller):
    prefix = "/api/users"
    tags = ["Users"]
    description = "User management"

    @Route(response=UserSchema)
    async def index(self, ctx):
        ...

    @Route(params=IdParam, response=UserSchema)
    async def show(self, ctx):
        ...


class AccountsController(Controller):
    prefix = "/api/accounts"
    tags = ["Accounts"]
    security = ["bearerAuth"]

    @Route(response=paginated(UserSchema), query=PaginationQuery)
    async def index(self, ctx):
        """List accounts."""

    @Route(body=CreateUserSchema, response=UserSchema)
    async def create(self, ctx):
        ...

    @POST("/:id/archive", params=IdParam, response=SuccessMessage, tags=["Admin"])
    async def archive(self, ctx):
        ...


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def registry():
    return RouteRegistry([UsersController])


@pytest.fixture
def config():
    return OpenAPIConfig(title="Test API", version="2.0.0")


@pytest.fixture
def generator(registry, config):
    return OpenAPIGenerator(registry, config)


@pytest.fixture
def full_registry():
    return RouteRegistry([UsersController, AccountsController])
