"""GraphQL schema: types, queries and mutations.

Each field hands its arguments and the request's identity context to one
service method. Services are blocking SQLAlchemy code, so they run in the
threadpool and the event loop stays free for other requests. Python names
are exported in camelCase (``order_history`` -> ``orderHistory``).
"""
import logging
from typing import List, Optional

import strawberry
from fastapi.concurrency import run_in_threadpool
from graphql import GraphQLError
from strawberry.types import ExecutionContext, Info
from strawberry.utils.logging import StrawberryLogger

from . import models
from .errors import ShopError

logger = logging.getLogger(__name__)


async def call_service(info: Info, func, *args):
    """Run a blocking service call in the threadpool.

    All fields of one request share a single Session, and graphql-core
    resolves sibling query fields concurrently, so calls are serialized
    with the request's lock.
    """
    async with info.context["lock"]:
        return await run_in_threadpool(func, *args)


@strawberry.type
class User:
    id: strawberry.ID
    email: str
    role: str

    @classmethod
    def from_model(cls, user: models.User) -> "User":
        return cls(id=strawberry.ID(str(user.id)), email=user.email, role=user.role.value)


@strawberry.type
class Product:
    id: strawberry.ID
    name: str
    price: float

    @classmethod
    def from_model(cls, product: models.Product) -> "Product":
        return cls(id=strawberry.ID(str(product.id)), name=product.name, price=float(product.price))


@strawberry.type
class Order:
    id: strawberry.ID
    products: List[str]
    total_price: float

    @classmethod
    def from_model(cls, order: models.Order) -> "Order":
        return cls(
            id=strawberry.ID(str(order.id)),
            products=list(order.products),
            total_price=float(order.total_price),
        )


@strawberry.type
class Query:
    @strawberry.field
    async def products(self, info: Info) -> List[Product]:
        rows = await call_service(info, info.context["products"].get_all_products)
        return [Product.from_model(p) for p in rows]

    @strawberry.field
    async def order_history(self, info: Info) -> List[Order]:
        ctx = info.context
        rows = await call_service(info, ctx["orders"].get_order_history, ctx["identity"])
        return [Order.from_model(o) for o in rows]


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def sign_up(self, info: Info, email: str, password: str) -> str:
        return await call_service(info, info.context["auth"].sign_up, email, password)

    @strawberry.mutation
    async def login(self, info: Info, email: str, password: str) -> str:
        return await call_service(info, info.context["auth"].login, email, password)

    @strawberry.mutation
    async def add_product(self, info: Info, name: str, price: float) -> Product:
        ctx = info.context
        product = await call_service(info, ctx["products"].add_product, name, price, ctx["identity"])
        return Product.from_model(product)

    @strawberry.mutation
    async def add_to_cart(self, info: Info, products: List[str], total_price: float) -> Order:
        ctx = info.context
        order = await call_service(info, ctx["orders"].add_to_cart, products, total_price, ctx["identity"])
        return Order.from_model(order)


class ShopSchema(strawberry.Schema):
    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        for error in errors:
            # Auth and input failures are expected results, not server faults
            if isinstance(error.original_error, (ShopError, ValueError)):
                logger.info("%s: %s", ".".join(map(str, error.path or [])), error.message)
            else:
                StrawberryLogger.error(error, execution_context)


# User is not returned by any field but is part of the published schema
schema = ShopSchema(query=Query, mutation=Mutation, types=[User])
