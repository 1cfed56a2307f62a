"""
GraphQL API for the restaurant backend.

Field names are camel-cased by strawberry (``food_count`` -> ``foodCount``).
Domain errors raised by the stores reach clients as GraphQL errors whose
``extensions.code`` comes from the exception class.
"""
import logging
from typing import Dict, List, Optional

import strawberry
from fastapi import Depends, Header, HTTPException
from pymongo.database import Database
from starlette.concurrency import run_in_threadpool
from strawberry.fastapi import BaseContext, GraphQLRouter
from strawberry.types import Info

from auth import EXACT, MIN, UserStore, current_user_from_header, require_role
from catalog import CatalogStore
from database import get_db
from errors import InvalidToken, ServiceError
from orders import OrderStore
from schemas import Role

logger = logging.getLogger(__name__)


class Context(BaseContext):
    def __init__(self, db: Database, current_user: Optional[Dict]):
        super().__init__()
        self.db = db
        self.current_user = current_user


def get_context(
    authorization: Optional[str] = Header(None),
    db: Database = Depends(get_db),
) -> Context:
    try:
        current_user = current_user_from_header(authorization, UserStore(db))
    except InvalidToken as e:
        logger.warning("rejected session token")
        raise HTTPException(status_code=401, detail=str(e), headers={"WWW-Authenticate": "Bearer"})
    return Context(db, current_user)


# Types

@strawberry.type
class Food:
    id: strawberry.ID
    name: str
    price: float
    category: str
    diet: List[str]
    ingredients: List[str]
    ratings: List[int]

    @classmethod
    def from_doc(cls, doc: Optional[Dict]) -> Optional["Food"]:
        if doc is None:
            return None
        return cls(
            id=doc["id"],
            name=doc["name"],
            price=doc["price"],
            category=doc["category"],
            diet=doc.get("diet", []),
            ingredients=doc.get("ingredients", []),
            ratings=doc.get("ratings", []),
        )


@strawberry.type
class User:
    id: strawberry.ID
    username: str
    role: int

    @classmethod
    def from_doc(cls, doc: Optional[Dict]) -> Optional["User"]:
        if doc is None:
            return None
        return cls(id=doc["id"], username=doc["username"], role=doc["role"])


@strawberry.type
class Token:
    value: str


@strawberry.type
class Order:
    id: strawberry.ID
    orderer: str
    phone_nr: str
    items: List[Food]

    @classmethod
    def from_doc(cls, doc: Optional[Dict]) -> Optional["Order"]:
        if doc is None:
            return None
        return cls(
            id=doc["id"],
            orderer=doc["orderer"],
            phone_nr=doc["phone_nr"],
            items=[Food.from_doc(f) for f in doc["items"]],
        )


# Root types

@strawberry.type
class Query:
    @strawberry.field
    async def food_count(self, info: Info) -> int:
        return await run_in_threadpool(CatalogStore(info.context.db).count)

    @strawberry.field
    async def all_foods(self, info: Info) -> List[Food]:
        foods = await run_in_threadpool(CatalogStore(info.context.db).list_all)
        return [Food.from_doc(f) for f in foods]

    @strawberry.field
    async def all_categories(self, info: Info) -> List[str]:
        return sorted(await run_in_threadpool(CatalogStore(info.context.db).distinct_categories))

    @strawberry.field
    async def foods_by_category(self, info: Info, category: str) -> List[Food]:
        foods = await run_in_threadpool(CatalogStore(info.context.db).list_by_category, category)
        return [Food.from_doc(f) for f in foods]

    @strawberry.field
    async def all_orders(self, info: Info) -> List[Order]:
        orders = await run_in_threadpool(OrderStore(info.context.db).list_all)
        return [Order.from_doc(o) for o in orders]

    @strawberry.field
    def me(self, info: Info) -> Optional[User]:
        return User.from_doc(info.context.current_user)


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def add_food(
        self,
        info: Info,
        name: str,
        price: float,
        category: str,
        diet: Optional[List[str]] = None,
        ingredients: Optional[List[str]] = None,
    ) -> Optional[Food]:
        require_role(info.context.current_user, Role.CHEF, MIN)
        store = CatalogStore(info.context.db)
        food = await run_in_threadpool(store.create, name, price, category, diet, ingredients)
        return Food.from_doc(food)

    @strawberry.mutation
    async def edit_food(
        self,
        info: Info,
        name: str,
        price: float,
        category: str,
        diet: Optional[List[str]] = None,
        ingredients: Optional[List[str]] = None,
    ) -> Optional[Food]:
        require_role(info.context.current_user, Role.CHEF, MIN)
        store = CatalogStore(info.context.db)
        food = await run_in_threadpool(store.edit, name, price, category, diet, ingredients)
        return Food.from_doc(food)

    @strawberry.mutation
    async def remove_food(self, info: Info, name: str) -> Optional[Food]:
        require_role(info.context.current_user, Role.CHEF, MIN)
        return Food.from_doc(await run_in_threadpool(CatalogStore(info.context.db).remove, name))

    @strawberry.mutation
    async def rate_food(self, info: Info, name: str, rating: int) -> Optional[Food]:
        return Food.from_doc(await run_in_threadpool(CatalogStore(info.context.db).rate, name, rating))

    @strawberry.mutation
    async def create_order(self, info: Info, orderer: str, phone_nr: str, items: List[str]) -> Optional[Order]:
        store = OrderStore(info.context.db)
        return Order.from_doc(await run_in_threadpool(store.create_order, orderer, phone_nr, items))

    @strawberry.mutation
    async def remove_order(self, info: Info, id: strawberry.ID) -> Optional[Order]:
        return Order.from_doc(await run_in_threadpool(OrderStore(info.context.db).remove, id))

    @strawberry.mutation
    async def create_user(self, info: Info, username: str, password: str, role: int) -> Optional[User]:
        require_role(info.context.current_user, Role.OWNER, EXACT)
        store = UserStore(info.context.db)
        return User.from_doc(await run_in_threadpool(store.create_user, username, password, role))

    @strawberry.mutation
    async def login(self, info: Info, username: str, password: str) -> Optional[Token]:
        token = await run_in_threadpool(UserStore(info.context.db).login, username, password)
        return Token(value=token)


class RestaurantSchema(strawberry.Schema):
    def process_errors(self, errors, execution_context=None) -> None:
        # business failures are part of the API, only log the unexpected ones
        unexpected = [e for e in errors if not isinstance(e.original_error, ServiceError)]
        super().process_errors(unexpected, execution_context)


schema = RestaurantSchema(query=Query, mutation=Mutation)

graphql_app = GraphQLRouter(schema, context_getter=get_context)
