"""
Document models for the restaurant collections.

- user: accounts with a password digest and a ``Role`` level
- food: menu entries; ``name`` is unique and ``ratings`` only ever grows
- order: orderer contact details plus food ``_id`` strings

Models validate input before it is written; reads return plain dicts.
"""

from enum import IntEnum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Role(IntEnum):
    """Role levels, ordered. A higher value grants everything a lower one does."""
    CUSTOMER = 1
    WAITER = 2
    CHEF = 3
    CO_OWNER = 4
    OWNER = 5


class User(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    username: str = Field(..., min_length=3)
    password_hash: str = Field(..., description="BCrypt hash of password")
    role: Role


class Food(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: str
    diet: List[str] = Field(default_factory=list)
    ingredients: List[str] = Field(default_factory=list)
    ratings: List[int] = Field(default_factory=list)


class Order(BaseModel):
    orderer: str
    phone_nr: str
    items: List[str] = Field(default_factory=list, description="food _id references")
