"""
Menu catalog backed by the ``food`` collection.
"""
from typing import Any, Dict, List, Optional, Set

from pydantic import ValidationError
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import sanitize
from errors import DuplicateName, NotFound, ValidationFailed
from schemas import Food as FoodSchema


class CatalogStore:
    def __init__(self, db: Database):
        self.collection = db["food"]

    def count(self) -> int:
        return self.collection.count_documents({})

    def list_all(self) -> List[Dict]:
        return [sanitize(f) for f in self.collection.find({})]

    def distinct_categories(self) -> Set[str]:
        return set(self.collection.distinct("category"))

    def list_by_category(self, category: str) -> List[Dict]:
        return [sanitize(f) for f in self.collection.find({"category": category})]

    def find_by_name(self, name: str) -> Optional[Dict]:
        return sanitize(self.collection.find_one({"name": name}))

    def find_many(self, ids: List[Any]) -> Dict[str, Dict]:
        return {str(f["_id"]): sanitize(f) for f in self.collection.find({"_id": {"$in": ids}})}

    def create(
        self,
        name: str,
        price: float,
        category: str,
        diet: Optional[List[str]] = None,
        ingredients: Optional[List[str]] = None,
    ) -> Dict:
        try:
            food_doc = FoodSchema(
                name=name,
                price=price,
                category=category,
                diet=diet or [],
                ingredients=ingredients or [],
            ).model_dump()
        except ValidationError:
            raise ValidationFailed("Invalid food")
        try:
            res = self.collection.insert_one(food_doc)
        except DuplicateKeyError:
            raise DuplicateName(f"Food {name} already exists")
        food_doc["_id"] = res.inserted_id
        return sanitize(food_doc)

    def edit(
        self,
        name: str,
        price: float,
        category: str,
        diet: Optional[List[str]] = None,
        ingredients: Optional[List[str]] = None,
    ) -> Optional[Dict]:
        """Overwrite price and category; list fields only when given. Ratings are kept."""
        try:
            edited = FoodSchema(
                name=name,
                price=price,
                category=category,
                diet=diet or [],
                ingredients=ingredients or [],
            )
        except ValidationError:
            raise ValidationFailed("Invalid food")
        update: Dict[str, Any] = {"price": edited.price, "category": edited.category}
        if diet is not None:
            update["diet"] = edited.diet
        if ingredients is not None:
            update["ingredients"] = edited.ingredients
        doc = self.collection.find_one_and_update(
            {"name": name}, {"$set": update}, return_document=ReturnDocument.AFTER
        )
        return sanitize(doc)

    def remove(self, name: str) -> Optional[Dict]:
        return sanitize(self.collection.find_one_and_delete({"name": name}))

    def rate(self, name: str, rating: int) -> Dict:
        # atomic append, concurrent raters never overwrite each other
        doc = self.collection.find_one_and_update(
            {"name": name}, {"$push": {"ratings": rating}}, return_document=ReturnDocument.AFTER
        )
        if doc is None:
            raise NotFound(f"Food {name} not found")
        return sanitize(doc)
