"""
Order assembly.

Requested items are food names. Each name is looked up in the catalog; names
that match become ``_id`` references on the order, names that don't are
dropped. The lookups and the final insert are not a transaction.
"""
import logging
from typing import Dict, List, Optional

from pymongo.database import Database

from catalog import CatalogStore
from database import sanitize, to_obj_id
from errors import NotFound
from schemas import Order as OrderSchema

logger = logging.getLogger(__name__)


class OrderStore:
    def __init__(self, db: Database):
        self.collection = db["order"]
        self.catalog = CatalogStore(db)

    def resolve_items(self, names: List[str]) -> List[str]:
        items = []
        for name in names:
            food = self.catalog.find_by_name(name)
            if food:
                items.append(food["id"])
            else:
                logger.debug("dropping unknown item %r", name)
        return items

    def create_order(self, orderer: str, phone_nr: str, items: List[str]) -> Dict:
        order_doc = OrderSchema(
            orderer=orderer,
            phone_nr=phone_nr,
            items=self.resolve_items(items),
        ).model_dump()
        res = self.collection.insert_one(order_doc)
        order_doc["_id"] = res.inserted_id
        return self.populate(sanitize(order_doc))

    def populate(self, order: Dict) -> Dict:
        """Replace item ids with food documents, skipping foods removed since."""
        foods = self.catalog.find_many([to_obj_id(i) for i in order["items"]])
        return {**order, "items": [foods[i] for i in order["items"] if i in foods]}

    def list_all(self) -> List[Dict]:
        return [self.populate(sanitize(o)) for o in self.collection.find({})]

    def remove(self, order_id: str) -> Optional[Dict]:
        _id = to_obj_id(order_id)
        if _id is None:
            raise NotFound(f"Order {order_id} not found")
        doc = self.collection.find_one_and_delete({"_id": _id})
        if doc is None:
            return None
        return self.populate(sanitize(doc))
