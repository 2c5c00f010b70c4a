import logging
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import (
    PRODUCT_COLLECTION,
    USER_COLLECTION,
    create_document,
    get_documents,
    serialize,
    to_object_id,
)
from errors import NotFoundError, ValidationError
from schemas import Product, ProductUpdate, User, next_product_id

logger = logging.getLogger(__name__)


class UserStore:
    """Credential records keyed by email."""

    def __init__(self, db: Database):
        self.collection = db[USER_COLLECTION]
        self._db = db

    def find(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": email})
        if doc is None:
            return None
        return User(email=doc["email"], password=doc["password"])

    def exists(self, email: str) -> bool:
        return self.collection.find_one({"email": email}, {"_id": 1}) is not None

    def add(self, user: User) -> str:
        try:
            return create_document(self._db, USER_COLLECTION, user.model_dump())
        except DuplicateKeyError:
            raise ValidationError(f"User {user.email} already exists")


class ProductStore:
    def __init__(self, db: Database):
        self.collection = db[PRODUCT_COLLECTION]
        self._db = db

    def create(self, product: Product) -> Dict[str, Any]:
        data = product.model_dump(by_alias=True, exclude_none=True)
        if not data.get("productId"):
            data["productId"] = next_product_id(
                d.get("productId") for d in self.collection.find({}, {"productId": 1})
            )
        try:
            oid = create_document(self._db, PRODUCT_COLLECTION, data)
        except DuplicateKeyError:
            raise ValidationError(f"productId {data['productId']} already exists")
        logger.info("Created product %s (%s)", data["productId"], oid)
        return self.get(oid)

    def get(self, product_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(product_id)
        if oid is None:
            return None
        return serialize(self.collection.find_one({"_id": oid}))

    def list(self, filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return get_documents(self._db, PRODUCT_COLLECTION, filter_dict)

    def update(self, product_id: str, update: ProductUpdate) -> Dict[str, Any]:
        oid = to_object_id(product_id)
        if oid is None:
            raise NotFoundError(f"Product {product_id} not found")
        changes = update.changes()
        if not changes:
            doc = self.collection.find_one({"_id": oid})
        else:
            try:
                doc = self.collection.find_one_and_update(
                    {"_id": oid},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
            except DuplicateKeyError:
                raise ValidationError(f"productId {changes.get('productId')} already exists")
        if doc is None:
            raise NotFoundError(f"Product {product_id} not found")
        logger.info("Updated product %s fields=%s", product_id, sorted(changes))
        return serialize(doc)

    def delete(self, product_id: str) -> None:
        oid = to_object_id(product_id)
        if oid is None:
            return
        result = self.collection.delete_one({"_id": oid})
        logger.info("Deleted product %s (removed=%d)", product_id, result.deleted_count)

    def featured(self) -> List[Dict[str, Any]]:
        return self.list({"featured": True})

    def price_below(self, max_price: float) -> List[Dict[str, Any]]:
        return self.list({"price": {"$lt": max_price}})

    def rating_above(self, min_rating: float) -> List[Dict[str, Any]]:
        return self.list({"rating": {"$gt": min_rating}})
