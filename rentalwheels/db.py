"""
Database gateway for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from bson import ObjectId
from pymongo import MongoClient
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
CARS_COLLECTION = "cars"
BOOKINGS_COLLECTION = "bookings"


class DbClient(Protocol):
    """Interface for database access."""

    def connect(self) -> None:
        ...

    def close(self) -> None:
        ...

    def list_users(self) -> list[dict]:
        ...

    def upsert_user(self, user: dict) -> "UpsertResult":
        ...

    def insert_car(self, car: dict) -> "InsertResult":
        ...

    def get_car(self, car_id: str) -> Optional[dict]:
        ...

    def find_cars(
        self, *, provider_email: str | None = None, search: str | None = None
    ) -> list[dict]:
        ...

    def update_car(self, car_id: str, fields: dict) -> "UpdateResult":
        ...

    def delete_car(self, car_id: str) -> "DeleteResult":
        ...

    def insert_booking(self, booking: dict) -> "InsertResult":
        ...

    def get_booking(self, booking_id: str) -> Optional[dict]:
        ...

    def find_bookings(self, *, renter_id: str | None = None) -> list[dict]:
        ...

    def delete_booking(self, booking_id: str) -> "DeleteResult":
        ...


@dataclass
class InsertResult:
    inserted_id: str
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "insertedId": self.inserted_id}


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {
            "acknowledged": self.acknowledged,
            "matchedCount": self.matched_count,
            "modifiedCount": self.modified_count,
        }


@dataclass
class UpsertResult(UpdateResult):
    upserted_id: Optional[str] = None

    def as_dict(self) -> dict:
        payload = super().as_dict()
        payload["upsertedId"] = self.upserted_id
        return payload


@dataclass
class DeleteResult:
    deleted_count: int
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "deletedCount": self.deleted_count}


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a path identifier; malformed ids are treated as absent."""
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    return {k: str(v) if isinstance(v, ObjectId) else v for k, v in doc.items()}


def _car_matches(
    car: dict, provider_email: str | None, search: str | None
) -> bool:
    if provider_email is not None and car.get("providerEmail") != provider_email:
        return False
    if search is not None:
        name = car.get("carName")
        if not isinstance(name, str) or search.lower() not in name.lower():
            return False
    return True


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[ObjectId, dict]] = {
            USERS_COLLECTION: {},
            CARS_COLLECTION: {},
            BOOKINGS_COLLECTION: {},
        }

    def connect(self) -> None:
        return None

    def close(self) -> None:
        return None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        for documents in self.collections.values():
            documents.clear()

    def _insert(self, name: str, document: dict) -> InsertResult:
        stored = copy.deepcopy(document)
        oid = ObjectId()
        stored["_id"] = oid
        self.collections[name][oid] = stored
        return InsertResult(inserted_id=str(oid))

    def _get(self, name: str, doc_id: str) -> Optional[dict]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        doc = self.collections[name].get(oid)
        return serialize_doc(copy.deepcopy(doc))

    def _delete(self, name: str, doc_id: str) -> DeleteResult:
        oid = to_object_id(doc_id)
        if oid is None or oid not in self.collections[name]:
            return DeleteResult(deleted_count=0)
        del self.collections[name][oid]
        return DeleteResult(deleted_count=1)

    def _all(self, name: str) -> list[dict]:
        return [
            serialize_doc(copy.deepcopy(doc))
            for doc in self.collections[name].values()
        ]

    def list_users(self) -> list[dict]:
        return self._all(USERS_COLLECTION)

    def upsert_user(self, user: dict) -> UpsertResult:
        users = self.collections[USERS_COLLECTION]
        for existing in users.values():
            if existing.get("email") == user.get("email"):
                changed = any(existing.get(k) != v for k, v in user.items())
                existing.update(copy.deepcopy(user))
                return UpsertResult(matched_count=1, modified_count=int(changed))
        inserted = self._insert(USERS_COLLECTION, user)
        return UpsertResult(
            matched_count=0, modified_count=0, upserted_id=inserted.inserted_id
        )

    def insert_car(self, car: dict) -> InsertResult:
        return self._insert(CARS_COLLECTION, car)

    def get_car(self, car_id: str) -> Optional[dict]:
        return self._get(CARS_COLLECTION, car_id)

    def find_cars(
        self, *, provider_email: str | None = None, search: str | None = None
    ) -> list[dict]:
        return [
            car
            for car in self._all(CARS_COLLECTION)
            if _car_matches(car, provider_email, search)
        ]

    def update_car(self, car_id: str, fields: dict) -> UpdateResult:
        oid = to_object_id(car_id)
        car = self.collections[CARS_COLLECTION].get(oid) if oid is not None else None
        if car is None:
            return UpdateResult(matched_count=0, modified_count=0)
        changed = any(car.get(k) != v for k, v in fields.items())
        car.update(copy.deepcopy(fields))
        return UpdateResult(matched_count=1, modified_count=int(changed))

    def delete_car(self, car_id: str) -> DeleteResult:
        return self._delete(CARS_COLLECTION, car_id)

    def insert_booking(self, booking: dict) -> InsertResult:
        return self._insert(BOOKINGS_COLLECTION, booking)

    def get_booking(self, booking_id: str) -> Optional[dict]:
        return self._get(BOOKINGS_COLLECTION, booking_id)

    def find_bookings(self, *, renter_id: str | None = None) -> list[dict]:
        bookings = self._all(BOOKINGS_COLLECTION)
        if renter_id is None:
            return bookings
        return [b for b in bookings if b.get("renterId") == renter_id]

    def delete_booking(self, booking_id: str) -> DeleteResult:
        return self._delete(BOOKINGS_COLLECTION, booking_id)


class MongoDbClient:
    """
    pymongo-backed implementation. One client is shared by every request for
    the lifetime of the process.
    """

    def __init__(self, database_url: str, database_name: str = "rentalwheels"):
        if not database_url:
            raise ValueError("MONGODB_URI is required for MongoDbClient")
        self.client = MongoClient(
            database_url,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
        )
        self.db = self.client[database_name]
        self.users = self.db[USERS_COLLECTION]
        self.cars = self.db[CARS_COLLECTION]
        self.bookings = self.db[BOOKINGS_COLLECTION]

    def connect(self) -> None:
        self.client.admin.command("ping")
        self.users.create_index("email", unique=True)
        logger.info("Pinged deployment, connected to MongoDB database %s", self.db.name)

    def close(self) -> None:
        self.client.close()

    def list_users(self) -> list[dict]:
        return [serialize_doc(doc) for doc in self.users.find()]

    def upsert_user(self, user: dict) -> UpsertResult:
        result = self.users.update_one(
            {"email": user["email"]}, {"$set": user}, upsert=True
        )
        return UpsertResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=str(result.upserted_id) if result.upserted_id else None,
            acknowledged=result.acknowledged,
        )

    def _insert(self, collection, document: dict) -> InsertResult:
        # insert_one mutates its argument by adding _id.
        result = collection.insert_one(dict(document))
        return InsertResult(
            inserted_id=str(result.inserted_id), acknowledged=result.acknowledged
        )

    def _get(self, collection, doc_id: str) -> Optional[dict]:
        oid = to_object_id(doc_id)
        if oid is None:
            return None
        return serialize_doc(collection.find_one({"_id": oid}))

    def _delete(self, collection, doc_id: str) -> DeleteResult:
        oid = to_object_id(doc_id)
        if oid is None:
            return DeleteResult(deleted_count=0)
        result = collection.delete_one({"_id": oid})
        return DeleteResult(
            deleted_count=result.deleted_count, acknowledged=result.acknowledged
        )

    def insert_car(self, car: dict) -> InsertResult:
        return self._insert(self.cars, car)

    def get_car(self, car_id: str) -> Optional[dict]:
        return self._get(self.cars, car_id)

    def find_cars(
        self, *, provider_email: str | None = None, search: str | None = None
    ) -> list[dict]:
        query: Dict[str, Any] = {}
        if provider_email is not None:
            query["providerEmail"] = provider_email
        if search is not None:
            query["carName"] = {"$regex": re.escape(search), "$options": "i"}
        return [serialize_doc(doc) for doc in self.cars.find(query)]

    def update_car(self, car_id: str, fields: dict) -> UpdateResult:
        oid = to_object_id(car_id)
        if oid is None:
            return UpdateResult(matched_count=0, modified_count=0)
        result = self.cars.update_one({"_id": oid}, {"$set": fields})
        return UpdateResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            acknowledged=result.acknowledged,
        )

    def delete_car(self, car_id: str) -> DeleteResult:
        return self._delete(self.cars, car_id)

    def insert_booking(self, booking: dict) -> InsertResult:
        return self._insert(self.bookings, booking)

    def get_booking(self, booking_id: str) -> Optional[dict]:
        return self._get(self.bookings, booking_id)

    def find_bookings(self, *, renter_id: str | None = None) -> list[dict]:
        query = {"renterId": renter_id} if renter_id is not None else {}
        return [serialize_doc(doc) for doc in self.bookings.find(query)]

    def delete_booking(self, booking_id: str) -> DeleteResult:
        return self._delete(self.bookings, booking_id)
