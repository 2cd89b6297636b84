"""
Pydantic schemas for the Rental Wheels API.

Entity bodies accept extra caller-defined fields; only the fields the
service itself reads are typed. Ownership fields (providerEmail, renterId)
are always set from the verified caller, never from the body.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

CarStatus = Literal["available", "booked", "unavailable"]

_OWNER_FIELDS = {"providerEmail", "renterId", "_id"}


class _Document(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_document(self) -> dict:
        """Fields the caller sent, explicit nulls included, without server-owned keys."""
        data = self.model_dump(exclude_unset=True)
        return {k: v for k, v in data.items() if k not in _OWNER_FIELDS}


class UserPayload(_Document):
    """
    The upsert key is the normalized address: the domain is lowercased, the
    local part is kept as sent.
    """

    email: EmailStr
    name: Optional[str] = None
    photoURL: Optional[str] = None


class CarCreate(_Document):
    carName: str = Field(..., min_length=1)
    status: CarStatus = "available"

    def to_document(self) -> dict:
        document = super().to_document()
        document["status"] = self.status
        return document


class CarUpdate(_Document):
    # Declared fields may be omitted but not cleared.
    carName: str = Field(None, min_length=1)
    status: CarStatus = None


class CarStatusUpdate(BaseModel):
    status: CarStatus


class BookingCreate(_Document):
    carId: str = Field(..., min_length=1)


class MessageResponse(BaseModel):
    message: str


class InsertResponse(BaseModel):
    acknowledged: bool
    insertedId: str


class UpdateResponse(BaseModel):
    acknowledged: bool
    matchedCount: int
    modifiedCount: int


class UpsertResponse(UpdateResponse):
    upsertedId: Optional[str] = None


class DeleteResponse(BaseModel):
    acknowledged: bool
    deletedCount: int
