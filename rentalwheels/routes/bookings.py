"""
Bookings. Every route requires a verified renter; listing and deletion are
restricted to the renter's own bookings.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from rentalwheels.auth import CallerIdentity, get_current_identity
from rentalwheels.db import DbClient
from rentalwheels.dependencies import get_db_client
from rentalwheels.schemas import BookingCreate, DeleteResponse, InsertResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=InsertResponse)
def create_booking(
    payload: BookingCreate,
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    booking = payload.to_document()
    booking["renterId"] = identity.uid
    result = db.insert_booking(booking)
    logger.info("Booking %s created by %s", result.inserted_id, identity.uid)
    return result.as_dict()


@router.get("", response_model=list[dict])
def list_bookings(
    renter_id: Optional[str] = Query(None, alias="renterId"),
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    # Unfiltered requests only see the caller's bookings.
    if renter_id and renter_id != identity.uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: cannot list another renter's bookings",
        )
    return db.find_bookings(renter_id=identity.uid)


@router.delete("/{booking_id}", response_model=DeleteResponse)
def delete_booking(
    booking_id: str,
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    booking = db.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    if booking.get("renterId") != identity.uid:
        logger.warning("Caller %s does not own booking %s", identity.uid, booking_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: you do not own this booking",
        )
    result = db.delete_booking(booking_id)
    logger.info("Booking %s deleted by %s", booking_id, identity.uid)
    return result.as_dict()
