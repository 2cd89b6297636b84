"""
Car listings. Reads are public; writes require a verified provider who owns
the listing.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from rentalwheels.auth import CallerIdentity, get_current_identity
from rentalwheels.db import DbClient
from rentalwheels.dependencies import get_db_client
from rentalwheels.schemas import (
    CarCreate,
    CarStatusUpdate,
    CarUpdate,
    DeleteResponse,
    InsertResponse,
    UpdateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cars", tags=["cars"])


def _load_owned_car(db: DbClient, car_id: str, identity: CallerIdentity) -> dict:
    car = db.get_car(car_id)
    if not car:
        raise HTTPException(status_code=404, detail="Car not found")
    if not identity.email or car.get("providerEmail") != identity.email:
        logger.warning("Caller %s does not own car %s", identity.uid, car_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: you do not own this car",
        )
    return car


@router.post("", response_model=InsertResponse)
def create_car(
    payload: CarCreate,
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    if not identity.email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: a verified email is required to list cars",
        )
    car = payload.to_document()
    car["providerEmail"] = identity.email
    result = db.insert_car(car)
    logger.info("Car %s created by %s", result.inserted_id, identity.email)
    return result.as_dict()


@router.get("", response_model=list[dict])
def list_cars(
    email: Optional[str] = Query(None, description="Exact providerEmail match"),
    search: Optional[str] = Query(None, description="Substring of carName"),
    db: DbClient = Depends(get_db_client),
):
    return db.find_cars(provider_email=email or None, search=search or None)


@router.get("/user/{email}", response_model=list[dict])
def list_provider_cars(email: str, db: DbClient = Depends(get_db_client)):
    return db.find_cars(provider_email=email)


@router.get("/{car_id}")
def get_car(car_id: str, db: DbClient = Depends(get_db_client)):
    car = db.get_car(car_id)
    if not car:
        raise HTTPException(status_code=404, detail="Car not found")
    return car


@router.put("/{car_id}", response_model=UpdateResponse)
def update_car(
    car_id: str,
    payload: CarUpdate,
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    _load_owned_car(db, car_id, identity)
    fields = payload.to_document()
    if not fields:
        return {"acknowledged": True, "matchedCount": 1, "modifiedCount": 0}
    result = db.update_car(car_id, fields)
    logger.info("Car %s updated by %s", car_id, identity.email)
    return result.as_dict()


@router.patch("/{car_id}", response_model=UpdateResponse)
def update_car_status(
    car_id: str,
    payload: CarStatusUpdate,
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    _load_owned_car(db, car_id, identity)
    result = db.update_car(car_id, {"status": payload.status})
    logger.info("Car %s status set to %s", car_id, payload.status)
    return result.as_dict()


@router.delete("/{car_id}", response_model=DeleteResponse)
def delete_car(
    car_id: str,
    db: DbClient = Depends(get_db_client),
    identity: CallerIdentity = Depends(get_current_identity),
):
    _load_owned_car(db, car_id, identity)
    result = db.delete_car(car_id)
    logger.info("Car %s deleted by %s", car_id, identity.email)
    return result.as_dict()
