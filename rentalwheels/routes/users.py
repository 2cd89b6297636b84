"""
User records. Both routes are public.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from rentalwheels.db import DbClient
from rentalwheels.dependencies import get_db_client
from rentalwheels.schemas import UpsertResponse, UserPayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[dict])
def list_users(db: DbClient = Depends(get_db_client)):
    return db.list_users()


@router.post("", response_model=UpsertResponse)
def upsert_user(payload: UserPayload, db: DbClient = Depends(get_db_client)):
    """Insert the user, or overwrite the supplied fields when the email exists."""
    result = db.upsert_user(payload.to_document())
    if result.upserted_id:
        logger.info("Created user %s", result.upserted_id)
    return result.as_dict()
