"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rentalwheels.config import get_settings
from rentalwheels.db import DbClient, InMemoryDbClient, MongoDbClient

if TYPE_CHECKING:
    from rentalwheels.auth import IdentityVerifier

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_identity_verifier: "IdentityVerifier | None" = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client shared by every request.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.warning("No MongoDB URI configured, using in-memory database")
        _db_client = InMemoryDbClient()
    else:
        _db_client = MongoDbClient(settings.database_url, settings.database_name)
    return _db_client


def get_identity_verifier() -> "IdentityVerifier":
    global _identity_verifier
    if _identity_verifier:
        return _identity_verifier

    from rentalwheels.auth import FirebaseIdentityVerifier, InMemoryIdentityVerifier

    settings = get_settings()
    if settings.use_in_memory_backends:
        _identity_verifier = InMemoryIdentityVerifier()
    else:
        _identity_verifier = FirebaseIdentityVerifier(
            project_id=settings.firebase_project_id,
            credentials_path=settings.firebase_credentials_path,
        )
    return _identity_verifier


def close_clients() -> None:
    """Release the shared clients; the next request builds fresh ones."""
    global _db_client, _identity_verifier
    if _db_client is not None:
        _db_client.close()
    _db_client = None
    _identity_verifier = None
