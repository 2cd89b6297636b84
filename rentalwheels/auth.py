"""
Bearer-token identity verification backed by Firebase Authentication.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import firebase_admin
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials as firebase_credentials
from firebase_admin import exceptions as firebase_exceptions

from rentalwheels.dependencies import get_identity_verifier

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized access"

_bearer_scheme = HTTPBearer(auto_error=False)


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be verified, whatever the cause."""


@dataclass(frozen=True)
class CallerIdentity:
    """Verified caller for the duration of one request."""

    uid: str
    email: Optional[str] = None


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> CallerIdentity:
        ...


@dataclass
class InMemoryIdentityVerifier:
    """Test double mapping fixed tokens to identities."""

    tokens: dict[str, CallerIdentity] = field(default_factory=dict)

    def add_token(self, token: str, uid: str, email: str | None = None) -> None:
        self.tokens[token] = CallerIdentity(uid=uid, email=email)

    def verify(self, token: str) -> CallerIdentity:
        identity = self.tokens.get(token)
        if identity is None:
            raise InvalidTokenError("unknown token")
        return identity


class FirebaseIdentityVerifier:
    """
    Verifies Firebase ID tokens. Initializes the default Firebase app on first
    use unless one already exists in the process.
    """

    def __init__(
        self,
        project_id: str | None = None,
        credentials_path: str | None = None,
        check_revoked: bool = False,
    ):
        self.check_revoked = check_revoked
        try:
            self.app = firebase_admin.get_app()
        except ValueError:
            cred = (
                firebase_credentials.Certificate(credentials_path)
                if credentials_path
                else firebase_credentials.ApplicationDefault()
            )
            options = {"projectId": project_id} if project_id else None
            self.app = firebase_admin.initialize_app(cred, options)

    def verify(self, token: str) -> CallerIdentity:
        try:
            decoded = firebase_auth.verify_id_token(
                token, app=self.app, check_revoked=self.check_revoked
            )
        except (ValueError, firebase_exceptions.FirebaseError) as exc:
            raise InvalidTokenError(str(exc)) from exc
        uid = decoded.get("uid")
        if not uid:
            raise InvalidTokenError("token has no uid claim")
        return CallerIdentity(uid=uid, email=decoded.get("email"))


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=UNAUTHORIZED_MESSAGE,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> CallerIdentity:
    """
    FastAPI dependency guarding private routes. Missing, malformed, expired or
    otherwise invalid tokens all produce the same 401.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    try:
        return verifier.verify(credentials.credentials)
    except InvalidTokenError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise _unauthorized() from exc
