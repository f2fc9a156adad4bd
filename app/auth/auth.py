import json

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials, exceptions as firebase_exceptions
from fastapi import Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.config import settings
from app.database.database import get_db
from app.models.models import User
from app.schemas.status_schema import UserRole
from app.utils.logger_config import setup_logger

logger = setup_logger()

bearer_scheme = HTTPBearer(auto_error=False)


class IdentityVerificationError(Exception):
    pass


class FirebaseIdentityVerifier:
    """Verifies Firebase ID tokens and yields the verified email."""

    app_name = "zapshift"

    def __init__(self):
        self._app = None

    def _get_app(self):
        if self._app is not None:
            return self._app
        try:
            self._app = firebase_admin.get_app(self.app_name)
            return self._app
        except ValueError:
            pass

        if settings.FIREBASE_SERVICE_ACCOUNT_JSON:
            cred = credentials.Certificate(json.loads(settings.FIREBASE_SERVICE_ACCOUNT_JSON))
        elif settings.FIREBASE_SERVICE_ACCOUNT_FILE:
            cred = credentials.Certificate(settings.FIREBASE_SERVICE_ACCOUNT_FILE)
        else:
            raise IdentityVerificationError("Firebase credentials are not configured")

        self._app = firebase_admin.initialize_app(cred, name=self.app_name)
        return self._app

    async def verify(self, token: str) -> str:
        app = self._get_app()
        try:
            decoded = await run_in_threadpool(firebase_auth.verify_id_token, token, app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise IdentityVerificationError(str(e)) from e

        email = decoded.get("email")
        if not email:
            raise IdentityVerificationError("Token carries no email claim")
        return email


identity_verifier = FirebaseIdentityVerifier()


def get_identity_verifier() -> FirebaseIdentityVerifier:
    return identity_verifier


async def get_current_email(
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: FirebaseIdentityVerifier = Depends(get_identity_verifier),
) -> str:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized access",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if bearer is None or not bearer.credentials:
        raise credentials_exception

    try:
        return await verifier.verify(bearer.credentials)
    except IdentityVerificationError as e:
        logger.warning(f"Rejected bearer token: {str(e)}")
        raise credentials_exception


async def get_current_admin(
    current_email: str = Depends(get_current_email),
    db: AsyncSession = Depends(get_db),
) -> User:
    result = await db.execute(select(User).where(User.email == current_email))
    user = result.scalar_one_or_none()

    if user is None or user.role != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden access",
        )
    return user


async def is_admin(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.role).where(User.email == email))
    return result.scalar_one_or_none() == UserRole.ADMIN.value


def ensure_self_or_forbidden(email: str, current_email: str) -> None:
    if email != current_email:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden access",
        )
