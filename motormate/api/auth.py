"""
Routes d'authentification / Authentication routes.
Connexion Google OAuth, profil utilisateur.
Google OAuth sign-in, user profile.
"""

import json
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from motormate.api.deps import get_current_user
from motormate.config import settings
from motormate.database import get_db
from motormate.models.user import User
from motormate.rate_limit import limiter
from motormate.schemas.common import ApiResponse
from motormate.schemas.user import GoogleUserInfo, ProfileUpdate, UserRead
from motormate.services import google_oauth
from motormate.services.google_oauth import GoogleOAuthError
from motormate.utils.auth import create_access_token, create_oauth_state, verify_oauth_state

logger = logging.getLogger(__name__)

router = APIRouter()


def _failure_redirect() -> RedirectResponse:
    return RedirectResponse(f"{settings.FRONTEND_URL}/login?error=google_auth_failed", status_code=302)


async def _upsert_google_user(db: AsyncSession, info: GoogleUserInfo) -> User:
    """Creer ou rattacher l'utilisateur Google / Create or link the Google user."""
    result = await db.execute(select(User).where(User.google_id == info.sub))
    user = result.scalar_one_or_none()

    if user is None:
        # Compte existant avec le meme email / Existing account with the same email
        result = await db.execute(select(User).where(User.email == info.email))
        user = result.scalar_one_or_none()
        if user is not None:
            user.google_id = info.sub

    if user is None:
        user = User(
            google_id=info.sub,
            email=info.email,
            username=info.name or info.email.split("@")[0],
            first_name=info.given_name,
            last_name=info.family_name,
            avatar=info.picture,
            auth_method="google",
        )
        db.add(user)
    elif info.picture:
        user.avatar = info.picture

    await db.flush()
    await db.refresh(user)
    return user


@router.get("/google")
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def google_login(request: Request):
    """Redirection vers Google / Redirect to Google."""
    url = google_oauth.google_client.authorization_url(create_oauth_state())
    return RedirectResponse(url, status_code=302)


@router.get("/google/callback")
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Retour de Google: emission du jeton / Google callback: token issuance."""
    if error or not code:
        logger.warning("Google callback without code (error=%s)", error)
        return _failure_redirect()
    if not verify_oauth_state(state):
        logger.warning("Google callback with invalid state")
        return _failure_redirect()

    try:
        info = await google_oauth.google_client.authenticate(code)
    except (GoogleOAuthError, ValidationError) as e:
        logger.warning("Google authentication failed: %s", e)
        return _failure_redirect()

    user = await _upsert_google_user(db, info)
    await db.commit()

    profile = UserRead.model_validate(user).model_dump(mode="json")
    query = urlencode({"token": create_access_token(user.id), "user": json.dumps(profile)})
    return RedirectResponse(f"{settings.FRONTEND_URL}/auth/success?{query}", status_code=302)


@router.get("/google/failure")
async def google_failure():
    """Echec de connexion Google / Google sign-in failure."""
    return _failure_redirect()


@router.get("/profile", response_model=ApiResponse[UserRead])
async def get_profile(user: User = Depends(get_current_user)):
    """Profil de l'utilisateur connecte / Current user profile."""
    return ApiResponse(data=UserRead.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserRead])
async def update_profile(
    data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Modifier son profil / Update own profile."""
    updates = data.model_dump(exclude_unset=True)
    address = updates.pop("address", None)
    for key, value in updates.items():
        setattr(user, key, value)
    if address:
        for key, value in address.items():
            setattr(user, key, value)
    await db.flush()
    await db.refresh(user)
    return ApiResponse(message="Profile updated successfully", data=UserRead.model_validate(user))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(user: User = Depends(get_current_user)):
    """Deconnexion (jeton sans etat) / Logout (stateless token)."""
    return ApiResponse(message="Logged out successfully")
