# tasky/auth/router.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from . import schemas, service
from tasky.core.dependencies import get_db, get_current_user
from tasky.core.errors import ServerError
from tasky.users.models import User

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)
logger = logging.getLogger(__name__)


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterRequest, db: Session = Depends(get_db)):
    """Creates a local account and returns a bearer token."""
    auth_service = service.AuthService(db)
    try:
        return auth_service.register(payload.name, payload.email, payload.password)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during registration: {e}", exc_info=True)
        raise ServerError()


@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.LoginRequest, db: Session = Depends(get_db)):
    auth_service = service.AuthService(db)
    try:
        return auth_service.login(payload.email, payload.password)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login: {e}", exc_info=True)
        raise ServerError()


@router.get("/profile", response_model=schemas.ProfileResponse)
def profile(current_user: User = Depends(get_current_user)):
    return schemas.ProfileResponse(user=schemas.UserOut.model_validate(current_user))


@router.post("/logout", response_model=schemas.MessageResponse)
def logout():
    """Tokens are stateless; the client discards its copy."""
    return schemas.MessageResponse(message="Logged out")


@router.get("/google", status_code=status.HTTP_302_FOUND)
def google_login(db: Session = Depends(get_db)):
    """Redirects the browser to Google's consent screen."""
    auth_service = service.AuthService(db)
    try:
        url = auth_service.build_authorization_url()
    except service.OAuthError as e:
        logger.warning(f"Google OAuth start failed: {e}")
        return RedirectResponse(auth_service.oauth_error_redirect(e.code), status_code=status.HTTP_302_FOUND)
    logger.info("Redirecting to Google OAuth consent screen")
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/google/callback", status_code=status.HTTP_302_FOUND)
def google_callback(
    code: str | None = Query(None),
    error: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Google redirects here after consent. The result goes back to the client
    only as a redirect: a token on success, an error code otherwise.
    """
    auth_service = service.AuthService(db)
    if error or not code:
        logger.warning(f"Google OAuth callback without code (error={error})")
        return RedirectResponse(auth_service.oauth_error_redirect("oauth_failed"), status_code=status.HTTP_302_FOUND)

    try:
        google_profile = auth_service.exchange_oauth_code(code)
        result = auth_service.complete_oauth(google_profile)
    except service.OAuthError as e:
        return RedirectResponse(auth_service.oauth_error_redirect(e.code), status_code=status.HTTP_302_FOUND)
    except Exception as e:
        logger.error(f"Google callback error: {e}", exc_info=True)
        return RedirectResponse(auth_service.oauth_error_redirect("oauth_error"), status_code=status.HTTP_302_FOUND)

    logger.info(f"Google OAuth completed for {result.user.email}")
    return RedirectResponse(auth_service.oauth_success_redirect(result.token), status_code=status.HTTP_302_FOUND)
