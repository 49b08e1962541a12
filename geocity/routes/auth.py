"""
Authentication endpoints - Firebase email/password and Google sign-in.
"""

from typing import Optional

from fastapi import APIRouter, Header, HTTPException, status
from fastapi.responses import JSONResponse
from geocity.models.user import AuthResponse, AuthUser, GoogleAuthRequest, LoginRequest, PasswordResetRequest, SignUpRequest
from geocity.services.auth_service import AuthError, get_auth_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Handlers are plain `def`: Identity Toolkit calls and login backoff block,
# so they must run in the threadpool and not on the event loop.


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _auth_http_error(e: AuthError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED, response_model_by_alias=True)
def register(request: SignUpRequest):
    """
    Register with email and password.

    Creates the Firebase account, sets its display name and stores the
    profile under the Firebase uid.
    """
    try:
        return get_auth_service().register(request)
    except AuthError as e:
        raise _auth_http_error(e)
    except Exception as e:
        logger.error(f"Failed to register user: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to register user: {str(e)}"
        )


@router.put("", response_model=AuthResponse, response_model_by_alias=True)
def login(request: LoginRequest):
    """
    Log in with email and password.

    Transient failures are retried (3 attempts, 2s / 4s backoff); wrong
    credentials are not.
    """
    try:
        return get_auth_service().login(request)
    except AuthError as e:
        raise _auth_http_error(e)
    except Exception as e:
        logger.error(f"Failed to login: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to login: {str(e)}"
        )


@router.delete("")
def logout(authorization: Optional[str] = Header(None)):
    try:
        get_auth_service().logout(_bearer_token(authorization))
        return {"message": "Logged out successfully"}
    except AuthError as e:
        raise _auth_http_error(e)
    except Exception as e:
        logger.error(f"Failed to logout: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to logout: {str(e)}")


@router.post("/google", response_model=AuthResponse, response_model_by_alias=True)
def google_sign_in(request: GoogleAuthRequest):
    """Sign in with a Google ID token. 201 for a new profile, 200 otherwise."""
    try:
        response, is_new_user = get_auth_service().google_sign_in(request)
    except AuthError as e:
        raise _auth_http_error(e)
    except Exception as e:
        logger.error(f"Google authentication failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Google authentication failed: {str(e)}")

    return JSONResponse(
        status_code=status.HTTP_201_CREATED if is_new_user else status.HTTP_200_OK,
        content=response.model_dump(by_alias=True, mode="json"),
    )


@router.post("/reset-password")
def reset_password(request: PasswordResetRequest):
    try:
        get_auth_service().send_password_reset(request.email)
        return {"message": "Password reset email sent successfully"}
    except AuthError as e:
        if e.code == "EMAIL_NOT_FOUND":
            raise HTTPException(status_code=404, detail="No user found with this email address")
        if e.code == "TOO_MANY_ATTEMPTS_TRY_LATER":
            raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")
        raise _auth_http_error(e)
    except Exception as e:
        logger.error(f"Failed to send password reset email: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to send password reset email: {str(e)}")


@router.get("/me", response_model=AuthUser, response_model_by_alias=True)
def current_user(authorization: Optional[str] = Header(None)):
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    try:
        return get_auth_service().get_current_user(token)
    except AuthError as e:
        raise _auth_http_error(e)
