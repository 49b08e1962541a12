"""
Authentication service.

Email/password and Google sign-in run against the Firebase Identity Toolkit
REST API (the Admin SDK cannot check passwords). Session tokens are the
Firebase ID tokens it returns; the Admin SDK verifies and revokes them.
"""

import logging
import time
from typing import Dict, Optional, Tuple

import requests
from firebase_admin import auth as firebase_auth

from geocity.config.firebase import initialize_firebase_app
from geocity.core.settings import settings
from geocity.models.user import (
    AuthResponse,
    AuthUser,
    GoogleAuthRequest,
    LoginRequest,
    SignUpRequest,
    UserCreate,
)
from geocity.services.user_service import DuplicateEmailError, UserService, get_user_service

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:{method}"
TIMEOUT_SECONDS = 10.0
MAX_LOGIN_ATTEMPTS = 3

# Identity Toolkit error code -> (HTTP status, client message)
ERROR_MAP = {
    "EMAIL_EXISTS": (409, "User with this email already exists"),
    "WEAK_PASSWORD": (400, "Password should be at least 6 characters"),
    "INVALID_EMAIL": (400, "Invalid email address"),
    "MISSING_PASSWORD": (400, "Password is required"),
    "EMAIL_NOT_FOUND": (404, "User not found"),
    "USER_DISABLED": (403, "This account has been disabled"),
    "INVALID_PASSWORD": (401, "Invalid password"),
    "INVALID_LOGIN_CREDENTIALS": (401, "Invalid email or password"),
    "TOO_MANY_ATTEMPTS_TRY_LATER": (429, "Too many failed login attempts. Please try again later."),
    "INVALID_IDP_RESPONSE": (401, "Invalid Google credentials"),
    "FEDERATED_USER_ID_ALREADY_LINKED": (
        409,
        "An account already exists with the same email address but different sign-in credentials",
    ),
}


class AuthError(Exception):
    """Identity provider failure, carrying the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int = 500, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def retryable(self) -> bool:
        return self.status_code >= 500


def _profile_to_auth_user(uid: str, email: str, profile: Dict) -> AuthUser:
    return AuthUser(
        uid=uid,
        email=email or profile.get("email") or "",
        name=profile.get("name"),
        address=profile.get("address"),
        phone_number=profile.get("phoneNumber"),
        points_earned=profile.get("pointsEarned"),
        raised_issues=profile.get("raisedIssues"),
    )


class AuthService:

    def __init__(self, user_service: Optional[UserService] = None):
        self.api_key = settings.FIREBASE_WEB_API_KEY
        self.users = user_service or get_user_service()

    def _call(self, method: str, payload: Dict) -> Dict:
        """POST to the Identity Toolkit and translate failures into AuthError."""
        if not self.api_key:
            raise AuthError("Authentication is not configured (FIREBASE_WEB_API_KEY missing)", 503)

        try:
            response = requests.post(
                IDENTITY_TOOLKIT_URL.format(method=method),
                params={"key": self.api_key},
                json=payload,
                timeout=TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"Identity Toolkit {method} network error: {e}")
            raise AuthError("Network error - please check your internet connection and try again", 503, "NETWORK")

        if response.ok:
            return response.json()

        try:
            raw_code = response.json().get("error", {}).get("message", "")
        except ValueError:
            raw_code = ""
        # e.g. "WEAK_PASSWORD : Password should be at least 6 characters"
        code = raw_code.split(" : ")[0].strip()
        logger.warning(f"Identity Toolkit {method} failed: {response.status_code} {raw_code}")

        if code in ERROR_MAP:
            status_code, message = ERROR_MAP[code]
            raise AuthError(message, status_code, code)
        if response.status_code >= 500:
            raise AuthError("Authentication service unavailable", 503, code or None)
        raise AuthError("Authentication failed", 500, code or None)

    def register(self, request: SignUpRequest) -> AuthResponse:
        if self.users.email_exists(request.email):
            raise AuthError("User with this email already exists", 409, "EMAIL_EXISTS")

        account = self._call("signUp", {
            "email": request.email,
            "password": request.password,
            "returnSecureToken": True,
        })
        uid = account["localId"]
        token = account.get("idToken")

        try:
            self._call("update", {"idToken": token, "displayName": request.name, "returnSecureToken": False})
        except AuthError as e:
            logger.warning(f"⚠️ Could not set display name for {uid}: {e.message}")

        profile_data = UserCreate(
            name=request.name,
            email=request.email,
            address=request.address,
            phone_number=request.phone_number,
            points_earned=request.points_earned,
            raised_issues=request.raised_issues,
        )
        try:
            profile = self.users.create_user(profile_data, user_id=uid)
        except DuplicateEmailError as e:
            raise AuthError(str(e), 409, "EMAIL_EXISTS")

        logger.info(f"✅ User registered: {uid}")
        return AuthResponse(
            user=_profile_to_auth_user(uid, account.get("email") or request.email, profile),
            token=token,
            refresh_token=account.get("refreshToken"),
        )

    def _sign_in_with_retry(self, request: LoginRequest) -> Dict:
        """Up to MAX_LOGIN_ATTEMPTS with 2s, 4s backoff; credential errors are final."""
        last_error: Optional[AuthError] = None
        for attempt in range(1, MAX_LOGIN_ATTEMPTS + 1):
            try:
                logger.info(f"Firebase auth attempt {attempt}/{MAX_LOGIN_ATTEMPTS}")
                return self._call("signInWithPassword", {
                    "email": request.email,
                    "password": request.password,
                    "returnSecureToken": True,
                })
            except AuthError as e:
                last_error = e
                if not e.retryable:
                    raise
                if attempt < MAX_LOGIN_ATTEMPTS:
                    delay = 2 ** attempt
                    logger.info(f"Waiting {delay}s before retry...")
                    time.sleep(delay)
        raise last_error

    def login(self, request: LoginRequest) -> AuthResponse:
        account = self._sign_in_with_retry(request)
        uid = account["localId"]

        profile = self.users.get_user(uid)
        if profile is None:
            raise AuthError("User data not found", 404)

        logger.info(f"✅ User logged in: {uid}")
        return AuthResponse(
            user=_profile_to_auth_user(uid, account.get("email") or request.email, profile),
            token=account.get("idToken"),
            refresh_token=account.get("refreshToken"),
        )

    def google_sign_in(self, request: GoogleAuthRequest) -> Tuple[AuthResponse, bool]:
        """Returns (response, is_new_user)."""
        account = self._call("signInWithIdp", {
            "postBody": f"id_token={request.id_token}&providerId=google.com",
            "requestUri": "http://localhost",
            "returnIdpCredential": True,
            "returnSecureToken": True,
        })
        uid = account["localId"]
        email = account.get("email") or ""

        profile = self.users.get_user(uid)
        is_new_user = profile is None
        if is_new_user:
            profile_data = UserCreate(name=account.get("displayName") or "User", email=email)
            profile = self.users.create_user(profile_data, user_id=uid, extra={"provider": "google"})
            logger.info(f"✅ New Google user created: {uid}")
        else:
            profile = self.users.touch_last_login(uid)
            logger.info(f"✅ Google user signed in: {uid}")

        response = AuthResponse(
            user=_profile_to_auth_user(uid, email, profile),
            token=account.get("idToken"),
            refresh_token=account.get("refreshToken"),
        )
        return response, is_new_user

    def send_password_reset(self, email: str) -> None:
        self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        logger.info("Password reset email sent")

    def verify_token(self, id_token: str) -> Dict:
        if not settings.USE_MOCK_DB:
            initialize_firebase_app()
        try:
            return firebase_auth.verify_id_token(id_token)
        except firebase_auth.CertificateFetchError as e:
            logger.error(f"Could not fetch token certificates: {e}")
            raise AuthError("Authentication service unavailable", 503)
        except (firebase_auth.InvalidIdTokenError, ValueError) as e:
            logger.info(f"Rejected ID token: {e}")
            raise AuthError("Invalid or expired token", 401)

    def logout(self, id_token: Optional[str]) -> None:
        """Revoke the user's refresh tokens. Without a token there is nothing to revoke."""
        if not id_token:
            return
        decoded = self.verify_token(id_token)
        try:
            firebase_auth.revoke_refresh_tokens(decoded["uid"])
        except Exception as e:
            logger.error(f"Failed to revoke tokens for {decoded.get('uid')}: {e}")
            raise AuthError("Failed to logout", 500)
        logger.info(f"User logged out: {decoded['uid']}")

    def get_current_user(self, id_token: str) -> AuthUser:
        decoded = self.verify_token(id_token)
        uid = decoded["uid"]
        profile = self.users.get_user(uid)
        if profile is None:
            raise AuthError("User data not found", 404)
        return _profile_to_auth_user(uid, decoded.get("email") or "", profile)


_auth_service = None


def get_auth_service() -> AuthService:
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
