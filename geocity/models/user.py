"""
User models for authentication and user profile management.
Field aliases follow the camelCase documents stored in the `user` collection.
"""

from pydantic import BaseModel, Field
from typing import Optional


class UserCreate(BaseModel):
    """Model for creating a user profile directly (admin / API use)."""
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    address: str = ""
    phone_number: int = Field(0, alias="phoneNumber")
    points_earned: int = Field(0, ge=0, alias="pointsEarned")
    raised_issues: int = Field(0, ge=0, alias="raisedIssues")

    model_config = {"populate_by_name": True}

    def to_firestore(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "phoneNumber": self.phone_number,
            "pointsEarned": self.points_earned,
            "raisedIssues": self.raised_issues,
        }


class UserUpdate(BaseModel):
    """Partial profile update. Unknown fields (including `id`) are ignored."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=254)
    address: Optional[str] = None
    phone_number: Optional[int] = Field(None, alias="phoneNumber")
    points_earned: Optional[int] = Field(None, ge=0, alias="pointsEarned")
    raised_issues: Optional[int] = Field(None, ge=0, alias="raisedIssues")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    def to_firestore(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class SignUpRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    address: str = ""
    phone_number: int = Field(0, alias="phoneNumber")
    points_earned: int = Field(0, ge=0, alias="pointsEarned")
    raised_issues: int = Field(0, ge=0, alias="raisedIssues")

    model_config = {"populate_by_name": True}


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)


class GoogleAuthRequest(BaseModel):
    id_token: str = Field(..., min_length=1, alias="idToken")

    model_config = {"populate_by_name": True}


class PasswordResetRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)


class AuthUser(BaseModel):
    uid: str
    email: str
    name: Optional[str] = None
    address: Optional[str] = None
    phone_number: Optional[int] = Field(None, alias="phoneNumber")
    points_earned: Optional[int] = Field(None, alias="pointsEarned")
    raised_issues: Optional[int] = Field(None, alias="raisedIssues")

    model_config = {"populate_by_name": True}


class AuthResponse(BaseModel):
    """Authentication response."""
    user: AuthUser
    token: Optional[str] = None
    refresh_token: Optional[str] = Field(None, alias="refreshToken")

    model_config = {"populate_by_name": True}
