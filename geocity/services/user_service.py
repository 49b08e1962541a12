"""
User Service - Manage user profiles in the Firestore `user` collection.

Profiles created through sign-up / Google sign-in use the Firebase uid as
document id; profiles created through the admin API get a generated id.
"""

from firebase_admin import firestore
from geocity.config.firebase import get_db
from geocity.models.user import UserCreate, UserUpdate
from geocity.utils.firestore_helpers import document_to_dict, where_filter
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

USERS_COLLECTION = "user"


class DuplicateEmailError(ValueError):
    """Another profile already uses this email."""


class UserService:
    """
    Service for user profile management in Firestore.
    """

    def __init__(self):
        self.db = get_db()

    def _collection(self):
        return self.db.collection(USERS_COLLECTION)

    def get_user(self, user_id: str) -> Optional[Dict]:
        doc = self._collection().document(user_id).get()
        if not doc.exists:
            return None
        return document_to_dict(doc)

    def get_user_by_email(self, email: str) -> Optional[Dict]:
        docs = list(where_filter(self._collection(), "email", "==", email).limit(1).stream())
        if not docs:
            return None
        return document_to_dict(docs[0])

    def email_exists(self, email: str) -> bool:
        return self.get_user_by_email(email) is not None

    def list_users(self, limit: int = 10, page: int = 1) -> Dict:
        """Newest profiles first, `limit` per page."""
        limit = max(1, limit)
        page = max(1, page)
        query = self._collection().order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit * page)
        users = [document_to_dict(doc) for doc in query.stream()][(page - 1) * limit:]
        return {"users": users, "total": len(users), "page": page, "limit": limit}

    def create_user(self, user_data: UserCreate, user_id: Optional[str] = None, extra: Optional[Dict] = None) -> Dict:
        """
        Create a profile.

        Raises:
            DuplicateEmailError: the email is already registered
        """
        if self.email_exists(user_data.email):
            raise DuplicateEmailError("User with this email already exists")

        data = user_data.to_firestore()
        data.update(extra or {})
        data["createdAt"] = firestore.SERVER_TIMESTAMP
        data["updatedAt"] = firestore.SERVER_TIMESTAMP

        doc_ref = self._collection().document(user_id) if user_id else self._collection().document()
        doc_ref.set(data)
        logger.info(f"✅ User profile created: {doc_ref.id}")
        return document_to_dict(doc_ref.get())

    def update_user(self, user_id: str, updates: UserUpdate) -> Dict:
        """
        Partial update of a profile.

        Raises:
            LookupError: no such profile
            DuplicateEmailError: new email belongs to another profile
        """
        doc_ref = self._collection().document(user_id)
        doc = doc_ref.get()
        if not doc.exists:
            raise LookupError("User not found")

        data = updates.to_firestore()
        current_email = (doc.to_dict() or {}).get("email")
        if data.get("email") and data["email"] != current_email and self.email_exists(data["email"]):
            raise DuplicateEmailError("User with this email already exists")

        data["updatedAt"] = firestore.SERVER_TIMESTAMP
        doc_ref.update(data)
        logger.info(f"User profile updated: {user_id} ({', '.join(sorted(data))})")
        return document_to_dict(doc_ref.get())

    def touch_last_login(self, user_id: str) -> Dict:
        doc_ref = self._collection().document(user_id)
        doc_ref.update({
            "lastLoginAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        })
        return document_to_dict(doc_ref.get())

    def delete_user(self, user_id: str) -> None:
        """
        Raises:
            LookupError: no such profile
        """
        doc_ref = self._collection().document(user_id)
        if not doc_ref.get().exists:
            raise LookupError("User not found")
        doc_ref.delete()
        logger.info(f"User profile deleted: {user_id}")


_user_service = None


def get_user_service() -> UserService:
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
