"""
User profile endpoints - CRUD over the `user` collection, addressed by
`?id=` (Firebase uid or generated id).
"""

from typing import Optional
import logging

from fastapi import APIRouter, HTTPException, Query, status

from geocity.models.user import UserCreate, UserUpdate
from geocity.services.user_service import DuplicateEmailError, get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])


def _require_id(user_id: Optional[str]) -> str:
    if not user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")
    return user_id


@router.get("")
async def get_users(
    id: Optional[str] = None,
    email: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """One user by id or email, otherwise a page of users (newest first)."""
    try:
        user_service = get_user_service()

        if id:
            user = user_service.get_user(id)
            if user is None:
                raise HTTPException(status_code=404, detail="User not found")
            return user

        if email:
            user = user_service.get_user_by_email(email)
            if user is None:
                raise HTTPException(status_code=404, detail="User not found")
            return user

        return user_service.list_users(limit=limit, page=page)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch users: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(user: UserCreate):
    try:
        return get_user_service().create_user(user)
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create user: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create user: {str(e)}")


def _update(user_id: Optional[str], updates: UserUpdate):
    user_id = _require_id(user_id)
    try:
        return get_user_service().update_user(user_id, updates)
    except DuplicateEmailError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update user {user_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update user: {str(e)}")


@router.put("")
async def update_user(updates: UserUpdate, id: Optional[str] = None):
    return _update(id, updates)


@router.patch("")
async def patch_user(updates: UserUpdate, id: Optional[str] = None):
    return _update(id, updates)


@router.delete("")
async def delete_user(id: Optional[str] = None):
    user_id = _require_id(id)
    try:
        get_user_service().delete_user(user_id)
        return {"message": "User deleted successfully"}
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to delete user {user_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete user: {str(e)}")
