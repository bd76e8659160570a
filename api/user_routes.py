from fastapi import APIRouter, HTTPException, Depends, status
from typing import List, Optional
from pymongo.database import Database

from api.models import UserCreate, UserUpdate, UserResponse, UserMessage
from api.mongo import get_db
from api.routes import get_current_user, get_optional_user, is_admin
from api.user_service import get_user_service
from utils.logger import get_logger

logger = get_logger(__name__)

user_router = APIRouter(prefix="/api/users", tags=["users"])


@user_router.get("", response_model=List[UserResponse])
async def list_users(
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """List all users"""
    try:
        service = get_user_service(db)
        return await service.list_users()
    except Exception as e:
        logger.error(f"Error listing users: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch users: {str(e)}")


@user_router.post("", response_model=UserMessage, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: Optional[dict] = Depends(get_optional_user),
    db: Database = Depends(get_db),
):
    """Register a new user. Only admins may create users with another role."""
    if (user_data.role or "user") != "user" and not is_admin(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can assign roles",
        )
    try:
        service = get_user_service(db)
        user = await service.create_user(user_data)
        return {"message": "User created", "user": user}
    except Exception as e:
        logger.error(f"Error creating user: {e}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Failed to create user: {str(e)}")


@user_router.put("", response_model=UserMessage)
async def update_user(
    updates: UserUpdate,
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Update a user's name, email, password or role"""
    admin = is_admin(current_user)
    if updates.id != current_user["id"] and not admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own account",
        )
    if updates.role is not None and not admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can change roles",
        )

    try:
        service = get_user_service(db)
        user = await service.update_user(updates.id, updates.model_dump(exclude={"id"}))
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return {"message": "User updated", "user": user}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating user {updates.id}: {e}", exc_info=True)
        raise HTTPException(status_code=400, detail=f"Failed to update user: {str(e)}")


@user_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user=Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Get a specific user by ID"""
    try:
        service = get_user_service(db)
        user = await service.get_user(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch user: {str(e)}")
