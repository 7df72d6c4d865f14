import logging
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from app.db.mongodb import db
from app.db.salon import create_salon
from app.schemas.user import UserCreate
from app.core.auth import get_password_hash, verify_password

logger = logging.getLogger(__name__)

class EmailAlreadyRegisteredError(Exception):
    pass

async def create_user(user_in: UserCreate) -> Dict[str, Any]:
    """
    Create a new owner or client account.

    Owners get their salon created alongside the account and linked through
    ``salonId``.
    """
    if await get_user_by_email(user_in.email):
        raise EmailAlreadyRegisteredError(user_in.email)

    user_data = user_in.model_dump(exclude={"salonName"})
    user_data["password"] = get_password_hash(user_data["password"])
    user_data["createdAt"] = datetime.now(timezone.utc)
    user_data["isActive"] = True
    user_data["salonId"] = None

    # Insert user into database
    result = await db.db.users.insert_one(user_data)
    user_id = str(result.inserted_id)

    if user_in.userType == "owner":
        salon_name = user_in.salonName or f"{user_in.firstName} {user_in.lastName}".strip() or "Mon salon"
        salon = await create_salon(salon_name, user_id)
        await db.db.users.update_one(
            {"_id": result.inserted_id},
            {"$set": {"salonId": salon["_id"]}}
        )
        logger.info("Created salon %s for owner %s", salon["_id"], user_id)

    return await db.db.users.find_one({"_id": result.inserted_id})

async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """
    Get a user by email
    """
    return await db.db.users.find_one({"email": email})

async def authenticate_user(email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Return the active user matching the credentials, or None
    """
    user = await get_user_by_email(email)
    if not user or not user.get("isActive", True):
        return None
    if not verify_password(password, user.get("password", "")):
        return None
    return user

async def update_last_login(user: Dict[str, Any]) -> None:
    """
    Update user's last login timestamp
    """
    await db.db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"lastLogin": datetime.now(timezone.utc)}}
    )
