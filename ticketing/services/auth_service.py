"""
Authentication service handling admin registration and login.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from ticketing.core.errors import ConflictError
from ticketing.models.admin import Admin
from ticketing.schemas.admin import AdminCreate, AdminLogin
from ticketing.core.security import hash_password, verify_password, create_access_token
from ticketing.core.logging import get_logger

logger = get_logger(__name__)


async def register_admin(db: AsyncSession, admin_data: AdminCreate) -> Admin:
    """
    Register a new admin with hashed password.
    Raises conflict if the email already exists.
    """
    email = admin_data.email.lower()
    result = await db.execute(select(Admin).where(Admin.email == email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=email)
        raise ConflictError("Admin already exists")

    admin = Admin(
        name=admin_data.name,
        email=email,
        hashed_password=hash_password(admin_data.password),
    )
    db.add(admin)
    try:
        await db.flush()
        await db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email
        await db.rollback()
        raise ConflictError("Admin already exists") from exc

    logger.info("admin_registered", admin_id=admin.id, email=admin.email)
    return admin


async def authenticate_admin(db: AsyncSession, login_data: AdminLogin) -> str:
    """
    Authenticate admin and return JWT access token.
    Raises 401 if credentials are invalid.
    """
    result = await db.execute(select(Admin).where(Admin.email == login_data.email.lower()))
    admin = result.scalar_one_or_none()

    if not admin or not verify_password(login_data.password, admin.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(data={"sub": admin.id, "is_admin": admin.is_admin})
    logger.info("admin_logged_in", admin_id=admin.id)
    return token
