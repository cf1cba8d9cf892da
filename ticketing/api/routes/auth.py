"""
Admin authentication endpoints: register and login.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ticketing.core.config import Settings, get_settings
from ticketing.db.session import get_db
from ticketing.schemas.admin import AdminCreate, AdminResponse, AdminLogin, Token
from ticketing.services.auth_service import register_admin, authenticate_admin

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AdminResponse, status_code=status.HTTP_201_CREATED)
async def register(
    admin_data: AdminCreate,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Register an admin account. Disabled once ADMIN_REGISTRATION_OPEN is false."""
    if not settings.ADMIN_REGISTRATION_OPEN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Registration is closed")
    return await register_admin(db, admin_data)


@router.post("/login", response_model=Token)
async def login(login_data: AdminLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    token = await authenticate_admin(db, login_data)
    return Token(access_token=token)
