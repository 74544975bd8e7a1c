from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Role, User
from app.schemas.user import TokenResponse
from app.utils.security import (
    create_tokens,
    decode_token,
    hash_password,
    verify_password,
)
from core.exceptions.base import BadRequestException, UnauthorizedException
from core.logging import get_logger

logger = get_logger(__name__)


class AuthService:
    """Service for account and token operations."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def create_account(
        self,
        email: str,
        display_name: str,
        role: Role,
        password: Optional[str] = None,
    ) -> User:
        """Create a sign-in account. The profile document is written separately."""
        existing_user = await User.get_by_email(self.db_session, email)
        if existing_user:
            raise BadRequestException(message="Email already registered")

        user = await User.create_user(
            self.db_session,
            email=email,
            display_name=display_name,
            role=role,
            hashed_password=hash_password(password) if password else None,
        )
        logger.info(f"Account created: {user.id} ({role.value})")
        return user

    async def login(self, email: str, password: str) -> Tuple[User, TokenResponse]:
        """Authenticate with email and password."""
        user = await User.get_by_email(self.db_session, email)

        if not user or not user.hashed_password:
            raise UnauthorizedException(message="Invalid email or password")

        if not verify_password(password, user.hashed_password):
            raise UnauthorizedException(message="Invalid email or password")

        if not user.is_active:
            raise UnauthorizedException(message="Account is inactive")

        user.last_login_at = datetime.now(timezone.utc)
        await self.db_session.commit()
        await self.db_session.refresh(user)

        access_token, refresh_token = create_tokens(user.id, user.role.value)
        return user, TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        """Issue a new token pair from a refresh token."""
        payload = decode_token(refresh_token)

        if payload.get("type") != "refresh":
            raise UnauthorizedException(message="Invalid token type")

        user = await User.get_by_id(self.db_session, payload.get("sub"))
        if not user or not user.is_active:
            raise UnauthorizedException(message="User not found or inactive")

        access_token, new_refresh_token = create_tokens(user.id, user.role.value)
        return TokenResponse(
            access_token=access_token,
            refresh_token=new_refresh_token,
        )
