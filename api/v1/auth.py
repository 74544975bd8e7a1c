from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.user import RefreshTokenRequest, TokenResponse, UserLogin
from app.services.auth_service import AuthService
from core.db import get_db
from core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/token", response_model=TokenResponse)
async def login_for_swagger(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db_session: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    OAuth2 compatible token endpoint for Swagger UI.

    Username field expects email address.
    """
    logger.info(f"OAuth2 login attempt for email: {form_data.username}")
    user, tokens = await AuthService(db_session).login(form_data.username, form_data.password)
    logger.info(f"User logged in successfully: {user.id}")
    return tokens


@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLogin,
    db_session: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """Authenticate with a JSON body of email and password."""
    logger.info(f"Login attempt for email: {data.email}")
    user, tokens = await AuthService(db_session).login(data.email, data.password)
    logger.info(f"User logged in successfully: {user.id}")
    return tokens


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshTokenRequest,
    db_session: AsyncSession = Depends(get_db),
) -> TokenResponse:
    return await AuthService(db_session).refresh_token(data.refresh_token)
