"""
FastAPI dependencies for authentication and service wiring.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from jose import JWTError, jwt
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from scriptpolish.core.config import settings
from scriptpolish.core.database import get_db
from scriptpolish.core.llm_clients import LLMClient, llm_client
from scriptpolish.services import CorrectionService, PolishService, VoiceAnalyzer


def decode_user_id(token: str) -> Optional[str]:
    """Return the subject of a valid access token, or None."""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience or None,
        )
    except JWTError:
        return None
    return payload.get("sub")


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    try:
        scheme, token = authorization.split()
    except ValueError:
        return None
    return token if scheme.lower() == "bearer" else None


async def get_current_user_id(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """
    Extract and validate user ID from the bearer JWT.

    In development a missing or invalid token falls back to the dev user.
    """
    token = _bearer_token(authorization)
    user_id = decode_user_id(token) if token else None
    if user_id:
        return user_id

    if settings.environment == "development":
        return settings.dev_user_id

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def rate_limit_key(request: Request) -> str:
    """Rate-limit per authenticated user; anonymous callers by address."""
    token = _bearer_token(request.headers.get("Authorization"))
    user_id = decode_user_id(token) if token else None
    return f"user:{user_id}" if user_id else get_remote_address(request)


def get_llm_client() -> LLMClient:
    return llm_client


def get_polish_service(
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
) -> PolishService:
    return PolishService(llm, db)


def get_voice_analyzer(
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
) -> VoiceAnalyzer:
    return VoiceAnalyzer(llm, db)


def get_correction_service(
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
) -> CorrectionService:
    return CorrectionService(llm, db)
