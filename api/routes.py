from fastapi import APIRouter, HTTPException, Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import jwt
from pymongo.database import Database

from api.models import UserLogin, LoginResponse
from api.mongo import get_db
from api.security import create_access_token, decode_access_token, verify_password
from api.user_service import get_user_service
from utils.logger import get_logger

logger = get_logger(__name__)

# Initialize router
auth_router = APIRouter(prefix="/api", tags=["Authentication"])

# Security scheme; missing tokens are reported by get_current_user itself
security = HTTPBearer(auto_error=False)


def get_config(request: Request):
    """Dependency returning the Config the app was built with."""
    return request.app.state.config


def _claims_from_token(token: str, config) -> dict:
    try:
        payload = decode_access_token(token, config)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token has expired")
    except jwt.PyJWTError as e:
        logger.info(f"Rejected token: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")
    return {"id": payload["sub"], "role": payload.get("role", "user")}


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    config=Depends(get_config),
) -> dict:
    """Verify the bearer token and return its identity claims."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _claims_from_token(credentials.credentials, config)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    config=Depends(get_config),
) -> Optional[dict]:
    """Like get_current_user, but anonymous requests yield None."""
    if credentials is None or not credentials.credentials:
        return None
    return _claims_from_token(credentials.credentials, config)


def is_admin(current_user: Optional[dict]) -> bool:
    return bool(current_user) and current_user.get("role") == "admin"


@auth_router.post("/login", response_model=LoginResponse)
async def login(
    user_credentials: UserLogin,
    db: Database = Depends(get_db),
    config=Depends(get_config),
):
    """Authenticate user and return JWT token."""
    service = get_user_service(db)
    try:
        user = await service.get_user_by_email(user_credentials.email)
    except Exception as e:
        logger.error(f"Login lookup failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Login failed: {str(e)}")

    if not user or not verify_password(user_credentials.password, user.get("password")):
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    role = user.get("role") or "user"
    token = create_access_token(data={"sub": str(user["_id"]), "role": role}, config=config)
    logger.info(f"User {user['_id']} logged in")
    return {"message": "Login successful", "token": token, "role": role}
