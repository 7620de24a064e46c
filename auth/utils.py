import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pymongo.database import Database

from config.settings import settings
from database import get_database
from utils import to_object_id

logger = logging.getLogger(__name__)

# --- Security & JWT Configuration ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# --- Password Hashing Functions ---
def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


# --- JWT Tokens ---
def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({
        "exp": expire,
        "type": "access",
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    })
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_token_for_user(user: dict) -> str:
    return create_access_token(data={"sub": str(user["_id"])})


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )


# --- User Authentication Dependencies ---
def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Database = Depends(get_database)):
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired. Please login again.")
    except JWTError:
        logger.warning("Authentication failed - invalid token")
        raise _unauthorized("Invalid token. Please login again.")

    user_id = to_object_id(payload.get("sub"))
    if user_id is None or payload.get("type") != "access":
        raise _unauthorized("Invalid token. Please login again.")

    user = db.users.find_one({"_id": user_id}, {"password": 0})
    if user is None:
        logger.warning("Authentication failed - user not found: %s", user_id)
        raise _unauthorized("Invalid token. User not found.")
    return user


def get_current_admin(user: dict = Depends(get_current_user)):
    if user.get("role") != "admin":
        logger.warning("Admin access denied for user: %s - role: %s", user.get("username"), user.get("role"))
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required. You do not have permission to perform this action.",
        )
    return user
