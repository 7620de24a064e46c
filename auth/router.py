import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from database import get_database
from utils import success_response, utcnow
from . import schemas, utils
from .rate_limit import rate_limit_auth

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED, dependencies=[Depends(rate_limit_auth)])
async def register(user: schemas.UserCreate, db: Database = Depends(get_database)):
    logger.info("Registration attempt for username: %s", user.username)

    existing = await run_in_threadpool(db.users.find_one, {"username": user.username})
    if existing:
        logger.warning("Registration failed - user already exists: %s", user.username)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")
    if user.email and await run_in_threadpool(db.users.find_one, {"email": user.email}):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username or email already exists")

    now = utcnow()
    user_data = {
        "username": user.username,
        "email": user.email,
        "password": await run_in_threadpool(utils.get_password_hash, user.password),
        "role": "user",
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = await run_in_threadpool(db.users.insert_one, user_data)
    except DuplicateKeyError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username or email already exists")
    user_data["_id"] = result.inserted_id

    logger.info("User registered successfully: %s", user.username)
    return success_response(
        {
            "user": schemas.UserInfo.from_document(user_data).model_dump(),
            "token": schemas.Token(access_token=utils.create_token_for_user(user_data)).model_dump(),
        },
        "Account created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login", dependencies=[Depends(rate_limit_auth)])
async def login(form_data: schemas.UserLogin, db: Database = Depends(get_database)):
    logger.info("Login attempt for username: %s", form_data.username)

    # Find user by username or email
    user = await run_in_threadpool(
        db.users.find_one, {"$or": [{"username": form_data.username}, {"email": form_data.username}]}
    )
    if not user or not await run_in_threadpool(utils.verify_password, form_data.password, user["password"]):
        logger.warning("Login failed for username: %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials. Please check your username and password.",
        )

    logger.info("User logged in successfully: %s", user["username"])
    return success_response(
        {
            "user": schemas.UserInfo.from_document(user).model_dump(),
            "token": schemas.Token(access_token=utils.create_token_for_user(user)).model_dump(),
        },
        f"Welcome back, {user['username']}!",
    )


@router.get("/me")
async def read_users_me(current_user: dict = Depends(utils.get_current_user)):
    profile = schemas.UserInfo.from_document(current_user).model_dump()
    profile["created_at"] = current_user.get("created_at")
    return success_response(profile, "User profile retrieved successfully")


@router.post("/logout")
async def logout(current_user: dict = Depends(utils.get_current_user)):
    # Tokens are stateless; the client discards its copy.
    logger.info("User logged out: %s", current_user["username"])
    return success_response(None, "Logged out successfully")


@router.get("/health")
async def auth_health():
    return success_response(
        {"service": "Authentication Service", "status": "healthy", "timestamp": utcnow()},
        "Auth service is running",
    )
