import logging
from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from hojaverde.core.exceptions import DuplicateRecordError
from hojaverde.models.user import User
from hojaverde.schemas.user import Token, UserWithToken, UserCreate, UserInDB
from hojaverde.storage.database import DatabaseStorage, get_storage
from hojaverde.auth.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    ACCESS_TOKEN_EXPIRE_MINUTES,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _authenticate(storage: DatabaseStorage, login: str, password: str) -> User:
    # the form's username field accepts either username or email
    user = storage.get_user_by_username(login) or storage.get_user_by_email(login)
    if not user or not verify_password(password, user.hashed_password):
        logger.warning("Failed login for %s", login)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def _token_for(user: User) -> str:
    access_token_expires = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(data={"sub": user.username}, expires_delta=access_token_expires)


# LOGIN: returns user + token
@router.post("/login", response_model=UserWithToken)
async def login_with_user(
    form_data: OAuth2PasswordRequestForm = Depends(),
    storage: DatabaseStorage = Depends(get_storage),
):
    user = _authenticate(storage, form_data.username, form_data.password)
    return UserWithToken(
        user=UserInDB.model_validate(user),
        access_token=_token_for(user),
        token_type="bearer",
    )


# TOKEN-ONLY: OAuth2 compatibility (for Swagger/OAuth2PasswordBearer)
@router.post("/token", response_model=Token)
async def login_token_only(
    form_data: OAuth2PasswordRequestForm = Depends(),
    storage: DatabaseStorage = Depends(get_storage),
):
    user = _authenticate(storage, form_data.username, form_data.password)
    return {"access_token": _token_for(user), "token_type": "bearer"}


# REGISTER: create user + return user + token
@router.post("/register", response_model=UserWithToken, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    storage: DatabaseStorage = Depends(get_storage),
):
    try:
        db_user = storage.create_user(
            user_data.model_dump(),
            hashed_password=get_password_hash(user_data.password),
        )
    except DuplicateRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return UserWithToken(
        user=UserInDB.model_validate(db_user),
        access_token=_token_for(db_user),
        token_type="bearer",
    )
