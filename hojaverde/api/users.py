from fastapi import APIRouter, Depends, HTTPException

from hojaverde.core.exceptions import DuplicateRecordError
from hojaverde.models.user import User as UserModel
from hojaverde.schemas.user import User as UserSchema, UserUpdate
from hojaverde.storage.database import DatabaseStorage, get_storage
from hojaverde.auth.security import get_current_active_user, get_password_hash

router = APIRouter()


# --------------------------------------------------------------------
# Get current user -> GET /users/me
# --------------------------------------------------------------------
@router.get("/me", response_model=UserSchema)
def read_user_me(current_user: UserModel = Depends(get_current_active_user)):
    return UserSchema.model_validate(current_user)


# --------------------------------------------------------------------
# Update current user's profile -> PUT /users/me
# --------------------------------------------------------------------
@router.put("/me", response_model=UserSchema)
def update_user_me(
    user: UserUpdate,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: UserModel = Depends(get_current_active_user),
):
    update_data = user.model_dump(exclude_unset=True)

    if "password" in update_data:
        update_data["hashed_password"] = get_password_hash(update_data.pop("password"))

    try:
        db_user = storage.update_user(current_user.id, update_data)
    except DuplicateRecordError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UserSchema.model_validate(db_user)
