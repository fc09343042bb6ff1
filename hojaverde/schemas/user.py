from typing import Optional, Literal
from pydantic import BaseModel, EmailStr, ConfigDict, Field, field_validator
from hojaverde.schemas.base import TimestampSchema

Role = Literal["consumer", "producer", "validator"]


class UserBase(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = None
    location: Optional[str] = None
    role: Role = "consumer"


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = None
    location: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)

    @field_validator("email", "full_name", "password")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class UserInDB(TimestampSchema, UserBase):
    id: int
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class User(UserInDB):
    pass


class UserWithToken(BaseModel):
    user: User
    access_token: str
    token_type: str

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    username: Optional[str] = None
