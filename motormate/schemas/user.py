"""Schémas Utilisateur / User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

PHONE_PATTERN = r"^[\d\s\-\+\(\)]+$"


class Address(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    street: str | None = Field(None, max_length=200)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    country: str | None = Field(None, max_length=100)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    username: str
    avatar: str | None = None
    auth_method: str
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    address: Address
    created_at: datetime | None = None


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str | None = Field(None, min_length=1, max_length=50)
    last_name: str | None = Field(None, min_length=1, max_length=50)
    phone_number: str | None = Field(None, max_length=20, pattern=PHONE_PATTERN)
    address: Address | None = None


class GoogleUserInfo(BaseModel):
    """Profil renvoye par Google / Profile returned by Google."""

    sub: str
    email: EmailStr
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None
