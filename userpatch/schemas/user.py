"""
userpatch/schemas/user.py

Defines the Pydantic schemas for user creation, full update, partial update and read.

'email' is the identity of a user besides its 'id': it is accepted on creation
and returned on read, but UserUpdate and UserPatch have no such field, so a
client cannot change it (extra keys in the body are ignored).
"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from userpatch.constants import (
    BIO_MAX_LENGTH,
    DEFAULT_ROLE,
    NAME_MAX_LENGTH,
    PHONE_MAX_LENGTH,
    USER_ROLES,
)
from userpatch.utils.patch_validation import Gte, Lte, MaxLength, MinLength, NonNull, OneOf, PatchRules
from userpatch.utils.tristate import UNSET, TriState

Role = Literal["admin", "user", "guest"]


class UserCreate(BaseModel):
    """
    For creating a new user. Only name, email and age are required;
    the remaining fields fall back to the column defaults.
    """
    name: str = Field(min_length=2, max_length=NAME_MAX_LENGTH)
    email: EmailStr
    age: int = Field(ge=0, le=150)
    phone: Optional[str] = Field(default=None, min_length=10, max_length=PHONE_MAX_LENGTH)
    active: bool = True
    bio: str = Field(default="", max_length=BIO_MAX_LENGTH)
    role: Role = DEFAULT_ROLE
    score: float = Field(default=0.0, ge=0, le=100)


class UserUpdate(BaseModel):
    """
    Full replacement of every mutable field (PUT). All fields are required;
    'phone' may be sent as null to clear it.
    """
    name: str = Field(min_length=2, max_length=NAME_MAX_LENGTH)
    age: int = Field(ge=0, le=150)
    phone: Optional[str] = Field(min_length=10, max_length=PHONE_MAX_LENGTH)
    active: bool
    bio: str = Field(max_length=BIO_MAX_LENGTH)
    role: Role
    score: float = Field(ge=0, le=100)


class UserPatch(BaseModel):
    """
    Partial update (PATCH). Each field is a TriState:
      - missing from the body => column untouched
      - null                  => column cleared (NULL for phone, zero value otherwise)
      - a value               => column overwritten, after the field's rules pass

    Decoding is strict, so "42" is not accepted for age and 42 is not accepted for name.
    """
    model_config = ConfigDict(strict=True)

    name: Annotated[TriState[str], PatchRules(NonNull(), MinLength(2), MaxLength(NAME_MAX_LENGTH))] = UNSET
    age: Annotated[TriState[int], PatchRules(Gte(0), Lte(150))] = UNSET
    phone: Annotated[TriState[str], PatchRules(MinLength(10), MaxLength(PHONE_MAX_LENGTH))] = UNSET
    active: TriState[bool] = UNSET
    bio: Annotated[TriState[str], PatchRules(MaxLength(BIO_MAX_LENGTH))] = UNSET
    role: Annotated[TriState[str], PatchRules(OneOf(*USER_ROLES))] = UNSET
    score: Annotated[TriState[float], PatchRules(Gte(0), Lte(100))] = UNSET


class UserRead(BaseModel):
    """
    Schema for returning user data to clients, straight from the ORM row.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    age: int
    phone: Optional[str] = None
    active: bool
    bio: str
    # may be "" after a PATCH cleared it, so not constrained to Role
    role: str
    score: float
