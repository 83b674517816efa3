# FILE: userpatch/routers/user.py

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List

# Pydantic schemas for user creation, reading, and updating
from userpatch.schemas.user import UserCreate, UserRead, UserUpdate
from userpatch.schemas.error import ErrorResponse

# Service functions that interact with the database
from userpatch.services.user import (
    get_all_users,
    get_user,
    create_user as create_user_service,
    update_user as update_user_service,
    patch_user as patch_user_service,
)
from userpatch.errors import NotFound
from userpatch.utils.patch_validation import PatchValidator

# Database session provider
from userpatch.database import get_db

router = APIRouter(tags=["users"])


def get_patch_validator(request: Request) -> PatchValidator:
    """The validator built by create_app()."""
    return request.app.state.patch_validator


async def read_body(request: Request) -> bytes:
    """
    The raw PATCH body. It is decoded by the service only after the user
    is known to exist, so an unknown id is a 404 whatever the body holds.
    """
    return await request.body()


@router.get("/", response_model=List[UserRead])
def list_users(db: Session = Depends(get_db)):
    return get_all_users(db)


@router.get("/{user_id}", response_model=UserRead, responses={404: {"model": ErrorResponse}})
def read_user(user_id: int, db: Session = Depends(get_db)):
    user = get_user(user_id, db)
    if user is None:
        raise NotFound()
    return user


@router.post(
    "/",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """
    Create a user: POST /api/users

    - Returns 201 with the stored record.
    - 409 if the email is already registered.
    """
    return create_user_service(user, db)


@router.put("/{user_id}", response_model=UserRead, responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
def update_user(user_id: int, user_data: UserUpdate, db: Session = Depends(get_db)):
    """
    Replace all mutable fields of a user: PUT /api/users/{user_id}

    Every field must be supplied. The email cannot be changed.
    """
    return update_user_service(user_id, user_data, db)


@router.patch("/{user_id}", response_model=UserRead, responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
def patch_user(
    user_id: int,
    body: bytes = Depends(read_body),
    db: Session = Depends(get_db),
    validator: PatchValidator = Depends(get_patch_validator),
):
    """
    Partially update a user: PATCH /api/users/{user_id}

    - Keys missing from the body leave their column unchanged.
    - null clears the column (phone becomes null, other fields their empty value).
    - Values are checked against the field's rules; all violations come back together.
    - An empty body ({}) is rejected with 400.
    - An unknown user is a 404 before the body is decoded.
    - Returns the updated user as stored.
    """
    return patch_user_service(user_id, body, db, validator)
