"""
userpatch/services/user.py

Handles user-level operations (list, get, create, full update, partial update).
Service functions raise the exceptions from userpatch.errors; routers don't
translate anything themselves. Any SQLAlchemy error, on a read or a write,
is rolled back and surfaced as StorageFailure.
"""

import logging

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from userpatch.constants import IMMUTABLE_USER_FIELDS
from userpatch.errors import DuplicateEmail, NotFound, StorageFailure, malformed_input_from
from userpatch.models.user import User
from userpatch.schemas.user import UserCreate, UserPatch, UserUpdate
from userpatch.services.patch import UpdateMapping, build_update_mapping
from userpatch.utils.patch_validation import PatchValidator

logger = logging.getLogger(__name__)


def _storage_failure(action: str, db: Session, e: SQLAlchemyError) -> StorageFailure:
    db.rollback()
    logger.error(f"Failed to {action}: {e}")
    return StorageFailure(str(e))


def get_all_users(db: Session) -> list[User]:
    """
    Fetch and return all User records, oldest first.
    """
    try:
        return db.query(User).order_by(User.id).all()
    except SQLAlchemyError as e:
        raise _storage_failure("list users", db, e)


def get_user(user_id: int, db: Session) -> User | None:
    """
    Return a User by ID, or None if not found.
    """
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        raise _storage_failure(f"read user id={user_id}", db, e)


def get_user_by_email(email: str, db: Session) -> User | None:
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise _storage_failure(f"read user {email}", db, e)


def create_user(user_data: UserCreate, db: Session) -> User:
    """
    Create a new User record. Raises DuplicateEmail if the address is taken.
    """
    if get_user_by_email(user_data.email, db):
        raise DuplicateEmail()

    new_user = User(**user_data.model_dump())
    db.add(new_user)
    try:
        db.commit()
        db.refresh(new_user)
    except IntegrityError:
        # lost a race with another insert of the same email
        db.rollback()
        raise DuplicateEmail()
    except SQLAlchemyError as e:
        raise _storage_failure(f"create user {user_data.email}", db, e)

    logger.info(f"Created user id={new_user.id}")
    return new_user


def update_columns(user_id: int, mapping: UpdateMapping, db: Session) -> int:
    """
    Apply `mapping` to the row with this ID in a single UPDATE and commit.
    Returns the number of rows affected; 0 means the row does not exist.
    """
    try:
        rows = (
            db.query(User)
            .filter(User.id == user_id)
            .update(mapping, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        raise _storage_failure(f"update user id={user_id}", db, e)
    return rows


def _reload(user_id: int, db: Session) -> User:
    # expire first so values written by storage (defaults, triggers) are re-read
    db.expire_all()
    user = get_user(user_id, db)
    if user is None:
        raise NotFound()
    return user


def decode_patch(body: bytes | str) -> UserPatch:
    """Decode a raw JSON body into a UserPatch; any decode error is MalformedInput."""
    try:
        return UserPatch.model_validate_json(body)
    except ValidationError as e:
        raise malformed_input_from(e.errors())


def update_user(user_id: int, user_data: UserUpdate, db: Session) -> User:
    """
    Replace every mutable column of an existing user (PUT).
    The row count of the UPDATE is the existence check.
    """
    mapping = {k: v for k, v in user_data.model_dump().items() if k not in IMMUTABLE_USER_FIELDS}
    if update_columns(user_id, mapping, db) == 0:
        raise NotFound()
    logger.info(f"Replaced user id={user_id}")
    return _reload(user_id, db)


def patch_user(user_id: int, body: bytes | str, db: Session, validator: PatchValidator) -> User:
    """
    Partially update a user from the raw JSON request body:

      1) 404 if the user does not exist (the body is not even decoded)
      2) decode the body into TriState fields; bad JSON or a wrong type is a 400
      3) run the TriState field rules, collecting every violation
      4) build the sparse update mapping; an empty one is rejected
      5) apply it with one UPDATE keyed by id; 0 rows means the user
         vanished since step 1, which is also a 404
      6) reload and return the stored row
    """
    if get_user(user_id, db) is None:
        raise NotFound()

    patch = decode_patch(body)
    validator.validate(patch)
    mapping = build_update_mapping(patch, User.__table__, immutable=IMMUTABLE_USER_FIELDS)

    if update_columns(user_id, mapping, db) == 0:
        raise NotFound()
    logger.info(f"Patched user id={user_id}, columns={sorted(mapping)}")
    return _reload(user_id, db)
