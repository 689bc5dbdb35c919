"""User directory: phone-keyed users with an append-only login history."""

import logging
import re
from datetime import UTC, datetime

from src.core.config import constants
from src.core.db_client import DatabaseClient, RecordNotFoundError, UniqueConstraintError, sanitize_param
from src.core.errors import InvalidPhoneError
from src.core.logging import span
from src.domain.user import User


logger = logging.getLogger(__name__)

_PHONE_PATTERN = re.compile(rf"^\d{{{constants.PHONE_DIGITS}}}$")


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _phone_filter(phone: str) -> str:
    return f'phone = "{sanitize_param(phone)}"'


def validate_phone(phone: str) -> str:
    """Return ``phone`` if it is exactly 10 digits, else raise InvalidPhoneError."""
    if not phone or not _PHONE_PATTERN.match(phone):
        msg = "Phone number must be exactly 10 digits"
        raise InvalidPhoneError(msg)
    return phone


async def find_user_by_phone(*, db: DatabaseClient, phone: str) -> User | None:
    """Look up a user by normalized phone number."""
    record = await db.get_first_record(collection="users", filter_query=_phone_filter(phone))
    return User.model_validate(record) if record else None


async def create_user(*, db: DatabaseClient, phone: str) -> User:
    """Insert a new user whose login history starts with this login.

    Raises:
        UniqueConstraintError: If a user with this phone already exists
    """
    with span("user_service.create_user"):
        now = _now()
        record = await db.create_record(
            collection="users",
            data={
                "phone": phone,
                "login_times": [now],
                "created_at": now,
                "updated_at": now,
            },
        )
        logger.info("Created user", extra={"phone": phone})
        return User.model_validate(record)


async def add_login_time(*, db: DatabaseClient, phone: str) -> User:
    """Append the current time to an existing user's login history.

    The push and the ``updated_at`` bump run as one storage statement.

    Raises:
        RecordNotFoundError: If no user exists for the phone
    """
    with span("user_service.add_login_time"):
        now = _now()
        updated = await db.append_to_list(
            collection="users",
            filter_query=_phone_filter(phone),
            field="login_times",
            value=now,
            data={"updated_at": now},
        )
        if updated == 0:
            msg = f"User with phone {phone} not found"
            raise RecordNotFoundError(msg)

        user = await find_user_by_phone(db=db, phone=phone)
        if user is None:
            msg = f"User with phone {phone} not found"
            raise RecordNotFoundError(msg)

        logger.info("Recorded login", extra={"phone": phone, "login_count": len(user.login_times)})
        return user


async def find_or_create_and_add_login_time(*, db: DatabaseClient, phone: str) -> User:
    """Record a successful login, creating the user on first login.

    An existing user gets one timestamp appended. A first login inserts the
    user; if a concurrent first login from another device wins the insert,
    the unique index rejects ours and the login is recorded as an append.

    Raises:
        InvalidPhoneError: If the phone is not exactly 10 digits
    """
    with span("user_service.find_or_create_and_add_login_time"):
        validate_phone(phone)

        try:
            return await add_login_time(db=db, phone=phone)
        except RecordNotFoundError:
            pass

        try:
            return await create_user(db=db, phone=phone)
        except UniqueConstraintError:
            logger.info("Concurrent first login detected, retrying as update", extra={"phone": phone})
            return await add_login_time(db=db, phone=phone)


async def count_users(*, db: DatabaseClient) -> int:
    """Total number of users."""
    return await db.count_records(collection="users")


async def get_sample_users(*, db: DatabaseClient, limit: int = constants.SAMPLE_USERS_LIMIT) -> list[User]:
    """Most recently created users, newest first."""
    records = await db.list_records(collection="users", per_page=limit, sort="created_at DESC, id DESC")
    return [User.model_validate(record) for record in records]
