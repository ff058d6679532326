import logging
import re
from typing import Any

from kidlit.core.exceptions import IdentityStoreError, RegistrationError
from kidlit.core.identity import IdentityStore
from kidlit.models import STUDENT_ROLE, ProfileRecord, StudentPublic, StudentRegister

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def parse_grade(value: Any) -> int | None:
    """Read an integer grade from the start of ``value``.

    ``"5"``, ``5`` and ``"5th"`` all give 5. Anything without a leading
    integer (None, booleans, ``"fifth"``) gives None instead of failing.
    """
    if value is None or isinstance(value, bool):
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def register_student(
    *,
    store: IdentityStore | None,
    student_in: StudentRegister,
    profiles_table: str = "profiles",
) -> StudentPublic:
    """Create the auth account, then the profile row pointing at it.

    Missing fields are reported before anything else, even when no store is
    configured. If the profile insert fails the account is deleted again so
    no account is left without a profile. Should that delete also fail, the
    orphaned id is logged and the profile error is still reported.
    """
    missing = student_in.missing_fields()
    if missing:
        raise RegistrationError(
            400,
            f"name, email and password are required (missing: {', '.join(missing)})",
        )

    if store is None:
        logger.error("Registration requested but no identity store is configured")
        raise RegistrationError(500, "Server configuration error")

    grade = parse_grade(student_in.grade)

    try:
        user_id = store.create_user(
            email=student_in.email,
            password=student_in.password,
            email_confirm=True,
            user_metadata={"full_name": student_in.name},
        )
    except IdentityStoreError as e:
        logger.info("Account creation rejected for %s: %s", student_in.email, e.message)
        raise RegistrationError(400, e.message) from e

    if not user_id:
        logger.error("Identity store returned no account for %s", student_in.email)
        raise RegistrationError(500, "Failed to create user")

    profile = ProfileRecord(
        id=user_id,
        email=student_in.email,
        full_name=student_in.name,
        role=STUDENT_ROLE,
        grade=grade,
    )
    try:
        store.insert_row(profiles_table, profile.model_dump())
    except IdentityStoreError as e:
        logger.warning("Profile insert failed for account %s: %s", user_id, e.message)
        _delete_orphaned_account(store, user_id)
        raise RegistrationError(400, e.message) from e
    except Exception as e:
        logger.exception("Profile insert failed for account %s", user_id)
        _delete_orphaned_account(store, user_id)
        raise RegistrationError(400, str(e) or e.__class__.__name__) from e

    return StudentPublic(
        id=user_id,
        email=profile.email,
        full_name=profile.full_name,
        grade=grade,
        role=STUDENT_ROLE,
    )


def _delete_orphaned_account(store: IdentityStore, user_id: str) -> None:
    try:
        store.delete_user(user_id)
    except Exception as e:
        logger.error(
            "Could not delete account %s after a failed profile insert; it has no profile: %s",
            user_id,
            getattr(e, "message", None) or e,
        )
    else:
        logger.info("Deleted account %s after a failed profile insert", user_id)
