from typing import Any

from fastapi import APIRouter, HTTPException

from kidlit.api.deps import IdentityStoreDep, SettingsDep
from kidlit.core.exceptions import RegistrationError
from kidlit.crud import register_student
from kidlit.models import StudentPublic, StudentRegister, StudentsHint

router = APIRouter()


@router.get("", response_model=StudentsHint)
def read_students_hint() -> Any:
    return StudentsHint()


@router.post("", response_model=StudentPublic)
def create_student(
    *,
    store: IdentityStoreDep,
    settings: SettingsDep,
    student_in: StudentRegister | None = None,
) -> Any:
    """
    Register a student: create the login account, then the profile row.
    Not idempotent; repeating a request fails on the duplicate email.
    """
    try:
        return register_student(
            store=store,
            student_in=student_in or StudentRegister(),
            profiles_table=settings.PROFILES_TABLE,
        )
    except RegistrationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
