from typing import Any, Literal

from sqlmodel import Field, SQLModel

STUDENT_ROLE = "student"


# Body of POST /api/students. Fields are optional here so that missing ones
# are reported together as a 400 rather than a schema error.
class StudentRegister(SQLModel):
    name: str | None = None
    email: str | None = None
    grade: Any = None
    password: str | None = None

    def missing_fields(self) -> list[str]:
        return [
            field
            for field in ("name", "email", "password")
            if not getattr(self, field)
        ]


# Row written to the profiles table, keyed by the auth account id
class ProfileRecord(SQLModel):
    id: str
    email: str
    full_name: str
    role: str = STUDENT_ROLE
    grade: int | None = None


class StudentPublic(SQLModel):
    id: str
    email: str
    full_name: str
    grade: int | None = None
    role: str = STUDENT_ROLE


class GenerateContentRequest(SQLModel):
    content: str | None = None


class ChatMessage(SQLModel):
    role: Literal["user", "assistant"]
    content: str


class HealthStatus(SQLModel):
    ok: bool = True


class StudentsHint(SQLModel):
    ok: bool = True
    hint: str = "POST to this same path to create a student"


class ServiceInfo(SQLModel):
    ok: bool = True
    service: str
    routes: list[str] = Field(default_factory=list)
