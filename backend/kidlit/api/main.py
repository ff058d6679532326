from fastapi import APIRouter

from kidlit.api.routes import generate, students, utils

api_router = APIRouter()
api_router.include_router(utils.router, tags=["utils"])
api_router.include_router(generate.router, tags=["generate"])
api_router.include_router(students.router, prefix="/students", tags=["students"])
