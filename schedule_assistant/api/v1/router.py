from fastapi import APIRouter

from schedule_assistant.api.v1.endpoints import schedules

api_router = APIRouter()
api_router.include_router(schedules.router)
