from schedule_assistant.models.ai import AIModel, AIProvider
from schedule_assistant.models.schedule import ScheduleEvent

__all__ = [
    "AIModel",
    "AIProvider",
    "ScheduleEvent",
]
