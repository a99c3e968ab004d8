from enum import Enum


class ScheduleIntent(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    QUERY = "query"


class ScheduleCategory(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    MEETING = "meeting"
    REMINDER = "reminder"


class SchedulePriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AIProviderKind(str, Enum):
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    MOCK = "mock"
