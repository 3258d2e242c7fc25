from pydantic import BaseModel


class TaskAnalyticsResponse(BaseModel):
    scope: str
    total: int
    by_status: dict[str, int]
    by_priority: dict[str, int]
    overdue: int
