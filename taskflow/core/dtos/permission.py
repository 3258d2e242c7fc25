from pydantic import BaseModel
from typing import Optional


class PermissionsResponse(BaseModel):
    role: Optional[str]
    display_name: Optional[str]
    badge_color: str
    permissions: dict[str, list[str]]
    matrix: dict[str, dict[str, list[str]]]
