from enum import Enum
from typing import Tuple
from pydantic import BaseModel, Field

class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

PRIORITY_RANK = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}

class Company(BaseModel):
    id: str
    name: str
    legal_names: Tuple[str, ...] = Field(default=(), alias="legalNames")
    priority: Priority = Priority.MEDIUM

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "acme",
                "name": "Acme Games",
                "legalNames": ["Acme Inc", "Acme Corp"],
                "priority": "high"
            }
        }
