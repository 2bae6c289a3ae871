from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CarRead(BaseModel):
    id: str
    owner_id: int
    title: str
    description: str
    images: List[str] = []
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime

    # JSON keys are camelCase: ownerId, createdAt, updatedAt
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CarPage(BaseModel):
    cars: List[CarRead]
    total_pages: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(BaseModel):
    message: str
