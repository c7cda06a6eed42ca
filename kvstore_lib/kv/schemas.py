from typing import Any

from pydantic import BaseModel


class CreateRecordPayload(BaseModel):
    key: str
    value: dict[str, Any]


class UpdateRecordPayload(BaseModel):
    value: dict[str, Any]
