# sensio_server/adapters/api/schemas.py

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class ToolCall(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ToolList(BaseModel):
    tools: List[str]
