from pydantic import BaseModel, Field
from typing import Optional, List


class AssistantOption(BaseModel):
    label: str
    name: str
    description: Optional[str] = None


class PredictionRequest(BaseModel):
    question: str
    chat_id: Optional[str] = None
    session_id: Optional[str] = None
    tools: List[str] = Field(default_factory=list)
