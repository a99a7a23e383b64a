"""AI agent (prompt profile) model."""

from pydantic import BaseModel, Field


class AIAgent(BaseModel):
    """A named system prompt used for AI-generated reports."""

    model_config = {"extra": "forbid"}

    id: str
    name: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)
