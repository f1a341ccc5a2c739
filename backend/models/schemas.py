"""
Pydantic request / response models for the explain API.

Lengths are Unicode code points (`len()`), not UTF-16 units: an emoji counts
as one character toward MAX_TEXT_LENGTH.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

MAX_TEXT_LENGTH = 1000

TEXT_REQUIRED = "Text is required"
TEXT_TOO_LONG = f"Text too long (max {MAX_TEXT_LENGTH} characters)"


class ExplainRequest(BaseModel):
    """
    Body of POST /api/explain. Keys arrive camelCase from the extension.

    `text` is declared first so its errors are reported ahead of any other
    field's.
    """
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default=None, validate_default=True)
    context: Optional[str] = None
    model: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, alias="maxTokens", gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")

    @field_validator("text", mode="before")
    @classmethod
    def text_present_and_short(cls, v):
        # Length is checked on the raw value, before any trimming.
        if not isinstance(v, str) or not v.strip():
            raise ValueError(TEXT_REQUIRED)
        if len(v) > MAX_TEXT_LENGTH:
            raise ValueError(TEXT_TOO_LONG)
        return v


class Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ExplainResponse(BaseModel):
    explanation: str
    usage: Usage


class ErrorResponse(BaseModel):
    error: str
