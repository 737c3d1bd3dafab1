"""
Stateless AI generation models (chat, code, image, video).

Nothing here is persisted except the usage record each output leaves behind.
"""

from typing import Literal, Optional
from pydantic import Field

from .session import CamelModel, ModelId, DEFAULT_SYSTEM_PROMPT
from ..llm.catalog import DEFAULT_MODEL_ID

ImageSize = Literal["256x256", "512x512", "1024x1024", "1792x1024", "1024x1792"]


class ChatRequest(CamelModel):
    message: str
    model: ModelId = DEFAULT_MODEL_ID
    temperature: float = Field(0.7, ge=0, le=2)
    max_tokens: int = Field(1000, ge=1, le=4096)
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, min_length=1)


class CodeRequest(CamelModel):
    message: str
    code_language: str = Field("javascript", min_length=1, max_length=40)
    model: ModelId = DEFAULT_MODEL_ID


class ImageRequest(CamelModel):
    prompt: str = Field(..., min_length=1, max_length=4000)
    size: ImageSize = "1024x1024"


class VideoRequest(CamelModel):
    prompt: str = Field(..., min_length=1)


class AIReply(CamelModel):
    """A text output and what it cost."""
    response: str
    category: str
    model: str
    tokens: int = 0
    processing_time: float = 0.0  # milliseconds


class ImageResult(CamelModel):
    image_url: str
    prompt: str
    revised_prompt: Optional[str] = None
    model: str
    processing_time: float = 0.0
