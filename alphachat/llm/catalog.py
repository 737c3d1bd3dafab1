"""
Static catalog of the chat models offered for temporary sessions.
"""

from typing import Dict, List
from pydantic import BaseModel


class ModelInfo(BaseModel):
    """Public description of a selectable model."""
    id: str
    name: str
    description: str
    provider: str  # display name of the backend
    recommended: bool = False


MODEL_CATALOG: List[ModelInfo] = [
    ModelInfo(
        id="gpt-3.5-turbo",
        name="GPT-3.5 Turbo",
        description="Fast and efficient for most conversations",
        provider="OpenAI",
        recommended=True,
    ),
    ModelInfo(
        id="gpt-4",
        name="GPT-4",
        description="More capable but slower, best for complex tasks",
        provider="OpenAI",
    ),
    ModelInfo(
        id="gpt-4-turbo",
        name="GPT-4 Turbo",
        description="Latest GPT-4 with improved speed and capabilities",
        provider="OpenAI",
    ),
    ModelInfo(
        id="gemini-pro",
        name="Gemini Pro",
        description="Google's advanced AI model",
        provider="Google",
    ),
    ModelInfo(
        id="deepseek-chat",
        name="DeepSeek Chat",
        description="Specialized for coding and technical discussions",
        provider="DeepSeek",
    ),
]

MODELS_BY_ID: Dict[str, ModelInfo] = {m.id: m for m in MODEL_CATALOG}

SUPPORTED_MODEL_IDS = frozenset(MODELS_BY_ID)

DEFAULT_MODEL_ID = "gpt-3.5-turbo"
