"""
AI API endpoints - one-shot chat, code and image generation for signed-in users.
Every output counts against the caller's daily allowance for its category.
"""

from fastapi import APIRouter, Depends

from ..models import ChatRequest, CodeRequest, ImageRequest, VideoRequest, UserInDB
from ..services import AIGenerationService
from .deps import get_ai_service, get_current_user

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/chat")
async def chat(
    payload: ChatRequest,
    user: UserInDB = Depends(get_current_user),
    service: AIGenerationService = Depends(get_ai_service),
):
    reply = await service.chat(
        user.user_id,
        payload.message,
        payload.model,
        temperature=payload.temperature,
        max_tokens=payload.max_tokens,
        system_prompt=payload.system_prompt,
    )
    return {
        "message": "Chat response generated successfully",
        "data": reply.model_dump(mode="json", by_alias=True),
    }


@router.post("/code")
async def code(
    payload: CodeRequest,
    user: UserInDB = Depends(get_current_user),
    service: AIGenerationService = Depends(get_ai_service),
):
    """Generate code in the requested language."""
    reply = await service.code(user.user_id, payload.message, payload.code_language, payload.model)
    data = reply.model_dump(mode="json", by_alias=True)
    data["codeLanguage"] = payload.code_language
    return {"message": "Code response generated successfully", "data": data}


@router.post("/generate-image")
async def generate_image(
    payload: ImageRequest,
    user: UserInDB = Depends(get_current_user),
    service: AIGenerationService = Depends(get_ai_service),
):
    result = await service.image(user.user_id, payload.prompt, size=payload.size)
    return {
        "message": "Image generated successfully",
        "data": result.model_dump(mode="json", by_alias=True),
    }


@router.post("/generate-video")
async def generate_video(
    payload: VideoRequest,
    user: UserInDB = Depends(get_current_user),
    service: AIGenerationService = Depends(get_ai_service),
):
    """Reserved: checks the video allowance, then answers 501."""
    await service.video(user.user_id, payload.prompt)
