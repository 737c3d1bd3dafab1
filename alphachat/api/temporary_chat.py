"""
Temporary Chat API endpoints - ephemeral AI conversations with TTL expiry.
Sessions can be used anonymously; authenticated creators own their sessions.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Request, status

from ..llm.catalog import MODEL_CATALOG
from ..models import (
    CreateSessionRequest,
    SendMessageRequest,
    SettingsUpdate,
    ExtendExpiryRequest,
    UserInDB,
)
from ..services import TemporaryChatService
from .deps import (
    get_chat_service,
    get_optional_user,
    get_current_user,
    require_admin,
    get_client_ip,
)

router = APIRouter(prefix="/api/temporary-chat", tags=["temporary-chat"])


def _json(model, **kwargs) -> dict:
    return model.model_dump(mode="json", by_alias=True, **kwargs)


@router.post("/create", status_code=status.HTTP_201_CREATED)
async def create_session(
    request: Request,
    payload: Optional[CreateSessionRequest] = None,
    user: Optional[UserInDB] = Depends(get_optional_user),
    service: TemporaryChatService = Depends(get_chat_service),
):
    """
    Create a new temporary chat session.

    Returns:
        The new session id, title, settings, expiry and creation time
    """
    payload = payload or CreateSessionRequest()
    session = await service.create_session(
        user_id=user.user_id if user else None,
        title=payload.title,
        ai_model=payload.ai_model,
        temperature=payload.temperature,
        max_tokens=payload.max_tokens,
        system_prompt=payload.system_prompt,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    data = _json(session)
    return {
        "message": "Temporary chat session created successfully",
        "session": {
            "sessionId": data["sessionId"],
            "title": data["title"],
            "settings": data["settings"],
            "expiresAt": data["expiresAt"],
            "createdAt": data["createdAt"],
        },
    }


@router.get("/models")
async def list_models():
    """Get the catalog of selectable AI models."""
    return {
        "message": "Available AI models retrieved successfully",
        "models": [_json(m) for m in MODEL_CATALOG],
    }


@router.get("/user/sessions")
async def list_user_sessions(
    user: UserInDB = Depends(get_current_user),
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Get the caller's active temporary sessions, most recent first."""
    sessions = await service.list_user_sessions(user.user_id)
    return {
        "message": "User temporary sessions retrieved successfully",
        "sessions": [_json(s) for s in sessions],
        "count": len(sessions),
    }


@router.post("/admin/cleanup")
async def cleanup_expired_sessions(
    admin: UserInDB = Depends(require_admin),
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Run the expired-session sweep now (admin only)."""
    deleted = await service.cleanup_expired()
    return {"message": "Cleanup completed successfully", "deletedCount": deleted}


@router.post("/{session_id}/message")
async def send_message(
    session_id: str,
    payload: SendMessageRequest,
    service: TemporaryChatService = Depends(get_chat_service),
):
    """
    Send a message and get the AI response.

    Returns:
        The assistant reply and the session's running totals
    """
    result = await service.send_message(session_id, payload.message)
    data = _json(result)
    return {
        "message": "Message sent successfully",
        "sessionId": data["sessionId"],
        "lastMessage": data["lastMessage"],
        "totalMessages": data["totalMessages"],
        "totalTokens": data["totalTokens"],
    }


@router.get("/{session_id}")
async def get_session(
    session_id: str,
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Get the full session: messages, settings, metadata and timestamps."""
    session = await service.get_session(session_id)
    return _json(session, exclude={"user_id", "is_active"})


@router.put("/{session_id}/settings")
async def update_settings(
    session_id: str,
    payload: SettingsUpdate,
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Partially update model, temperature, max tokens or system prompt."""
    session = await service.update_settings(session_id, payload.model_dump(exclude_none=True))
    return {"message": "Settings updated successfully", "settings": _json(session.settings)}


@router.put("/{session_id}/extend")
async def extend_expiry(
    session_id: str,
    payload: Optional[ExtendExpiryRequest] = None,
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Reset the session expiry to now + hours (1 to 168, default 24)."""
    hours = payload.hours if payload else 24
    session = await service.extend_expiry(session_id, hours)
    return {
        "message": "Session expiry extended successfully",
        "expiresAt": _json(session)["expiresAt"],
    }


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Delete a session permanently."""
    deleted_id = await service.delete_session(session_id)
    return {"message": "Session deleted successfully", "sessionId": deleted_id}


@router.get("/{session_id}/stats")
async def get_session_stats(
    session_id: str,
    service: TemporaryChatService = Depends(get_chat_service),
):
    """Get message/token totals and timestamps of a session."""
    stats = await service.get_session_stats(session_id)
    return {"message": "Session statistics retrieved successfully", "stats": _json(stats)}
