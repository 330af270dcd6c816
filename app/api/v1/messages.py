"""Guest-host messaging endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.core.middleware import message_limiter
from app.models.message import Conversation, Message
from app.schemas.message import (
    ConversationCreate,
    ConversationResponse,
    MessageCreate,
    MessageResponse,
)
from app.services import conversation_service

router = APIRouter()


@router.get("/", response_model=list[ConversationResponse])
async def get_conversations(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Conversation]:
    """Get the current user's conversations, newest first."""
    return await conversation_service.list_conversations(db, user_id)


@router.post("/", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def start_conversation(
    request: ConversationCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Conversation:
    """Open (or reopen) a thread with a listing's host."""
    result = await conversation_service.start_conversation(db, user_id, request.listing_id)
    conversation = result.unwrap()
    found = await conversation_service.get_conversation(db, user_id, conversation.id)
    return found.unwrap()


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Conversation:
    """Get a conversation by ID (participants only)."""
    result = await conversation_service.get_conversation(db, user_id, conversation_id)
    return result.unwrap()


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def get_messages(
    conversation_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Message]:
    """Get messages in a conversation, oldest first."""
    result = await conversation_service.get_messages(db, user_id, conversation_id)
    return result.unwrap()


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(message_limiter)],
)
async def send_message(
    conversation_id: UUID,
    message_data: MessageCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Message:
    """Send a message in a conversation."""
    result = await conversation_service.send_message(
        db, user_id, conversation_id, message_data.content
    )
    return result.unwrap()
