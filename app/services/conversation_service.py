"""Guest/host conversations and messages."""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domain.listing_state import ListingStatus
from app.domain.results import ErrorKind, ServiceResult
from app.models.listing import Listing
from app.models.message import Conversation, Message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


async def get_or_create_conversation(
    db: AsyncSession,
    listing_id: UUID,
    guest_id: str,
    host_id: str,
) -> Conversation:
    """Return the thread for the exact (listing, guest, host) triple.

    Looks the triple up before inserting; nothing at the data layer prevents
    duplicates.
    """
    result = await db.execute(
        select(Conversation).where(
            Conversation.listing_id == listing_id,
            Conversation.guest_id == guest_id,
            Conversation.host_id == host_id,
        )
    )
    conversation = result.scalars().first()
    if conversation:
        return conversation

    conversation = Conversation(listing_id=listing_id, guest_id=guest_id, host_id=host_id)
    db.add(conversation)
    await db.flush()
    logger.info("Conversation %s opened for listing %s", conversation.id, listing_id)
    return conversation


async def start_conversation(
    db: AsyncSession,
    user_id: str,
    listing_id: UUID,
) -> ServiceResult[Conversation]:
    """Guest opens (or reopens) a thread with a listing's host."""
    listing = await db.get(Listing, listing_id)
    if not listing or listing.status != ListingStatus.APPROVED.value:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Listing not found")
    if listing.host_id == user_id:
        return ServiceResult.failure(
            ErrorKind.VALIDATION, "You cannot message yourself about your own listing"
        )

    conversation = await get_or_create_conversation(db, listing.id, user_id, listing.host_id)
    return ServiceResult.success(conversation)


def _is_participant(conversation: Conversation, user_id: str) -> bool:
    return user_id in (conversation.guest_id, conversation.host_id)


async def get_conversation(
    db: AsyncSession,
    user_id: str,
    conversation_id: UUID,
) -> ServiceResult[Conversation]:
    result = await db.execute(
        select(Conversation)
        .options(selectinload(Conversation.listing))
        .where(Conversation.id == conversation_id)
    )
    conversation = result.scalar_one_or_none()
    if not conversation:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Conversation not found")
    if not _is_participant(conversation, user_id):
        return ServiceResult.failure(
            ErrorKind.FORBIDDEN, "You are not a participant in this conversation"
        )
    return ServiceResult.success(conversation)


async def list_conversations(db: AsyncSession, user_id: str) -> list[Conversation]:
    """Threads the user takes part in, newest first."""
    result = await db.execute(
        select(Conversation)
        .options(selectinload(Conversation.listing))
        .where(or_(Conversation.guest_id == user_id, Conversation.host_id == user_id))
        .order_by(Conversation.created_at.desc())
    )
    return list(result.scalars().all())


async def get_messages(
    db: AsyncSession,
    user_id: str,
    conversation_id: UUID,
) -> ServiceResult[list[Message]]:
    """Messages of a thread, oldest first."""
    found = await get_conversation(db, user_id, conversation_id)
    if not found.ok:
        return ServiceResult(error=found.error)

    result = await db.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.asc())
    )
    return ServiceResult.success(list(result.scalars().all()))


async def send_message(
    db: AsyncSession,
    user_id: str,
    conversation_id: UUID,
    content: str,
) -> ServiceResult[Message]:
    found = await get_conversation(db, user_id, conversation_id)
    if not found.ok:
        return ServiceResult(error=found.error)

    content = content.strip()
    if not content:
        return ServiceResult.failure(ErrorKind.VALIDATION, "Message cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        return ServiceResult.failure(
            ErrorKind.VALIDATION,
            f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters",
        )

    message = Message(conversation_id=conversation_id, sender_id=user_id, content=content)
    db.add(message)
    await db.flush()
    await db.refresh(message)
    return ServiceResult.success(message)
