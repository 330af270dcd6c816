"""Guest-host conversations."""

from app.domain.results import ErrorKind
from app.services import conversation_service
from tests.conftest import GUEST_ID, HOST_ID, OTHER_ID


async def test_start_conversation_is_idempotent(db, make_listing):
    listing = await make_listing()

    first = await conversation_service.start_conversation(db, GUEST_ID, listing.id)
    second = await conversation_service.start_conversation(db, GUEST_ID, listing.id)

    assert first.value.id == second.value.id
    assert first.value.host_id == HOST_ID


async def test_host_cannot_message_own_listing(db, make_listing):
    listing = await make_listing()

    result = await conversation_service.start_conversation(db, HOST_ID, listing.id)

    assert result.error.kind == ErrorKind.VALIDATION


async def test_unapproved_listing_cannot_be_messaged(db, make_listing):
    listing = await make_listing(status="snoozed")

    result = await conversation_service.start_conversation(db, GUEST_ID, listing.id)

    assert result.error.kind == ErrorKind.NOT_FOUND


async def test_participants_exchange_messages(db, make_listing):
    listing = await make_listing()
    conversation = (await conversation_service.start_conversation(db, GUEST_ID, listing.id)).value

    sent = await conversation_service.send_message(db, GUEST_ID, conversation.id, "  Is parking included?  ")
    reply = await conversation_service.send_message(db, HOST_ID, conversation.id, "Yes, one spot.")

    assert sent.value.content == "Is parking included?"
    assert reply.value.sender_id == HOST_ID

    messages = (await conversation_service.get_messages(db, HOST_ID, conversation.id)).value
    assert {m.content for m in messages} == {"Is parking included?", "Yes, one spot."}
    assert len(await conversation_service.list_conversations(db, HOST_ID)) == 1


async def test_outsider_cannot_read_or_write(db, make_listing):
    listing = await make_listing()
    conversation = (await conversation_service.start_conversation(db, GUEST_ID, listing.id)).value

    read = await conversation_service.get_messages(db, OTHER_ID, conversation.id)
    write = await conversation_service.send_message(db, OTHER_ID, conversation.id, "hello")

    assert read.error.kind == ErrorKind.FORBIDDEN
    assert write.error.kind == ErrorKind.FORBIDDEN


async def test_message_length_rules(db, make_listing):
    listing = await make_listing()
    conversation = (await conversation_service.start_conversation(db, GUEST_ID, listing.id)).value

    empty = await conversation_service.send_message(db, GUEST_ID, conversation.id, "   ")
    too_long = await conversation_service.send_message(db, GUEST_ID, conversation.id, "x" * 5001)
    at_limit = await conversation_service.send_message(db, GUEST_ID, conversation.id, "x" * 5000)

    assert empty.error.kind == ErrorKind.VALIDATION
    assert too_long.error.kind == ErrorKind.VALIDATION
    assert at_limit.ok
