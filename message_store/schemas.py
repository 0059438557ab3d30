"""
Pydantic schemas for message records.

This module contains:
- The Message value object and its id generation policy
- Decoding of raw store records back into Message instances
"""

import uuid
from enum import Enum
from typing import Any, Iterable, List, Mapping, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from message_store.errors import MessageDecodeError


class IdPolicy(str, Enum):
    """When Message.create assigns a freshly generated id."""

    ALWAYS = "always"          # ignore any supplied id
    IF_MISSING = "if_missing"  # reuse a supplied id, generate otherwise
    WHEN_TEST = "when_test"    # generate only for test records


def generate_id() -> str:
    return str(uuid.uuid4())


class Message(BaseModel):
    """
    One message record.

    Immutable once built. Persisted as a flat record with the keys
    ``id``, ``text`` and ``test``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Unique message identifier")
    # Older records store the payload under 'message'
    text: str = Field(
        ...,
        validation_alias=AliasChoices("text", "message"),
        description="Message text, stored verbatim",
    )
    is_test: bool = Field(
        False,
        validation_alias=AliasChoices("test", "is_test"),
        serialization_alias="test",
        description="Record was produced in a test/ephemeral context",
    )

    @classmethod
    def create(
        cls,
        payload: Mapping[str, Any],
        is_test: bool = False,
        id_policy: IdPolicy = IdPolicy.IF_MISSING,
    ) -> "Message":
        """
        Build a Message from a caller payload.

        Args:
            payload: Mapping with at least 'text' and optionally 'id'
            is_test: Whether the record comes from a test context
            id_policy: Decides between the supplied id and a generated one

        Raises:
            KeyError: payload has no 'text'
            ValueError: id_policy is WHEN_TEST, is_test is False and no id was supplied
        """
        text = payload["text"]
        supplied_id = payload.get("id")
        id_policy = IdPolicy(id_policy)

        if id_policy is IdPolicy.ALWAYS:
            message_id = generate_id()
        elif id_policy is IdPolicy.WHEN_TEST:
            if is_test:
                message_id = generate_id()
            elif supplied_id:
                message_id = supplied_id
            else:
                raise ValueError("id is required for non-test messages")
        else:
            message_id = supplied_id or generate_id()

        return cls(id=message_id, text=text, is_test=is_test)

    def to_item(self) -> dict:
        """Flat record written to the store."""
        return self.model_dump(by_alias=True)


def decode_record(record: Any) -> Message:
    """
    Decode one raw store record into a Message.

    Raises:
        MessageDecodeError: record is not a mapping or fails validation
    """
    if not isinstance(record, Mapping):
        raise MessageDecodeError(record, f"expected a mapping, got {type(record).__name__}")
    try:
        return Message.model_validate(dict(record))
    except ValidationError as e:
        raise MessageDecodeError(record, str(e)) from e


def decode_records(records: Iterable[Any]) -> Tuple[List[Message], List[MessageDecodeError]]:
    """Decode every record, collecting failures instead of stopping at the first."""
    messages: List[Message] = []
    errors: List[MessageDecodeError] = []
    for record in records:
        try:
            messages.append(decode_record(record))
        except MessageDecodeError as e:
            errors.append(e)
    return messages, errors
