"""Prompt/response pairing over an ordered message sequence.

The engine is a three-state machine driven by a single forward cursor:

- ``SCANNING_FOR_USER``: skip anything that is not a user message.  A
  user message opens a new entry.
- ``ACCUMULATING_PROMPT``: consecutive user messages are merged into the
  prompt.
- ``ACCUMULATING_RESPONSE``: consecutive assistant messages are merged
  into the response.  The next user message closes the entry and is
  re-consumed as the start of the next one.

Entry ids prefer the first assistant id, then the first user id, then
``"<conversation_id>:<ordinal>"``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from chat_ledger.etl.core.types import Entry, NormalizedMessage
from chat_ledger.pairing.sequencer import ASSISTANT_ROLE, USER_ROLE

logger = logging.getLogger(__name__)


class PairingState(StrEnum):
    SCANNING_FOR_USER = "scanning_for_user"
    ACCUMULATING_PROMPT = "accumulating_prompt"
    ACCUMULATING_RESPONSE = "accumulating_response"


@dataclass
class _OpenEntry:
    prompt_parts: list[str] = field(default_factory=list)
    response_parts: list[str] = field(default_factory=list)
    user_id: str | None = None
    assistant_id: str | None = None

    def entry_id(self, conversation_id: str, ordinal: int) -> str:
        return self.assistant_id or self.user_id or f"{conversation_id}:{ordinal}"


def _finalize(open_entry: _OpenEntry, conversation_id: str, ordinal: int) -> Entry:
    return Entry(
        id=str(open_entry.entry_id(conversation_id, ordinal)),
        conversation_id=conversation_id,
        prompt="\n".join(open_entry.prompt_parts).strip(),
        response="\n".join(open_entry.response_parts).strip(),
    )


def _close(entries: list[Entry], open_entry: _OpenEntry, conversation_id: str) -> None:
    entry = _finalize(open_entry, conversation_id, len(entries))
    if not entry.prompt:
        # Only reachable with unfiltered input; entries never carry blank prompts.
        logger.debug("Dropping entry with blank prompt in %s", conversation_id)
        return
    entries.append(entry)


def pair_entries(
    conversation_id: str,
    messages: Sequence[NormalizedMessage],
) -> list[Entry]:
    """Collapse an ordered, filtered message sequence into entries.

    *messages* should come from
    :func:`~chat_ledger.pairing.sequencer.sequence_for_pairing`.  Output
    depends only on the input order.
    """
    entries: list[Entry] = []
    state = PairingState.SCANNING_FOR_USER
    current = _OpenEntry()
    cursor = 0

    while cursor < len(messages):
        message = messages[cursor]

        if state is PairingState.SCANNING_FOR_USER:
            if message.role == USER_ROLE:
                current = _OpenEntry(prompt_parts=[message.text], user_id=message.id)
                state = PairingState.ACCUMULATING_PROMPT
            cursor += 1

        elif state is PairingState.ACCUMULATING_PROMPT:
            if message.role == USER_ROLE:
                current.prompt_parts.append(message.text)
                if not current.user_id:
                    current.user_id = message.id
                cursor += 1
            elif message.role == ASSISTANT_ROLE:
                state = PairingState.ACCUMULATING_RESPONSE
            else:
                cursor += 1

        else:
            if message.role == ASSISTANT_ROLE:
                current.response_parts.append(message.text)
                if not current.assistant_id:
                    current.assistant_id = message.id
                cursor += 1
            elif message.role == USER_ROLE:
                # Close the entry; the user message is re-read while scanning.
                _close(entries, current, conversation_id)
                state = PairingState.SCANNING_FOR_USER
            else:
                cursor += 1

    if state is not PairingState.SCANNING_FOR_USER:
        _close(entries, current, conversation_id)

    logger.debug(
        "Paired %d messages into %d entries for %s",
        len(messages),
        len(entries),
        conversation_id,
    )
    return entries
