"""Conversation ledger — per-user question/answer threads with expiry.

Every lookup is scoped by owner: a conversation that exists but belongs to
someone else raises the same NotFound as one that does not exist.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from docinsight.db.models import Conversation, Message, MessageKind, SourceAttribution
from docinsight.db.repository import Repository
from docinsight.errors import NotFound
from docinsight.utils.logging import get_logger

_logger = get_logger(__name__)

DEFAULT_RETENTION = timedelta(hours=24)

_TITLE_MAX = 50
_TITLE_CUT = 47


def make_title(question: str) -> str:
    """Title a conversation after its first question (max 50 characters)."""
    if len(question) > _TITLE_MAX:
        return question[:_TITLE_CUT] + "..."
    return question


class ConversationLedger:
    """Create, extend, read and expire conversations.

    Args:
        repo:      Repository bound to this worker's connection.
        retention: Conversations not updated for longer than this are swept.
        clock:     Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        repo: Repository,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repo = repo
        self._retention = retention
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create(
        self,
        owner_id: int,
        question: str,
        answer: str,
        sources: list[SourceAttribution],
    ) -> Conversation:
        """Start a conversation with its first question and answer."""
        now = self._now()
        conversation = Conversation(
            owner_id=owner_id,
            title=make_title(question),
            created_at=now,
            updated_at=now,
        )
        conversation.id = self._repo.add_conversation(conversation)
        conversation.messages = self._add_exchange(conversation.id, question, answer, sources, now)
        conversation.message_count = len(conversation.messages)

        _logger.info("conversation_created", conversation_id=conversation.id, owner_id=owner_id)
        return conversation

    def append(
        self,
        conversation_id: int,
        owner_id: int,
        question: str,
        answer: str,
        sources: list[SourceAttribution],
    ) -> None:
        """Add a question/answer pair and refresh the update timestamp.

        Raises:
            NotFound: If *owner_id* has no conversation *conversation_id*.
        """
        self.get(conversation_id, owner_id)
        now = self._now()
        self._add_exchange(conversation_id, question, answer, sources, now)
        self._repo.touch_conversation(conversation_id, now)

    def list(self, owner_id: int) -> list[Conversation]:
        """Return *owner_id*'s conversations, most recently updated first."""
        return self._repo.list_conversations(owner_id)

    def get(self, conversation_id: int, owner_id: int) -> Conversation:
        """Return a conversation with its messages.

        Raises:
            NotFound: If absent or owned by someone else.
        """
        conversation = self._repo.get_conversation(conversation_id, owner_id)
        if conversation is None:
            raise NotFound("Conversation", conversation_id)
        return conversation

    def delete(self, conversation_id: int, owner_id: int) -> None:
        """Delete a conversation and its messages.

        Raises:
            NotFound: If absent or owned by someone else.
        """
        self.get(conversation_id, owner_id)
        self._repo.delete_conversation(conversation_id)
        _logger.info("conversation_deleted", conversation_id=conversation_id, owner_id=owner_id)

    def cleanup_expired(self, now: datetime | None = None) -> int:
        """Delete every conversation last updated before the retention cutoff.

        Meant to run once a day (see ``docinsight cleanup``). *now* defaults
        to the ledger clock.

        Returns:
            Number of conversations deleted.
        """
        cutoff = _format((now or self._clock()) - self._retention)
        deleted = self._repo.delete_conversations_updated_before(cutoff)
        if deleted:
            _logger.info("conversations_expired", deleted=deleted, cutoff=cutoff)
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add_exchange(
        self,
        conversation_id: int,
        question: str,
        answer: str,
        sources: list[SourceAttribution],
        now: str,
    ) -> list[Message]:
        messages = [
            Message(
                conversation_id=conversation_id,
                kind=MessageKind.QUESTION,
                content=question,
                created_at=now,
            ),
            Message(
                conversation_id=conversation_id,
                kind=MessageKind.ANSWER,
                content=answer,
                sources=list(sources),
                created_at=now,
            ),
        ]
        for message in messages:
            self._repo.add_message(message)
        return messages

    def _now(self) -> str:
        return _format(self._clock())


def _format(moment: datetime) -> str:
    """Render *moment* as a sortable UTC ISO-8601 string."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")
