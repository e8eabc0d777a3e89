"""Conversation threads built from answered questions."""

from docinsight.conversations.ledger import ConversationLedger, make_title

__all__ = ["ConversationLedger", "make_title"]
