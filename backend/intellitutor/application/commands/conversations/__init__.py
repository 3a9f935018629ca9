"""Conversation commands."""

from .create_conversation import CreateConversationCommand, CreateConversationHandler
from .delete_conversation import DeleteConversationCommand, DeleteConversationHandler
from .update_title import UpdateTitleCommand, UpdateTitleHandler

__all__ = [
    "CreateConversationCommand",
    "CreateConversationHandler",
    "DeleteConversationCommand",
    "DeleteConversationHandler",
    "UpdateTitleCommand",
    "UpdateTitleHandler",
]
