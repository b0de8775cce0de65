from .message import Message, MESSAGE_STATUSES, MESSAGE_PRIORITIES

__all__ = ["Message", "MESSAGE_STATUSES", "MESSAGE_PRIORITIES"]
