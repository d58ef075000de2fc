"""
История диалога с AI-помощником: хранятся только последние сообщения.
"""
from dataclasses import replace
from datetime import datetime
from typing import Union

from esperanto_bot.config import HISTORY_LIMIT
from esperanto_bot.learning.models import HistoryEntry, MessageRole, UserRecord


def to_role(role: Union[str, MessageRole]) -> MessageRole:
    """Приводит роль к MessageRole."""
    if isinstance(role, MessageRole):
        return role
    try:
        return MessageRole(role)
    except ValueError:
        raise ValueError(f"Неизвестная роль сообщения: {role!r}") from None


def append(record: UserRecord, role: Union[str, MessageRole], content: str,
           now: datetime, limit: int = HISTORY_LIMIT) -> UserRecord:
    """Добавляет сообщение и отбрасывает самые старые сверх лимита."""
    entry = HistoryEntry(role=to_role(role), content=content, timestamp=now)
    history = record.conversation_history + (entry,)
    if len(history) > limit:
        history = history[-limit:]
    return replace(record, conversation_history=history)


def clear(record: UserRecord) -> UserRecord:
    return replace(record, conversation_history=())
