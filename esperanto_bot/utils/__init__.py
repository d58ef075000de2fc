"""
Вспомогательные модули: клиент AI-помощника.
"""

from esperanto_bot.utils.ai_client import (
    AIResponse,
    AIServiceError,
    AssistantClient
)

__all__ = [
    'AIResponse',
    'AIServiceError',
    'AssistantClient'
]
