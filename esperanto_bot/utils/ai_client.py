"""
Клиент AI-помощника по эсперанто.
Работает с OpenAI-совместимым API chat/completions.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import requests

from esperanto_bot.config import (
    MAX_INPUT_LENGTH,
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    OPENAI_MAX_TOKENS,
    OPENAI_MODEL,
    OPENAI_PLACEHOLDER_KEYS,
    OPENAI_TEMPERATURE,
    OPENAI_TIMEOUT,
)
from esperanto_bot.learning.models import HistoryEntry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """Вы - AI-помощник для изучения языка эсперанто. Ваша задача:

1. Помогать пользователям изучать эсперанто
2. Отвечать на вопросы о грамматике, словаре и культуре эсперанто
3. Предоставлять примеры и упражнения
4. Быть терпеливым и поддерживающим учителем
5. Отвечать на русском языке, но включать примеры на эсперанто

Правила:
- Всегда отвечайте дружелюбно и профессионально
- Предоставляйте точную информацию об эсперанто
- Включайте практические примеры
- Если не знаете ответ, честно скажите об этом

Отвечайте в формате JSON:
{
  "response": "ваш ответ здесь",
  "examples": ["пример 1", "пример 2"],
  "tips": ["совет 1", "совет 2"],
  "difficulty": "beginner|intermediate|advanced"
}"""

FALLBACK_TEXT = "Извините, не удалось получить ответ."

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_JS_PROTOCOL_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)


class AIServiceError(Exception):
    """Ошибка обращения к AI-помощнику. Текст пригоден для показа пользователю."""


@dataclass
class AIResponse:
    """Ответ AI-помощника."""
    response: str
    examples: List[str] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    difficulty: str = "beginner"
    usage: Optional[Dict[str, int]] = None


def sanitize_input(text: str, max_length: int = MAX_INPUT_LENGTH) -> str:
    """Удаляет скрипты и обработчики событий, обрезает длину."""
    text = _SCRIPT_RE.sub("", text or "")
    text = _JS_PROTOCOL_RE.sub("", text)
    text = _EVENT_HANDLER_RE.sub("", text)
    return text.strip()[:max_length]


def parse_response_content(content: str, usage: Optional[Dict[str, int]] = None) -> AIResponse:
    """Разбирает JSON-ответ модели. Если это не JSON, возвращает текст как есть."""
    try:
        parsed = json.loads(content or "{}")
    except json.JSONDecodeError:
        return AIResponse(response=content or FALLBACK_TEXT, usage=usage)

    if not isinstance(parsed, dict):
        return AIResponse(response=content or FALLBACK_TEXT, usage=usage)

    return AIResponse(
        response=parsed.get("response") or FALLBACK_TEXT,
        examples=list(parsed.get("examples") or []),
        tips=list(parsed.get("tips") or []),
        difficulty=parsed.get("difficulty") or "beginner",
        usage=usage,
    )


class AssistantClient:
    """Клиент для работы с моделью через chat/completions."""

    def __init__(
        self,
        api_key: Optional[str] = OPENAI_API_KEY,
        base_url: str = OPENAI_BASE_URL,
        model: str = OPENAI_MODEL,
        timeout: int = OPENAI_TIMEOUT,
        max_tokens: int = OPENAI_MAX_TOKENS,
        temperature: float = OPENAI_TEMPERATURE,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.session = session or requests.Session()

        if not self.is_configured():
            logger.warning("OpenAI API ключ не настроен, AI-помощник недоступен")

    def is_configured(self) -> bool:
        return bool(self.api_key) and self.api_key not in OPENAI_PLACEHOLDER_KEYS

    def build_messages(self, message: str, history: Iterable[HistoryEntry] = ()) -> List[Dict[str, str]]:
        """Системный промпт, история диалога и новое сообщение."""
        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        messages.extend({"role": entry.role.value, "content": entry.content} for entry in history)
        messages.append({"role": "user", "content": message})
        return messages

    def send_message(self, message: str, history: Iterable[HistoryEntry] = ()) -> AIResponse:
        """
        Отправляет сообщение модели.

        Args:
            message: Вопрос пользователя
            history: Предыдущие сообщения диалога

        Returns:
            AIResponse с ответом, примерами и советами

        Raises:
            AIServiceError: при ошибке конфигурации, сети или API
        """
        if not self.is_configured():
            raise AIServiceError("OpenAI API не настроен. Проверьте конфигурацию.")

        sanitized = sanitize_input(message)
        if not sanitized:
            raise AIServiceError("Сообщение не может быть пустым")

        data = {
            "model": self.model,
            "messages": self.build_messages(sanitized, history),
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions", headers=headers, json=data, timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning("Таймаут при обращении к OpenAI")
            raise AIServiceError("Сервис не ответил вовремя. Попробуйте позже.")
        except requests.exceptions.RequestException as e:
            logger.error(f"Ошибка сети при обращении к OpenAI: {e}")
            raise AIServiceError("Ошибка сети. Проверьте подключение к интернету.")

        self._raise_for_status(response)

        try:
            payload = response.json()
        except ValueError:
            logger.error(f"Ответ OpenAI не является JSON: {response.text[:200]}")
            raise AIServiceError("Получен некорректный ответ от OpenAI")
        content = self._extract_content(payload)
        if not content:
            raise AIServiceError("Получен некорректный ответ от OpenAI")

        logger.debug(f"Получен ответ от OpenAI: {content[:50]}...")
        return parse_response_content(content, payload.get("usage"))

    @staticmethod
    def _extract_content(payload: Dict[str, Any]) -> Optional[str]:
        choices = payload.get("choices") or []
        if not choices:
            return None
        return (choices[0].get("message") or {}).get("content")

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        status = response.status_code
        if status == 200:
            return

        logger.error(f"Ошибка OpenAI: {status} - {response.text[:200]}")
        if status == 401:
            raise AIServiceError("Ошибка авторизации API. Проверьте настройки API ключа.")
        if status == 403:
            raise AIServiceError("Доступ запрещен. Проверьте права API ключа.")
        if status == 429:
            raise AIServiceError("Сервис временно перегружен. Попробуйте позже.")
        if status >= 500:
            raise AIServiceError("Ошибка сервера OpenAI. Попробуйте позже.")
        raise AIServiceError("Произошла неизвестная ошибка при обращении к AI")
