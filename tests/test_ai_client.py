"""
Тесты для клиента AI-помощника.
"""
import json
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

import requests

from esperanto_bot.learning.models import HistoryEntry, MessageRole
from esperanto_bot.utils.ai_client import (
    SYSTEM_PROMPT,
    AIServiceError,
    AssistantClient,
    parse_response_content,
    sanitize_input
)


def make_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = json.dumps(payload or {})
    response.json.return_value = payload or {}
    return response


def completion(content):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
    }


class TestSanitizeInput(unittest.TestCase):

    def test_removes_scripts_and_handlers(self):
        text = 'Saluton <script>alert(1)</script> javascript:go() <b onclick=x>'
        cleaned = sanitize_input(text)
        self.assertNotIn("<script>", cleaned)
        self.assertNotIn("javascript:", cleaned)
        self.assertNotIn("onclick=", cleaned)
        self.assertTrue(cleaned.startswith("Saluton"))

    def test_cuts_long_input(self):
        self.assertEqual(len(sanitize_input("a" * 5000)), 4000)
        self.assertEqual(sanitize_input("   "), "")


class TestParseResponse(unittest.TestCase):

    def test_json_content(self):
        content = json.dumps({
            "response": "Saluton значит привет",
            "examples": ["Saluton, amiko!"],
            "tips": ["Ударение на предпоследний слог"],
            "difficulty": "intermediate"
        })
        response = parse_response_content(content)
        self.assertEqual(response.response, "Saluton значит привет")
        self.assertEqual(response.examples, ["Saluton, amiko!"])
        self.assertEqual(response.difficulty, "intermediate")

    def test_plain_text_content(self):
        response = parse_response_content("Просто текст")
        self.assertEqual(response.response, "Просто текст")
        self.assertEqual(response.examples, [])


class TestAssistantClient(unittest.TestCase):
    """Тесты обращения к API с подмененной сессией requests."""

    def setUp(self):
        self.session = MagicMock()
        self.client = AssistantClient(
            api_key="sk-test-key",
            base_url="https://api.example.com/v1/",
            model="test-model",
            session=self.session
        )

    def test_send_message(self):
        self.session.post.return_value = make_response(
            payload=completion(json.dumps({"response": "Dankon = спасибо", "tips": ["tip"]}))
        )
        history = [
            HistoryEntry(MessageRole.USER, "Saluton", datetime.now(timezone.utc)),
            HistoryEntry(MessageRole.ASSISTANT, "Привет!", datetime.now(timezone.utc)),
        ]

        response = self.client.send_message("Что значит Dankon?", history)

        self.assertEqual(response.response, "Dankon = спасибо")
        self.assertEqual(response.tips, ["tip"])
        self.assertEqual(response.usage["total_tokens"], 15)

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], "https://api.example.com/v1/chat/completions")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk-test-key")
        messages = kwargs["json"]["messages"]
        self.assertEqual(messages[0], {"role": "system", "content": SYSTEM_PROMPT})
        self.assertEqual(messages[1], {"role": "user", "content": "Saluton"})
        self.assertEqual(messages[2], {"role": "assistant", "content": "Привет!"})
        self.assertEqual(messages[-1], {"role": "user", "content": "Что значит Dankon?"})
        self.assertEqual(kwargs["json"]["response_format"], {"type": "json_object"})

    def test_not_configured(self):
        client = AssistantClient(api_key="your_openai_api_key", session=self.session)
        self.assertFalse(client.is_configured())
        with self.assertRaises(AIServiceError):
            client.send_message("Saluton")
        self.session.post.assert_not_called()

    def test_empty_message(self):
        with self.assertRaises(AIServiceError):
            self.client.send_message("<script>x</script>")
        self.session.post.assert_not_called()

    def test_error_statuses(self):
        for status, text in ((401, "авторизации"), (403, "Доступ запрещен"),
                             (429, "перегружен"), (503, "сервера"), (418, "неизвестная")):
            self.session.post.return_value = make_response(status_code=status)
            with self.assertRaises(AIServiceError) as ctx:
                self.client.send_message("Saluton")
            self.assertIn(text, str(ctx.exception))

    def test_timeout(self):
        self.session.post.side_effect = requests.exceptions.Timeout()
        with self.assertRaises(AIServiceError):
            self.client.send_message("Saluton")

    def test_network_error(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError()
        with self.assertRaises(AIServiceError) as ctx:
            self.client.send_message("Saluton")
        self.assertIn("Ошибка сети", str(ctx.exception))

    def test_body_is_not_json(self):
        response = make_response()
        response.text = "<html>Bad Gateway</html>"
        response.json.side_effect = ValueError("Expecting value")
        self.session.post.return_value = response

        with self.assertRaises(AIServiceError) as ctx:
            self.client.send_message("Saluton")
        self.assertIn("некорректный ответ", str(ctx.exception))

    def test_empty_choices(self):
        self.session.post.return_value = make_response(payload={"choices": []})
        with self.assertRaises(AIServiceError):
            self.client.send_message("Saluton")


if __name__ == "__main__":
    unittest.main()
