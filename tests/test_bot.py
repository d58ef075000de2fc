"""
Тесты для модуля бота.
"""
import unittest
from unittest.mock import AsyncMock, MagicMock

from esperanto_bot.bot import handlers
from esperanto_bot.bot.formatter import (
    format_answer_feedback,
    format_quiz_question,
    format_quiz_result,
    format_user_profile,
    get_progress_bar
)
from esperanto_bot.bot.keyboards import (
    BUTTON_CHAPTERS,
    build_webapp_url,
    get_chapter_keyboard,
    get_chapters_keyboard,
    get_main_menu_keyboard,
    get_quiz_keyboard
)
from esperanto_bot.config import DEFAULT_WEBAPP_URL
from esperanto_bot.learning.courses import default_catalog
from esperanto_bot.learning.engine import ProgressEngine
from esperanto_bot.learning.errors import InvalidAnswer, UnknownChapter
from esperanto_bot.learning.models import NavigationState, QuizPhase, UserProfile
from esperanto_bot.learning.progress import Level
from esperanto_bot.utils.ai_client import AIResponse, AIServiceError


class TestKeyboards(unittest.TestCase):
    """Тесты для функций создания клавиатур."""

    def test_main_menu_keyboard(self):
        keyboard = get_main_menu_keyboard()
        self.assertEqual(len(keyboard.keyboard), 2)  # 2 ряда кнопок
        self.assertEqual(keyboard.keyboard[0][0].text, BUTTON_CHAPTERS)

    def test_chapters_keyboard(self):
        keyboard = get_chapters_keyboard(default_catalog.chapters)
        # 14 глав по две в ряд и кнопка возврата
        self.assertEqual(len(keyboard.keyboard), 8)
        self.assertTrue(keyboard.keyboard[0][0].text.startswith("1. "))

    def test_chapter_keyboard(self):
        chapter = default_catalog.get_chapter(1)
        callbacks = [
            button.callback_data
            for row in get_chapter_keyboard(chapter).inline_keyboard
            for button in row
        ]
        self.assertIn("section_1_1", callbacks)
        self.assertIn("complete_1", callbacks)

        callbacks = [
            button.callback_data
            for row in get_chapter_keyboard(chapter, completed=True).inline_keyboard
            for button in row
        ]
        self.assertNotIn("complete_1", callbacks)

    def test_quiz_keyboard(self):
        question = default_catalog.quiz_questions[0]
        keyboard = get_quiz_keyboard(question)
        self.assertEqual(len(keyboard.keyboard), len(question.options))
        self.assertEqual(keyboard.keyboard[1][0].text, "B. -o")

    def test_webapp_url(self):
        self.assertEqual(
            build_webapp_url({"chapter": 3, "section": 2}, base_url="https://example.org/app"),
            "https://example.org/app?chapter=3&section=2"
        )
        self.assertEqual(build_webapp_url(base_url="http://insecure.example"), DEFAULT_WEBAPP_URL)


class TestFormatter(unittest.TestCase):
    """Тесты форматирования сообщений."""

    def test_progress_bar(self):
        self.assertEqual(get_progress_bar(34), "■■■□□□□□□□ 34%")
        self.assertEqual(get_progress_bar(100), "■■■■■■■■■■ 100%")

    def test_quiz_result_tiers(self):
        self.assertIn("🏆", format_quiz_result(9, 10))
        self.assertIn("👍", format_quiz_result(7, 10))
        self.assertIn("👌", format_quiz_result(5, 10))
        self.assertIn("🤔", format_quiz_result(1, 10))
        self.assertIn("(0%)", format_quiz_result(0, 0))
        # 2/3 = 66.67%
        self.assertIn("(67%)", format_quiz_result(2, 3))

    def test_quiz_question(self):
        question = default_catalog.quiz_questions[0]
        message = format_quiz_question(question, 1, 10)
        self.assertIn("Вопрос 1/10", message)
        self.assertIn("*D.* -i", message)

    def test_answer_feedback(self):
        question = default_catalog.quiz_questions[0]
        self.assertIn("Правильно", format_answer_feedback(question, True))
        self.assertIn("B. -o", format_answer_feedback(question, False))

    def test_user_profile(self):
        stats = {"level": Level.BEGINNER, "progress": 34, "chapters_completed": 6, "tests_completed": 0}
        message = format_user_profile(UserProfile(first_name="Анна", username="anna"), stats)
        self.assertIn("Изучено глав: 6/14", message)
        self.assertIn("Начинающий", message)
        self.assertIn("@anna", message)


def make_update(text=None, callback_data=None, user_id=1001):
    """Создает поддельное обновление Telegram."""
    update = MagicMock()
    update.effective_user.id = user_id
    update.effective_user.first_name = "Анна"
    update.effective_user.last_name = None
    update.effective_user.username = "anna"
    update.effective_user.language_code = "ru"
    update.effective_chat.id = user_id

    message = MagicMock()
    message.text = text
    message.reply_text = AsyncMock()
    update.message = message
    update.effective_message = message

    if callback_data is not None:
        update.callback_query.data = callback_data
        update.callback_query.answer = AsyncMock()
        update.callback_query.message = message
    return update


def make_context():
    context = MagicMock()
    context.bot.send_chat_action = AsyncMock()
    context.bot.send_message = AsyncMock()
    return context


def sent_texts(update):
    return [call.args[0] for call in update.effective_message.reply_text.call_args_list]


class TestHandlers(unittest.IsolatedAsyncioTestCase):
    """Тесты обработчиков с движком в памяти."""

    def setUp(self):
        self.engine = ProgressEngine()
        self.ai_client = MagicMock()
        self.ai_client.send_message.return_value = AIResponse(
            response="В эсперанто нет исключений", examples=["La hundo"], tips=[]
        )
        handlers.set_engine(self.engine)
        handlers.set_ai_client(self.ai_client)
        self.context = make_context()

    def tearDown(self):
        handlers.set_engine(None)
        handlers.set_ai_client(None)

    async def send(self, text):
        update = make_update(text=text)
        await handlers.handle_message(update, self.context)
        return update

    async def press(self, data):
        update = make_update(callback_data=data)
        await handlers.handle_callback(update, self.context)
        update.callback_query.answer.assert_awaited_once()
        return update

    async def test_start(self):
        update = make_update(text="/start")
        await handlers.start(update, self.context)

        texts = sent_texts(update)
        self.assertEqual(len(texts), 2)
        self.assertIn("Saluton, Анна", texts[0])
        record = self.engine.get_or_create(1001)
        self.assertEqual(record.profile.username, "anna")

    async def test_start_words(self):
        update = await self.send("Saluton")
        self.assertIn("Saluton, Анна", sent_texts(update)[0])

    async def test_chapter_navigation(self):
        update = await self.send(BUTTON_CHAPTERS)
        self.assertIn("Главы курса", sent_texts(update)[0])
        self.assertEqual(self.engine.get_or_create(1001).navigation.state, NavigationState.BROWSING_CHAPTERS)

        await self.send("3. Существительные")
        navigation = self.engine.get_or_create(1001).navigation
        self.assertEqual(navigation.state, NavigationState.BROWSING_SECTIONS)
        self.assertEqual(navigation.current_chapter, 3)

        await self.send("3.2")
        navigation = self.engine.get_or_create(1001).navigation
        self.assertEqual(navigation.state, NavigationState.VIEWING_SECTION)
        self.assertEqual(navigation.current_section, 2)

    async def test_unknown_chapter(self):
        update = await self.send("99")
        self.assertEqual(sent_texts(update), [UnknownChapter.user_message])

    async def test_complete_chapter_callback(self):
        update = await self.press("complete_2")
        self.assertIn("Глава 2 пройдена", sent_texts(update)[0])
        self.assertEqual(self.engine.get_stats(1001)["chapters_completed"], 1)

    async def test_section_callback(self):
        await self.press("section_1_3")
        navigation = self.engine.get_or_create(1001).navigation
        self.assertEqual((navigation.current_chapter, navigation.current_section), (1, 3))

    async def test_quiz_flow(self):
        await self.press("test")
        self.assertEqual(self.engine.get_or_create(1001).quiz.phase, QuizPhase.INTRO)

        update = await self.press("start_test")
        self.assertIn("Вопрос 1/10", sent_texts(update)[0])

        for question in default_catalog.quiz_questions:
            update = await self.send(f"{question.correct_letter}. {question.correct_option}")

        texts = sent_texts(update)
        self.assertIn("Результаты теста", texts[-1])
        self.assertIn("10/10", texts[-1])
        self.assertEqual(self.engine.get_stats(1001)["tests_completed"], 1)
        self.assertEqual(self.engine.get_or_create(1001).quiz.phase, QuizPhase.IDLE)

    async def test_menu_during_quiz(self):
        await self.press("start_test")
        await self.send(BUTTON_CHAPTERS)

        update = await self.send("3. Существительные")
        self.assertNotIn(InvalidAnswer.user_message, sent_texts(update))
        record = self.engine.get_or_create(1001)
        self.assertEqual(record.navigation.current_chapter, 3)
        self.assertEqual(record.quiz.phase, QuizPhase.IDLE)

        await self.press("start_test")
        await self.press("ai_help")
        update = await self.send("Расскажи про окончания")
        self.ai_client.send_message.assert_called_once()
        self.assertIn("В эсперанто нет исключений", sent_texts(update)[0])

    async def test_invalid_quiz_answer(self):
        await self.press("start_test")
        update = await self.send("Z")
        self.assertEqual(sent_texts(update), [InvalidAnswer.user_message])
        self.assertEqual(self.engine.get_or_create(1001).quiz.current_question_index, 0)

    async def test_phrase_lookup(self):
        update = await self.send("спасибо")
        self.assertIn("Dankon", sent_texts(update)[0])
        self.ai_client.send_message.assert_not_called()

    async def test_ai_chat(self):
        await self.press("ai_help")
        update = await self.send("Расскажи про окончания")

        self.assertIn("В эсперанто нет исключений", sent_texts(update)[0])
        self.assertIn("La hundo", sent_texts(update)[0])
        self.context.bot.send_chat_action.assert_awaited_once()

        history = self.engine.get_history(1001)
        self.assertEqual(len(history), 2)
        self.assertEqual(history[0].content, "Расскажи про окончания")

    async def test_ai_error(self):
        self.ai_client.send_message.side_effect = AIServiceError("Сервис не ответил вовремя.")
        update = await self.send("Расскажи про окончания")
        self.assertIn("Сервис не ответил вовремя.", sent_texts(update)[0])
        self.assertEqual(self.engine.get_history(1001), ())

    async def test_reset(self):
        self.engine.complete_chapter(1001, 1)
        update = make_update(text="/reset")
        await handlers.reset_progress(update, self.context)
        self.assertEqual(self.engine.get_stats(1001)["chapters_completed"], 0)

    async def test_profile(self):
        self.engine.complete_chapter(1001, 1)
        update = await self.press("profile")
        self.assertIn("Изучено глав: 1/14", sent_texts(update)[0])


if __name__ == "__main__":
    unittest.main()
