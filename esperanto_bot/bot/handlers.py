"""
Модуль для обработчиков Telegram бота.
Обработчики только переводят сообщения в команды движка прогресса и отвечают пользователю.
"""
import asyncio
import logging
import re
from typing import Optional

from telegram import Update
from telegram.constants import ChatAction
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters
)

from esperanto_bot.config import START_COMMANDS
from esperanto_bot.database.stores import create_store
from esperanto_bot.learning.engine import ProgressEngine
from esperanto_bot.learning.errors import ProgressEngineError
from esperanto_bot.learning.models import MessageRole, NavigationState, QuizPhase, UserProfile
from esperanto_bot.utils.ai_client import AIServiceError, AssistantClient
from esperanto_bot.bot.formatter import (
    format_ai_response,
    format_answer_feedback,
    format_chapter_list,
    format_quiz_question,
    format_quiz_result,
    format_section_content,
    format_section_list,
    format_user_profile,
    format_welcome,
    get_progress_bar
)
from esperanto_bot.bot.keyboards import (
    BUTTON_AI,
    BUTTON_BACK_TO_CHAPTERS,
    BUTTON_BACK_TO_MENU,
    BUTTON_CHAPTERS,
    BUTTON_PROFILE,
    BUTTON_RETRY_TEST,
    BUTTON_TEST,
    get_back_to_menu_keyboard,
    get_chapter_keyboard,
    get_chapters_keyboard,
    get_main_menu_inline_keyboard,
    get_main_menu_keyboard,
    get_quiz_finished_keyboard,
    get_quiz_keyboard,
    get_section_keyboard,
    get_test_intro_keyboard,
    get_webapp_keyboard
)

logger = logging.getLogger(__name__)

SECTION_RE = re.compile(r"^(\d+)\.(\d+)$")
CHAPTER_RE = re.compile(r"^(\d+)(?:\.\s.*)?$")

HELP_TEXT = (
    "*Команды бота:*\n\n"
    "/start - Главное меню\n"
    "/chapters - Список глав\n"
    "/test - Тест на знание эсперанто\n"
    "/profile - Ваш прогресс\n"
    "/webapp - Открыть веб-приложение\n"
    "/reset - Сбросить прогресс\n"
    "/help - Эта справка\n\n"
    "Отправьте номер главы (например, 3) или раздела (например, 3.2), "
    "чтобы открыть его. Любой другой вопрос об эсперанто получит AI-помощник."
)

_engine: Optional[ProgressEngine] = None
_ai_client: Optional[AssistantClient] = None


def get_engine() -> ProgressEngine:
    """Движок прогресса с хранилищем из конфигурации."""
    global _engine
    if _engine is None:
        _engine = ProgressEngine(create_store())
    return _engine


def set_engine(engine: Optional[ProgressEngine]) -> None:
    global _engine
    _engine = engine


def get_ai_client() -> AssistantClient:
    global _ai_client
    if _ai_client is None:
        _ai_client = AssistantClient()
    return _ai_client


def set_ai_client(client: Optional[AssistantClient]) -> None:
    global _ai_client
    _ai_client = client


async def _reply(update: Update, text: str, reply_markup=None) -> None:
    await update.effective_message.reply_text(text, parse_mode="Markdown", reply_markup=reply_markup)


# Команды

async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обрабатывает команду /start."""
    user = update.effective_user
    engine = get_engine()

    engine.get_or_create(user.id, UserProfile.from_telegram(user))
    engine.set_navigation(user.id, NavigationState.BROWSING)
    stats = engine.get_stats(user.id)

    await _reply(update, format_welcome(user.first_name, stats), get_main_menu_inline_keyboard())
    await update.effective_message.reply_text(
        "Или воспользуйтесь меню ниже:",
        reply_markup=get_main_menu_keyboard()
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply(update, HELP_TEXT, get_main_menu_keyboard())


async def show_main_menu(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    get_engine().set_navigation(update.effective_user.id, NavigationState.BROWSING)
    await update.effective_message.reply_text(
        "Главное меню. Выберите пункт:",
        reply_markup=get_main_menu_keyboard()
    )


async def show_chapters(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Показывает список глав курса."""
    engine = get_engine()
    engine.set_navigation(update.effective_user.id, NavigationState.BROWSING_CHAPTERS)
    chapters = engine.catalog.chapters
    await _reply(update, format_chapter_list(chapters), get_chapters_keyboard(chapters))


async def show_chapter(update: Update, context: ContextTypes.DEFAULT_TYPE, chapter_id: int) -> None:
    """Показывает разделы главы."""
    user_id = update.effective_user.id
    engine = get_engine()

    chapter = engine.catalog.get_chapter(chapter_id)
    record = engine.set_navigation(user_id, NavigationState.BROWSING_SECTIONS, chapter_id)
    completed = chapter_id in record.stats.completed_chapter_ids

    await _reply(update, format_section_list(chapter, completed), get_chapter_keyboard(chapter, completed))


async def show_section(update: Update, context: ContextTypes.DEFAULT_TYPE,
                       chapter_id: int, section_id: int) -> None:
    """Показывает материал раздела."""
    engine = get_engine()
    section = engine.catalog.get_section(chapter_id, section_id)
    engine.set_navigation(update.effective_user.id, NavigationState.VIEWING_SECTION, chapter_id, section_id)

    chapter = engine.catalog.get_chapter(chapter_id)
    await _reply(update, format_section_content(chapter, section), get_section_keyboard(chapter_id, section_id))


async def complete_chapter(update: Update, context: ContextTypes.DEFAULT_TYPE, chapter_id: int) -> None:
    user_id = update.effective_user.id
    record = get_engine().complete_chapter(user_id, chapter_id)

    await _reply(
        update,
        f"✅ Глава {chapter_id} пройдена!\n\n"
        f"Общий прогресс: {get_progress_bar(record.stats.progress)}\n"
        f"Уровень: {record.stats.level.label}",
        get_back_to_menu_keyboard()
    )


async def show_profile(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Показывает профиль и прогресс пользователя."""
    user = update.effective_user
    engine = get_engine()
    record = engine.get_or_create(user.id, UserProfile.from_telegram(user))

    await _reply(
        update,
        format_user_profile(record.profile, record.stats.summary(), engine.catalog.total_chapters),
        get_back_to_menu_keyboard("📊 Подробная статистика")
    )


async def show_webapp(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _reply(
        update,
        "🌐 *Веб-приложение*\n\nВ приложении доступны все главы, упражнения и тесты.",
        get_webapp_keyboard()
    )


async def reset_progress(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Сбрасывает прогресс пользователя."""
    get_engine().reset_user_progress(update.effective_user.id)
    await update.effective_message.reply_text(
        "🔄 Ваш прогресс сброшен. Можно начать обучение заново!",
        reply_markup=get_main_menu_keyboard()
    )


# Тест

async def show_test_intro(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    engine = get_engine()
    engine.open_quiz_intro(update.effective_user.id)
    await _reply(
        update,
        "📝 *Тест на знание эсперанто*\n\n"
        f"Тест состоит из {len(engine.catalog.quiz_questions)} вопросов. "
        "Для каждого вопроса выберите один вариант ответа.",
        get_test_intro_keyboard()
    )


async def start_test(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user_id = update.effective_user.id
    engine = get_engine()
    engine.start_quiz(user_id)

    if engine.finish_quiz_if_due(user_id):
        await finish_test(update, context)
        return
    await send_current_question(update, context)


async def send_current_question(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Отправляет текущий вопрос теста."""
    engine = get_engine()
    index, question = engine.current_question(update.effective_user.id)
    total = len(engine.catalog.quiz_questions)
    await _reply(update, format_quiz_question(question, index + 1, total), get_quiz_keyboard(question))


async def handle_quiz_answer(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str) -> None:
    """Проверяет ответ и переходит к следующему вопросу или к результатам."""
    user_id = update.effective_user.id
    engine = get_engine()

    question, outcome = engine.answer_current_question(user_id, text)
    await _reply(update, format_answer_feedback(question, outcome.is_correct))

    if engine.finish_quiz_if_due(user_id):
        await finish_test(update, context)
    else:
        await send_current_question(update, context)


async def finish_test(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    result = get_engine().complete_quiz(update.effective_user.id)
    await _reply(
        update,
        format_quiz_result(result.score, result.total_questions),
        get_quiz_finished_keyboard()
    )


# AI-помощник

async def start_ai_chat(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    get_engine().set_navigation(update.effective_user.id, NavigationState.AI_CHAT)
    await _reply(
        update,
        "🧠 *AI-помощник*\n\n"
        "Задайте любой вопрос об эсперанто: грамматика, слова, произношение, культура.",
        get_back_to_menu_keyboard()
    )


async def handle_ai_message(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str) -> None:
    """Отправляет вопрос AI-помощнику вместе с историей диалога."""
    user_id = update.effective_user.id
    engine = get_engine()
    client = get_ai_client()

    await context.bot.send_chat_action(chat_id=update.effective_chat.id, action=ChatAction.TYPING)
    history = engine.get_history(user_id)
    response = await asyncio.to_thread(client.send_message, text, history)

    engine.append_message(user_id, MessageRole.USER, text)
    engine.append_message(user_id, MessageRole.ASSISTANT, response.response)

    await _reply(update, format_ai_response(response), get_back_to_menu_keyboard())


# Маршрутизация

async def _route_message(update: Update, context: ContextTypes.DEFAULT_TYPE, text: str) -> None:
    lowered = text.lower()
    if lowered in [cmd.lower() for cmd in START_COMMANDS]:
        await start(update, context)
        return

    if text == BUTTON_CHAPTERS or text == BUTTON_BACK_TO_CHAPTERS:
        await show_chapters(update, context)
        return
    if text == BUTTON_AI:
        await start_ai_chat(update, context)
        return
    if text == BUTTON_TEST:
        await show_test_intro(update, context)
        return
    if text == BUTTON_RETRY_TEST:
        await start_test(update, context)
        return
    if text == BUTTON_PROFILE:
        await show_profile(update, context)
        return
    if text == BUTTON_BACK_TO_MENU:
        await show_main_menu(update, context)
        return

    engine = get_engine()
    record = engine.get_or_create(update.effective_user.id)

    if record.navigation.state is NavigationState.QUIZ and record.quiz.phase is QuizPhase.IN_PROGRESS:
        await handle_quiz_answer(update, context, text)
        return

    match = SECTION_RE.match(text)
    if match:
        await show_section(update, context, int(match.group(1)), int(match.group(2)))
        return

    match = CHAPTER_RE.match(text)
    if match:
        await show_chapter(update, context, int(match.group(1)))
        return

    if record.navigation.state is not NavigationState.AI_CHAT:
        phrase = engine.catalog.find_phrase(text)
        if phrase:
            await _reply(update, f"💬 *{phrase.esperanto}* - {phrase.russian}")
            return

    await handle_ai_message(update, context, text)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обрабатывает текстовые сообщения."""
    text = (update.message.text or "").strip()
    if not text:
        return

    try:
        await _route_message(update, context, text)
    except ProgressEngineError as e:
        logger.info(f"Ошибка обучения у пользователя {update.effective_user.id}: {e}")
        await update.message.reply_text(e.user_message)
    except AIServiceError as e:
        await update.message.reply_text(f"❌ {e}", reply_markup=get_back_to_menu_keyboard())


async def _route_callback(update: Update, context: ContextTypes.DEFAULT_TYPE, data: str) -> None:
    if data == "chapters":
        await show_chapters(update, context)
    elif data == "ai_help":
        await start_ai_chat(update, context)
    elif data == "test":
        await show_test_intro(update, context)
    elif data == "start_test":
        await start_test(update, context)
    elif data == "profile":
        await show_profile(update, context)
    elif data == "back_to_menu":
        await show_main_menu(update, context)
    elif data.startswith("chapter_"):
        await show_chapter(update, context, int(data.split("_")[1]))
    elif data.startswith("section_"):
        _, chapter_id, section_id = data.split("_")
        await show_section(update, context, int(chapter_id), int(section_id))
    elif data.startswith("complete_"):
        await complete_chapter(update, context, int(data.split("_")[1]))
    else:
        logger.warning(f"Неизвестный callback: {data}")


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обрабатывает нажатия на инлайн-кнопки."""
    query = update.callback_query
    await query.answer()

    try:
        await _route_callback(update, context, query.data or "")
    except ProgressEngineError as e:
        logger.info(f"Ошибка обучения у пользователя {update.effective_user.id}: {e}")
        await query.message.reply_text(e.user_message)


def setup_handlers(application: Application) -> None:
    """Регистрирует команды, сообщения и инлайн-кнопки."""
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("chapters", show_chapters))
    application.add_handler(CommandHandler("test", show_test_intro))
    application.add_handler(CommandHandler("profile", show_profile))
    application.add_handler(CommandHandler("webapp", show_webapp))
    application.add_handler(CommandHandler("reset", reset_progress))
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))
    application.add_handler(CallbackQueryHandler(handle_callback))
