"""
Модуль для создания клавиатур и меню в Telegram.
"""
from typing import Iterable, Optional
from urllib.parse import urlencode

from telegram import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    WebAppInfo,
)

from esperanto_bot.config import DEFAULT_WEBAPP_URL, WEBAPP_URL
from esperanto_bot.learning.courses import Chapter, QuizQuestion

# Тексты кнопок главного меню
BUTTON_CHAPTERS = "📚 Главы"
BUTTON_AI = "🧠 AI-помощник"
BUTTON_TEST = "📝 Тест"
BUTTON_PROFILE = "👤 Мой профиль"
BUTTON_BACK_TO_MENU = "🔙 Назад в меню"
BUTTON_BACK_TO_CHAPTERS = "🔙 К списку глав"
BUTTON_RETRY_TEST = "🔄 Пройти тест снова"
BACK_BUTTONS = (BUTTON_BACK_TO_MENU, BUTTON_BACK_TO_CHAPTERS)


def build_webapp_url(params: Optional[dict] = None, base_url: Optional[str] = WEBAPP_URL) -> str:
    """Адрес веб-приложения. Принимается только https, иначе адрес по умолчанию."""
    base = base_url if base_url and base_url.startswith("https://") else DEFAULT_WEBAPP_URL
    query = urlencode(params or {})
    return f"{base}?{query}" if query else base


def _webapp_button(text: str, params: Optional[dict] = None) -> InlineKeyboardButton:
    return InlineKeyboardButton(text, web_app=WebAppInfo(url=build_webapp_url(params)))


# Главное меню
def get_main_menu_keyboard():
    """Создает клавиатуру главного меню."""
    keyboard = [
        [KeyboardButton(BUTTON_CHAPTERS), KeyboardButton(BUTTON_AI)],
        [KeyboardButton(BUTTON_TEST), KeyboardButton(BUTTON_PROFILE)]
    ]
    return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)


def get_main_menu_inline_keyboard():
    """Главное меню с кнопкой веб-приложения."""
    keyboard = [
        [_webapp_button("🚀 Открыть приложение")],
        [
            InlineKeyboardButton("📚 Главы", callback_data="chapters"),
            InlineKeyboardButton(BUTTON_AI, callback_data="ai_help")
        ],
        [
            InlineKeyboardButton(BUTTON_TEST, callback_data="test"),
            InlineKeyboardButton("👤 Профиль", callback_data="profile")
        ]
    ]
    return InlineKeyboardMarkup(keyboard)


def get_webapp_keyboard(text: str = "🌐 Открыть веб-приложение", params: Optional[dict] = None):
    return InlineKeyboardMarkup([[_webapp_button(text, params)]])


def get_chapters_keyboard(chapters: Iterable[Chapter]):
    """Клавиатура глав, по две в ряд."""
    keyboard = []
    row = []
    for chapter in chapters:
        row.append(KeyboardButton(f"{chapter.id}. {chapter.title[:20]}"))
        if len(row) == 2:
            keyboard.append(row)
            row = []
    if row:
        keyboard.append(row)

    keyboard.append([KeyboardButton(BUTTON_BACK_TO_MENU)])
    return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)


def get_chapter_keyboard(chapter: Chapter, completed: bool = False):
    """Инлайн-клавиатура разделов главы."""
    keyboard = [[_webapp_button("🌐 Изучать в приложении", {"chapter": chapter.id})]]
    for section in chapter.sections:
        keyboard.append([InlineKeyboardButton(
            f"{section.id}. {section.title}",
            callback_data=f"section_{chapter.id}_{section.id}"
        )])

    if not completed:
        keyboard.append([InlineKeyboardButton("✅ Отметить главу пройденной", callback_data=f"complete_{chapter.id}")])
    keyboard.append([InlineKeyboardButton(BUTTON_BACK_TO_CHAPTERS, callback_data="chapters")])
    return InlineKeyboardMarkup(keyboard)


def get_section_keyboard(chapter_id: int, section_id: int):
    keyboard = [
        [_webapp_button("🌐 Изучать в приложении", {"chapter": chapter_id, "section": section_id})],
        [InlineKeyboardButton("🔙 К разделам", callback_data=f"chapter_{chapter_id}")],
        [InlineKeyboardButton(BUTTON_BACK_TO_CHAPTERS, callback_data="chapters")]
    ]
    return InlineKeyboardMarkup(keyboard)


# Клавиатуры для теста
def get_test_intro_keyboard():
    keyboard = [
        [_webapp_button("🌐 Пройти в веб-приложении")],
        [InlineKeyboardButton("▶️ Начать тест здесь", callback_data="start_test")],
        [InlineKeyboardButton(BUTTON_BACK_TO_MENU, callback_data="back_to_menu")]
    ]
    return InlineKeyboardMarkup(keyboard)


def get_quiz_keyboard(question: QuizQuestion):
    """Клавиатура с вариантами ответа: "A. вариант"."""
    keyboard = [
        [KeyboardButton(f"{chr(65 + index)}. {option}")]
        for index, option in enumerate(question.options)
    ]
    return ReplyKeyboardMarkup(keyboard, one_time_keyboard=True, resize_keyboard=True)


def get_quiz_finished_keyboard():
    keyboard = [
        [KeyboardButton(BUTTON_RETRY_TEST)],
        [KeyboardButton(BUTTON_BACK_TO_MENU)]
    ]
    return ReplyKeyboardMarkup(keyboard, resize_keyboard=True)


def get_back_to_menu_keyboard(webapp_text: Optional[str] = None):
    keyboard = []
    if webapp_text:
        keyboard.append([_webapp_button(webapp_text)])
    keyboard.append([InlineKeyboardButton(BUTTON_BACK_TO_MENU, callback_data="back_to_menu")])
    return InlineKeyboardMarkup(keyboard)
