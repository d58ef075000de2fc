"""
Форматирование сообщений бота.
"""
from typing import Iterable, Optional

from esperanto_bot.config import TOTAL_CHAPTERS
from esperanto_bot.learning.courses import Chapter, QuizQuestion, Section
from esperanto_bot.learning.models import UserProfile
from esperanto_bot.learning.progress import round_half_up
from esperanto_bot.utils.ai_client import AIResponse


def format_chapter_list(chapters: Iterable[Chapter]) -> str:
    message = "📚 *Главы курса эсперанто*\n\n"
    for chapter in chapters:
        message += f"*{chapter.id}.* {chapter.title}\n"
    message += "\nВыберите главу из списка или отправьте номер главы."
    return message


def format_section_list(chapter: Chapter, completed: bool = False) -> str:
    message = f"📖 *Глава {chapter.id}: {chapter.title}*\n\n"
    if completed:
        message += "✅ Глава пройдена\n\n"
    message += "Разделы:\n"
    for section in chapter.sections:
        message += f"*{section.id}.* {section.title}\n"
    message += "\nВыберите раздел из списка или отправьте номер в формате '1.2' (где 1 - глава, 2 - раздел)."
    return message


def format_section_content(chapter: Chapter, section: Section) -> str:
    message = f"📝 *Глава {chapter.id}, Раздел {section.id}: {section.title}*\n\n"
    message += section.description or (
        f"Теоретический материал раздела «{section.title}».\n\n"
        "🌐 *Рекомендация:* Для лучшего изучения материала откройте веб-приложение!"
    )
    return message


def format_quiz_question(question: QuizQuestion, question_number: int, total_questions: int) -> str:
    message = f"*Вопрос {question_number}/{total_questions}*\n\n"
    message += question.question + "\n\n"
    for index, option in enumerate(question.options):
        message += f"*{chr(65 + index)}.* {option}\n"
    return message


def format_answer_feedback(question: QuizQuestion, is_correct: bool) -> str:
    if is_correct:
        return "✅ Правильно!"
    return f"❌ Неправильно. Правильный ответ: *{question.correct_letter}. {question.correct_option}*"


def format_quiz_result(score: int, total: int) -> str:
    """Результаты теста с оценкой по проценту правильных ответов."""
    percentage = round_half_up(score / total * 100) if total else 0

    message = "*Результаты теста*\n\n"
    message += f"Правильных ответов: *{score}/{total}* ({percentage}%)\n\n"

    if percentage >= 90:
        message += "🏆 Отличный результат! Вы отлично знаете эсперанто!"
    elif percentage >= 70:
        message += "👍 Хороший результат! Вы хорошо знаете эсперанто."
    elif percentage >= 50:
        message += "👌 Неплохой результат. Продолжайте изучение!"
    else:
        message += "🤔 Вам стоит больше практиковаться. Не сдавайтесь!"

    return message


def format_user_profile(profile: UserProfile, stats: dict, total_chapters: int = TOTAL_CHAPTERS) -> str:
    message = "*Профиль пользователя*\n\n"
    message += f"Имя: {profile.first_name}\n"
    if profile.username:
        message += f"Имя пользователя: @{profile.username}\n"
    message += f"Уровень: {stats['level'].label}\n"
    message += f"Изучено глав: {stats['chapters_completed']}/{total_chapters}\n"
    message += f"Пройдено тестов: {stats['tests_completed']}\n"
    message += f"Общий прогресс: {get_progress_bar(stats['progress'])}\n\n"
    message += "_Продолжайте изучение, чтобы улучшить свои показатели!_"
    return message


def format_ai_response(response: AIResponse) -> str:
    message = response.response

    if response.examples:
        message += "\n\n*Примеры:*\n"
        for example in response.examples:
            message += f"• {example}\n"

    if response.tips:
        message += "\n\n*Советы:*\n"
        for tip in response.tips:
            message += f"• {tip}\n"

    return message


def format_welcome(first_name: Optional[str], stats: dict) -> str:
    return (
        f"🌟 *Saluton, {first_name or 'Пользователь'}!* 🌟\n\n"
        "Добро пожаловать в бот для изучения эсперанто!\n\n"
        "*Что я могу:*\n"
        "• 📚 Изучение языка по главам и разделам\n"
        "• 🤖 AI-помощник для ответов на вопросы\n"
        "• 📝 Интерактивные тесты\n"
        "• 📊 Отслеживание прогресса обучения\n\n"
        "*Ваш текущий прогресс:*\n"
        f"• Уровень: {stats['level'].label}\n"
        f"• Прогресс: {stats['progress']}%\n"
        f"• Завершено глав: {stats['chapters_completed']}\n"
        f"• Пройдено тестов: {stats['tests_completed']}\n\n"
        "*Выберите способ обучения:*"
    )


# Прогресс-бар
def get_progress_bar(percentage, width=10):
    """Создает текстовый прогресс-бар."""
    filled = int(width * percentage / 100)
    bar = "■" * filled + "□" * (width - filled)
    return f"{bar} {percentage}%"
