"""
Переходы состояний теста.

idle -> intro -> in_progress -> finished -> idle.
Функции чистые: принимают запись и возвращают новую.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Tuple

from esperanto_bot.learning.errors import InvalidAnswer, NoActiveQuiz, QuizNotFinished
from esperanto_bot.learning.models import (
    Navigation,
    NavigationState,
    QuizPhase,
    QuizResult,
    QuizState,
    UserRecord,
)


@dataclass(frozen=True)
class AnswerOutcome:
    """Итог проверки ответа."""
    is_correct: bool
    selected_index: int


def parse_answer_index(raw_input: str) -> int:
    """
    Переводит ответ вида "B. текст варианта" в индекс варианта.

    Берется первый непробельный символ: A -> 0, B -> 1 и т.д.
    Для пустой строки возвращается -1.
    """
    stripped = (raw_input or "").strip()
    if not stripped:
        return -1
    return ord(stripped[0].upper()) - ord("A")


def open_intro(record: UserRecord) -> UserRecord:
    """Показывает вступление к тесту."""
    return replace(
        record,
        quiz=QuizState(phase=QuizPhase.INTRO),
        navigation=Navigation(state=NavigationState.QUIZ_INTRO),
    )


def start(record: UserRecord, question_count: int) -> UserRecord:
    """Начинает тест с первого вопроса. Активный тест начинается заново."""
    # Тест без вопросов сразу считается законченным
    phase = QuizPhase.IN_PROGRESS if question_count > 0 else QuizPhase.FINISHED
    return replace(
        record,
        quiz=QuizState(
            phase=phase,
            answers=(),
            current_question_index=0,
            question_count=question_count,
        ),
        navigation=Navigation(state=NavigationState.QUIZ),
    )


def answer(record: UserRecord, raw_input: str, correct_index: int,
           option_count: int) -> Tuple[UserRecord, AnswerOutcome]:
    """Записывает ответ на текущий вопрос."""
    quiz = record.quiz
    if quiz.phase is not QuizPhase.IN_PROGRESS:
        raise NoActiveQuiz(record.user_id)

    selected = parse_answer_index(raw_input)
    if selected < 0 or selected >= option_count:
        raise InvalidAnswer(raw_input, option_count)

    is_correct = selected == correct_index
    next_index = quiz.current_question_index + 1
    phase = QuizPhase.FINISHED if next_index >= quiz.question_count else QuizPhase.IN_PROGRESS

    updated = replace(
        quiz,
        phase=phase,
        answers=quiz.answers + (is_correct,),
        current_question_index=next_index,
    )
    return replace(record, quiz=updated), AnswerOutcome(is_correct=is_correct, selected_index=selected)


def is_due(record: UserRecord) -> bool:
    """Проверяет, что на все вопросы теста дан ответ."""
    if not record.quiz.is_active:
        raise NoActiveQuiz(record.user_id)
    return record.quiz.phase is QuizPhase.FINISHED


def complete(record: UserRecord, now: datetime) -> Tuple[UserRecord, QuizResult]:
    """Завершает тест: сохраняет результат и возвращает пользователя в меню."""
    quiz = record.quiz
    if not quiz.is_active:
        raise NoActiveQuiz(record.user_id)
    if quiz.phase is not QuizPhase.FINISHED:
        raise QuizNotFinished(record.user_id, len(quiz.answers), quiz.question_count)

    result = QuizResult(score=quiz.score, total_questions=len(quiz.answers), completed_at=now)
    stats = replace(
        record.stats,
        tests_completed=record.stats.tests_completed + 1,
        quiz_results=record.stats.quiz_results + (result,),
    )
    updated = replace(
        record,
        quiz=QuizState(),
        stats=stats,
        navigation=Navigation(state=NavigationState.BROWSING),
    )
    return updated, result
