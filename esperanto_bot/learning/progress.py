"""
Расчет общего прогресса и уровня ученика.

Прогресс складывается из пройденных глав (80%) и пройденных тестов (20%),
уровень определяется по прогрессу.
"""
import math
from dataclasses import dataclass
from enum import Enum

from esperanto_bot.config import (
    TOTAL_CHAPTERS,
    MAX_TESTS_COUNTED,
    CHAPTER_WEIGHT,
    TESTS_WEIGHT,
    ADVANCED_THRESHOLD,
    INTERMEDIATE_THRESHOLD,
)


class Level(Enum):
    """Уровни владения языком."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @property
    def label(self) -> str:
        """Название уровня для сообщений бота."""
        return LEVEL_LABELS[self]


LEVEL_LABELS = {
    Level.BEGINNER: "Начинающий",
    Level.INTERMEDIATE: "Средний",
    Level.ADVANCED: "Продвинутый",
}


@dataclass(frozen=True)
class ProgressSnapshot:
    """Результат расчета прогресса."""
    progress: int
    level: Level


def round_half_up(value: float) -> int:
    """Округляет .5 вверх, как Math.round в веб-клиенте."""
    return int(math.floor(value + 0.5))


def level_for_progress(progress: int) -> Level:
    """Определяет уровень по прогрессу. Пороги проверяются от старшего к младшему."""
    if progress >= ADVANCED_THRESHOLD:
        return Level.ADVANCED
    if progress >= INTERMEDIATE_THRESHOLD:
        return Level.INTERMEDIATE
    return Level.BEGINNER


def compute_progress(
    chapters_completed: int,
    tests_completed: int,
    total_chapters: int = TOTAL_CHAPTERS,
    max_tests_counted: int = MAX_TESTS_COUNTED,
) -> ProgressSnapshot:
    """
    Вычисляет прогресс (0-100) и уровень.

    Args:
        chapters_completed: Количество пройденных глав
        tests_completed: Количество пройденных тестов
        total_chapters: Всего глав в курсе
        max_tests_counted: Сколько тестов максимально учитывается

    Returns:
        ProgressSnapshot с прогрессом и уровнем
    """
    if total_chapters <= 0 or max_tests_counted <= 0:
        raise ValueError("total_chapters и max_tests_counted должны быть больше нуля")

    chapter_progress = (chapters_completed / total_chapters) * 100
    test_progress = min(tests_completed / max_tests_counted, 1) * 100

    progress = round_half_up(chapter_progress * CHAPTER_WEIGHT + test_progress * TESTS_WEIGHT)
    progress = max(0, min(100, progress))

    return ProgressSnapshot(progress=progress, level=level_for_progress(progress))
