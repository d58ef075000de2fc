"""
Модели состояния ученика.

Записи неизменяемые: каждая команда движка возвращает новую запись,
производные показатели (число глав, прогресс, уровень, счет теста) вычисляются
при чтении и не хранятся отдельно.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from esperanto_bot.learning.progress import Level, ProgressSnapshot, compute_progress


def utc_now() -> datetime:
    """Текущее время в UTC."""
    return datetime.now(timezone.utc)


class NavigationState(Enum):
    """Где находится пользователь в интерфейсе бота."""
    BROWSING = "browsing"
    BROWSING_CHAPTERS = "browsing_chapters"
    BROWSING_SECTIONS = "browsing_sections"
    VIEWING_SECTION = "viewing_section"
    QUIZ_INTRO = "quiz_intro"
    QUIZ = "quiz"
    AI_CHAT = "ai_chat"


class QuizPhase(Enum):
    """Фазы теста."""
    IDLE = "idle"
    INTRO = "intro"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class MessageRole(Enum):
    """Автор сообщения в истории диалога."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Navigation:
    """Текущая позиция пользователя."""
    state: NavigationState = NavigationState.BROWSING
    current_chapter: Optional[int] = None
    current_section: Optional[int] = None


@dataclass(frozen=True)
class QuizState:
    """Состояние текущего теста."""
    phase: QuizPhase = QuizPhase.IDLE
    answers: Tuple[bool, ...] = ()
    current_question_index: int = 0
    question_count: int = 0

    @property
    def score(self) -> int:
        return sum(1 for answer in self.answers if answer)

    @property
    def is_active(self) -> bool:
        return self.phase in (QuizPhase.IN_PROGRESS, QuizPhase.FINISHED)


@dataclass(frozen=True)
class QuizResult:
    """Результат пройденного теста."""
    score: int
    total_questions: int
    completed_at: datetime


@dataclass(frozen=True)
class HistoryEntry:
    """Сообщение в истории диалога с AI-помощником."""
    role: MessageRole
    content: str
    timestamp: datetime


@dataclass(frozen=True)
class UserProfile:
    """Данные пользователя из Telegram."""
    first_name: str = "Пользователь"
    last_name: str = ""
    username: str = ""
    language_code: str = "ru"

    @classmethod
    def from_telegram(cls, user) -> "UserProfile":
        """Создает профиль из объекта telegram.User."""
        return cls(
            first_name=user.first_name or "Пользователь",
            last_name=user.last_name or "",
            username=user.username or "",
            language_code=user.language_code or "ru",
        )


@dataclass(frozen=True)
class UserStats:
    """Накопленная статистика обучения."""
    completed_chapter_ids: FrozenSet[int] = frozenset()
    tests_completed: int = 0
    quiz_results: Tuple[QuizResult, ...] = ()
    last_active: datetime = field(default_factory=utc_now)
    registration_date: datetime = field(default_factory=utc_now)

    @property
    def chapters_completed(self) -> int:
        return len(self.completed_chapter_ids)

    @property
    def snapshot(self) -> ProgressSnapshot:
        return compute_progress(self.chapters_completed, self.tests_completed)

    @property
    def progress(self) -> int:
        return self.snapshot.progress

    @property
    def level(self) -> Level:
        return self.snapshot.level

    def summary(self) -> Dict[str, Any]:
        """Краткая статистика для профиля."""
        snapshot = self.snapshot
        return {
            "level": snapshot.level,
            "progress": snapshot.progress,
            "chapters_completed": self.chapters_completed,
            "tests_completed": self.tests_completed,
        }


@dataclass(frozen=True)
class UserRecord:
    """Полное состояние ученика."""
    user_id: int
    navigation: Navigation = field(default_factory=Navigation)
    quiz: QuizState = field(default_factory=QuizState)
    stats: UserStats = field(default_factory=UserStats)
    conversation_history: Tuple[HistoryEntry, ...] = ()
    profile: UserProfile = field(default_factory=UserProfile)


def new_user_record(user_id: int, profile: Optional[UserProfile] = None,
                    now: Optional[datetime] = None) -> UserRecord:
    """Создает запись нового пользователя с нулевым прогрессом."""
    now = now or utc_now()
    return UserRecord(
        user_id=user_id,
        stats=UserStats(last_active=now, registration_date=now),
        profile=profile or UserProfile(),
    )


# Сериализация для хранилища

def _dt_to_str(value: datetime) -> str:
    return value.isoformat()


def _dt_from_str(value: str) -> datetime:
    return datetime.fromisoformat(value)


def record_to_dict(record: UserRecord) -> Dict[str, Any]:
    """Преобразует запись в словарь, пригодный для JSON."""
    return {
        "user_id": record.user_id,
        "navigation": {
            "state": record.navigation.state.value,
            "current_chapter": record.navigation.current_chapter,
            "current_section": record.navigation.current_section,
        },
        "quiz": {
            "phase": record.quiz.phase.value,
            "answers": list(record.quiz.answers),
            "current_question_index": record.quiz.current_question_index,
            "question_count": record.quiz.question_count,
        },
        "stats": {
            "completed_chapter_ids": sorted(record.stats.completed_chapter_ids),
            "tests_completed": record.stats.tests_completed,
            "quiz_results": [
                {
                    "score": result.score,
                    "total_questions": result.total_questions,
                    "completed_at": _dt_to_str(result.completed_at),
                }
                for result in record.stats.quiz_results
            ],
            "last_active": _dt_to_str(record.stats.last_active),
            "registration_date": _dt_to_str(record.stats.registration_date),
        },
        "conversation_history": [
            {
                "role": entry.role.value,
                "content": entry.content,
                "timestamp": _dt_to_str(entry.timestamp),
            }
            for entry in record.conversation_history
        ],
        "profile": {
            "first_name": record.profile.first_name,
            "last_name": record.profile.last_name,
            "username": record.profile.username,
            "language_code": record.profile.language_code,
        },
    }


def record_from_dict(data: Dict[str, Any]) -> UserRecord:
    """Восстанавливает запись из словаря."""
    navigation = data.get("navigation", {})
    quiz = data.get("quiz", {})
    stats = data.get("stats", {})
    profile = data.get("profile", {})

    return UserRecord(
        user_id=data["user_id"],
        navigation=Navigation(
            state=NavigationState(navigation.get("state", NavigationState.BROWSING.value)),
            current_chapter=navigation.get("current_chapter"),
            current_section=navigation.get("current_section"),
        ),
        quiz=QuizState(
            phase=QuizPhase(quiz.get("phase", QuizPhase.IDLE.value)),
            answers=tuple(bool(answer) for answer in quiz.get("answers", [])),
            current_question_index=quiz.get("current_question_index", 0),
            question_count=quiz.get("question_count", 0),
        ),
        stats=UserStats(
            completed_chapter_ids=frozenset(stats.get("completed_chapter_ids", [])),
            tests_completed=stats.get("tests_completed", 0),
            quiz_results=tuple(
                QuizResult(
                    score=item["score"],
                    total_questions=item["total_questions"],
                    completed_at=_dt_from_str(item["completed_at"]),
                )
                for item in stats.get("quiz_results", [])
            ),
            last_active=_dt_from_str(stats["last_active"]) if "last_active" in stats else utc_now(),
            registration_date=(
                _dt_from_str(stats["registration_date"]) if "registration_date" in stats else utc_now()
            ),
        ),
        conversation_history=tuple(
            HistoryEntry(
                role=MessageRole(item["role"]),
                content=item["content"],
                timestamp=_dt_from_str(item["timestamp"]),
            )
            for item in data.get("conversation_history", [])
        ),
        profile=UserProfile(**profile) if profile else UserProfile(),
    )
