"""
Движок прогресса: состояние учеников, главы, тесты и история диалога.

Каждая команда читает запись из хранилища, строит новую запись и сохраняет ее.
Чтение-изменение-запись одной записи выполняется под блокировкой этого
пользователя, поэтому параллельные обработчики не ломают счет теста.
"""
import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Union

from esperanto_bot.database.stores import InMemoryUserStore, UserStore
from esperanto_bot.learning import history, quiz
from esperanto_bot.learning.courses import CourseCatalog, QuizQuestion, default_catalog
from esperanto_bot.learning.errors import InvalidAnswer, NoActiveQuiz, UnknownSection
from esperanto_bot.learning.models import (
    HistoryEntry,
    MessageRole,
    Navigation,
    NavigationState,
    QuizPhase,
    QuizResult,
    QuizState,
    UserProfile,
    UserRecord,
    UserStats,
    new_user_record,
    utc_now,
)
from esperanto_bot.learning.quiz import AnswerOutcome

logger = logging.getLogger(__name__)

QUIZ_STATES = (NavigationState.QUIZ_INTRO, NavigationState.QUIZ)


class ProgressEngine:
    """Движок прогресса учеников."""

    def __init__(
        self,
        store: Optional[UserStore] = None,
        catalog: CourseCatalog = default_catalog,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store if store is not None else InMemoryUserStore()
        self.catalog = catalog
        self.clock = clock
        # Блокировка живет, пока ее держит хотя бы одна команда
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    # Служебные методы

    @contextmanager
    def _locked(self, user_id: int) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(user_id, threading.RLock())
        with lock:
            yield

    def _load(self, user_id: int, profile: Optional[UserProfile] = None) -> UserRecord:
        record = self.store.get(user_id)
        if record is None:
            record = new_user_record(user_id, profile, now=self.clock())
            self.store.put(record)
            logger.info(f"✅ Создан новый пользователь {user_id} с нулевым прогрессом")
        return record

    def _save(self, record: UserRecord) -> UserRecord:
        record = replace(record, stats=replace(record.stats, last_active=self.clock()))
        self.store.put(record)
        return record

    def _update(self, user_id: int, command: Callable[[UserRecord], UserRecord]) -> UserRecord:
        with self._locked(user_id):
            return self._save(command(self._load(user_id)))

    # Пользователи

    def get_or_create(self, user_id: int, profile: Optional[UserProfile] = None) -> UserRecord:
        """Возвращает запись пользователя, создавая ее при первом обращении."""
        with self._locked(user_id):
            record = self._load(user_id, profile)
            if profile is not None and record.profile != profile:
                record = self._save(replace(record, profile=profile))
            return record

    def user_count(self) -> int:
        return self.store.count()

    def reset_user_progress(self, user_id: int) -> UserRecord:
        """Сбрасывает прогресс, сохраняя дату регистрации и профиль."""
        def command(record: UserRecord) -> UserRecord:
            return replace(
                record,
                navigation=Navigation(),
                quiz=QuizState(),
                stats=UserStats(registration_date=record.stats.registration_date),
            )

        record = self._update(user_id, command)
        logger.info(f"Сброшен прогресс пользователя {user_id}")
        return record

    def reset_all_progress(self) -> int:
        """Сбрасывает прогресс всех пользователей. Возвращает их количество."""
        user_ids = self.store.user_ids()
        logger.info(f"🔄 Сброс прогресса всех пользователей ({len(user_ids)})")
        for user_id in user_ids:
            self.reset_user_progress(user_id)
        return len(user_ids)

    # Навигация

    def set_navigation(self, user_id: int, state: Union[str, NavigationState],
                       chapter_id: Optional[int] = None,
                       section_id: Optional[int] = None) -> UserRecord:
        """Переводит пользователя в новое состояние навигации."""
        state = NavigationState(state)
        if section_id is not None and chapter_id is None:
            raise UnknownSection(chapter_id, section_id)
        if chapter_id is not None:
            self.catalog.get_chapter(chapter_id)
        if section_id is not None:
            self.catalog.get_section(chapter_id, section_id)

        navigation = Navigation(state=state, current_chapter=chapter_id, current_section=section_id)

        def command(record: UserRecord) -> UserRecord:
            record = replace(record, navigation=navigation)
            # Уход с экранов теста прерывает начатый тест
            if state not in QUIZ_STATES and record.quiz.phase in (QuizPhase.INTRO, QuizPhase.IN_PROGRESS):
                logger.info(f"Пользователь {user_id} прервал тест")
                record = replace(record, quiz=QuizState())
            return record

        return self._update(user_id, command)

    # Главы

    def complete_chapter(self, user_id: int, chapter_id: int) -> UserRecord:
        """Отмечает главу пройденной. Повторный вызов ничего не меняет."""
        self.catalog.get_chapter(chapter_id)
        with self._locked(user_id):
            record = self._load(user_id)
            if chapter_id in record.stats.completed_chapter_ids:
                return record

            stats = replace(
                record.stats,
                completed_chapter_ids=record.stats.completed_chapter_ids | {chapter_id},
            )
            record = self._save(replace(record, stats=stats))

        logger.info(
            f"Пользователь {user_id} завершил главу {chapter_id}. "
            f"Прогресс: {record.stats.progress}% ({record.stats.level.label})"
        )
        return record

    # Тест

    def open_quiz_intro(self, user_id: int) -> UserRecord:
        """Показывает вступление к тесту."""
        return self._update(user_id, quiz.open_intro)

    def start_quiz(self, user_id: int) -> int:
        """Начинает тест. Возвращает индекс первого вопроса."""
        question_count = len(self.catalog.quiz_questions)
        self._update(user_id, lambda record: quiz.start(record, question_count))
        logger.info(f"Пользователь {user_id} начал тест ({question_count} вопросов)")
        return 0

    def current_question(self, user_id: int) -> Tuple[int, QuizQuestion]:
        """Возвращает номер и текущий вопрос активного теста."""
        record = self.get_or_create(user_id)
        if record.quiz.phase is not QuizPhase.IN_PROGRESS:
            raise NoActiveQuiz(user_id)
        index = record.quiz.current_question_index
        return index, self.catalog.quiz_questions[index]

    def submit_answer(self, user_id: int, raw_input: str, correct_index: int,
                      option_count: int) -> AnswerOutcome:
        """
        Принимает ответ на текущий вопрос.

        Args:
            user_id: Telegram ID
            raw_input: Текст ответа, например "B. -a"
            correct_index: Индекс правильного варианта
            option_count: Количество вариантов

        Returns:
            AnswerOutcome с признаком правильности

        Raises:
            NoActiveQuiz: тест не начат
            InvalidAnswer: ответ не соответствует ни одному варианту
        """
        with self._locked(user_id):
            record = self._load(user_id)
            try:
                record, outcome = quiz.answer(record, raw_input, correct_index, option_count)
            except InvalidAnswer:
                logger.warning(f"Недопустимый ответ пользователя {user_id}: {raw_input!r}")
                raise
            self._save(record)

        logger.info(
            f"Ответ пользователя {user_id} на вопрос {record.quiz.current_question_index}: "
            f"{'верно' if outcome.is_correct else 'неверно'}"
        )
        return outcome

    def answer_current_question(self, user_id: int, raw_input: str) -> Tuple[QuizQuestion, AnswerOutcome]:
        """Проверяет ответ на текущий вопрос каталога."""
        with self._locked(user_id):
            _, question = self.current_question(user_id)
            outcome = self.submit_answer(
                user_id, raw_input, question.correct_answer, len(question.options)
            )
        return question, outcome

    def finish_quiz_if_due(self, user_id: int) -> bool:
        """Проверяет, что на все вопросы теста дан ответ."""
        return quiz.is_due(self.get_or_create(user_id))

    def complete_quiz(self, user_id: int) -> QuizResult:
        """Сохраняет результат законченного теста."""
        with self._locked(user_id):
            record, result = quiz.complete(self._load(user_id), now=self.clock())
            record = self._save(record)

        logger.info(
            f"Пользователь {user_id} завершил тест: {result.score}/{result.total_questions}. "
            f"Новый прогресс: {record.stats.progress}%"
        )
        return result

    # Статистика

    def get_stats(self, user_id: int) -> Dict[str, Any]:
        """Уровень, прогресс и количество пройденных глав и тестов."""
        return self.get_or_create(user_id).stats.summary()

    # История диалога

    def append_message(self, user_id: int, role: Union[str, MessageRole], content: str) -> None:
        """Добавляет сообщение в историю диалога."""
        role = history.to_role(role)
        now = self.clock()
        self._update(user_id, lambda record: history.append(record, role, content, now))

    def get_history(self, user_id: int) -> Tuple[HistoryEntry, ...]:
        """История диалога, от старых сообщений к новым."""
        return self.get_or_create(user_id).conversation_history

    def reset_history(self, user_id: int) -> None:
        self._update(user_id, history.clear)
