"""
Модуль обучения.

Этот модуль содержит логику курса и прогресса учеников:
- progress.py: Расчет прогресса и уровня
- models.py: Состояние ученика
- courses.py: Каталог глав, вопросов теста и разговорник
- quiz.py: Переходы состояний теста
- history.py: История диалога с AI-помощником
- engine.py: Движок прогресса (импортируется напрямую, он зависит от хранилища)
"""

from esperanto_bot.learning.progress import (
    Level,
    ProgressSnapshot,
    compute_progress,
    level_for_progress
)

from esperanto_bot.learning.errors import (
    ProgressEngineError,
    InvalidAnswer,
    NoActiveQuiz,
    QuizNotFinished,
    UnknownChapter,
    UnknownSection
)

from esperanto_bot.learning.models import (
    NavigationState,
    QuizPhase,
    MessageRole,
    UserProfile,
    UserRecord
)

from esperanto_bot.learning.courses import (
    Chapter,
    Section,
    QuizQuestion,
    CourseCatalog,
    default_catalog
)

__all__ = [
    # Прогресс
    'Level',
    'ProgressSnapshot',
    'compute_progress',
    'level_for_progress',

    # Ошибки
    'ProgressEngineError',
    'InvalidAnswer',
    'NoActiveQuiz',
    'QuizNotFinished',
    'UnknownChapter',
    'UnknownSection',

    # Состояние ученика
    'NavigationState',
    'QuizPhase',
    'MessageRole',
    'UserProfile',
    'UserRecord',

    # Каталог
    'Chapter',
    'Section',
    'QuizQuestion',
    'CourseCatalog',
    'default_catalog'
]
