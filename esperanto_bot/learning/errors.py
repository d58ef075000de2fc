"""
Исключения модуля обучения.
Все ошибки восстановимые: обработчики бота превращают их в уведомления пользователю.
"""


class ProgressEngineError(Exception):
    """Базовая ошибка движка прогресса."""

    user_message = "Произошла ошибка. Попробуйте еще раз."


class InvalidAnswer(ProgressEngineError):
    """Ответ не соответствует ни одному из вариантов."""

    user_message = "Пожалуйста, выберите один из предложенных вариантов ответа."

    def __init__(self, raw_input: str, option_count: int):
        self.raw_input = raw_input
        self.option_count = option_count
        super().__init__(f"Недопустимый ответ {raw_input!r} для {option_count} вариантов")


class NoActiveQuiz(ProgressEngineError):
    """Операция с тестом без активного теста."""

    user_message = "Сейчас нет активного теста. Чтобы начать, отправьте /test."

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"У пользователя {user_id} нет активного теста")


class QuizNotFinished(ProgressEngineError):
    """Попытка завершить тест, на вопросы которого ответили не полностью."""

    user_message = "Тест еще не закончен. Ответьте на оставшиеся вопросы."

    def __init__(self, user_id: int, answered: int, total: int):
        self.user_id = user_id
        self.answered = answered
        self.total = total
        super().__init__(f"Пользователь {user_id} ответил на {answered} из {total} вопросов")


class UnknownChapter(ProgressEngineError):
    """Глава отсутствует в каталоге курса."""

    user_message = "Глава не найдена. Пожалуйста, выберите главу из списка."

    def __init__(self, chapter_id):
        self.chapter_id = chapter_id
        super().__init__(f"Глава {chapter_id} не найдена")


class UnknownSection(ProgressEngineError):
    """Раздел отсутствует в главе."""

    user_message = "Раздел не найден. Пожалуйста, выберите раздел из списка."

    def __init__(self, chapter_id, section_id):
        self.chapter_id = chapter_id
        self.section_id = section_id
        super().__init__(f"Раздел {section_id} не найден в главе {chapter_id}")
