"""
Каталог курса эсперанто: главы, разделы, вопросы теста и разговорник.
"""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from esperanto_bot.learning.errors import UnknownChapter, UnknownSection


@dataclass(frozen=True)
class Section:
    """Раздел главы."""
    id: int
    title: str
    description: str = ""


@dataclass(frozen=True)
class Chapter:
    """Глава курса."""
    id: int
    title: str
    description: str
    difficulty: str
    estimated_time: str
    sections: Tuple[Section, ...]


@dataclass(frozen=True)
class QuizQuestion:
    """Вопрос теста с вариантами ответа."""
    question: str
    options: Tuple[str, ...]
    correct_answer: int

    def __post_init__(self):
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(f"Индекс правильного ответа вне диапазона: {self.question}")

    @property
    def correct_letter(self) -> str:
        return chr(65 + self.correct_answer)

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer]


@dataclass(frozen=True)
class Phrase:
    """Фраза разговорника."""
    esperanto: str
    russian: str


def _sections(*titles: str) -> Tuple[Section, ...]:
    return tuple(Section(id=index, title=title) for index, title in enumerate(titles, 1))


ESPERANTO_CHAPTERS = (
    Chapter(
        id=1,
        title="Введение в Эсперанто",
        description="Что такое Эсперанто, история и цели языка, принципы и структура",
        difficulty="Легкий",
        estimated_time="2-3 часа",
        sections=_sections(
            "Что такое эсперанто",
            "История создания языка",
            "Цели и идеи языка",
            "Шестнадцать правил грамматики",
            "Эсперанто сегодня",
        ),
    ),
    Chapter(
        id=2,
        title="Алфавит и произношение",
        description="Алфавит и звуки, специальные буквы, ударение, правила чтения",
        difficulty="Легкий",
        estimated_time="2-3 часа",
        sections=_sections(
            "Алфавит и звуки",
            "Специальные буквы ĉ, ĝ, ĥ, ĵ, ŝ, ŭ",
            "Ударение",
            "Правила чтения",
            "Практика произношения",
        ),
    ),
    Chapter(
        id=3,
        title="Словообразование и основы лексики",
        description="Корни слов, приставки и суффиксы, сложные слова, создание новых слов",
        difficulty="Средний",
        estimated_time="3-4 часа",
        sections=_sections(
            "Корни слов",
            "Приставки",
            "Суффиксы",
            "Сложные слова",
            "Создание новых слов",
        ),
    ),
    Chapter(
        id=4,
        title="Существительные",
        description="Суффикс -o, множественное число (-j), падежи, род, исключения",
        difficulty="Легкий",
        estimated_time="2-3 часа",
        sections=_sections(
            "Окончание -o",
            "Множественное число -j",
            "Винительный падеж -n",
            "Род существительных",
            "Исключения",
        ),
    ),
    Chapter(
        id=5,
        title="Прилагательные",
        description="Суффикс -a, согласование, порядок слов, степени сравнения",
        difficulty="Легкий",
        estimated_time="2-3 часа",
        sections=_sections(
            "Окончание -a",
            "Согласование с существительным",
            "Порядок слов",
            "Степени сравнения",
            "Практика",
        ),
    ),
    Chapter(
        id=6,
        title="Наречия",
        description="Суффикс -e, место в предложении, наречия времени и места, сравнение",
        difficulty="Легкий",
        estimated_time="2-3 часа",
        sections=_sections(
            "Окончание -e",
            "Место наречия в предложении",
            "Наречия времени и места",
            "Сравнение наречий",
        ),
    ),
    Chapter(
        id=7,
        title="Глаголы. Настоящее, прошедшее, будущее",
        description="Времена глаголов: -as, -is, -os, повелительное -u, инфинитив -i",
        difficulty="Средний",
        estimated_time="3-4 часа",
        sections=_sections(
            "Инфинитив -i",
            "Настоящее время -as",
            "Прошедшее время -is",
            "Будущее время -os",
            "Повелительное наклонение -u",
        ),
    ),
    Chapter(
        id=8,
        title="Глагольные конструкции",
        description="Страдательный залог, возвратные глаголы, модальные конструкции",
        difficulty="Сложный",
        estimated_time="3-4 часа",
        sections=_sections(
            "Причастия",
            "Страдательный залог",
            "Возвратные глаголы",
            "Условное наклонение -us",
            "Модальные конструкции",
        ),
    ),
    Chapter(
        id=9,
        title="Местоимения",
        description="Личные, притяжательные, указательные, вопросительные местоимения",
        difficulty="Средний",
        estimated_time="2-3 часа",
        sections=_sections(
            "Личные местоимения",
            "Притяжательные местоимения",
            "Указательные местоимения",
            "Вопросительные местоимения",
        ),
    ),
    Chapter(
        id=10,
        title="Числительные",
        description="Количественные, порядковые, дробные числительные, дата и время",
        difficulty="Легкий",
        estimated_time="2-3 часа",
        sections=_sections(
            "Количественные числительные",
            "Порядковые числительные",
            "Дробные числительные",
            "Дата и время",
        ),
    ),
    Chapter(
        id=11,
        title="Предлоги",
        description="Основные предлоги, предлоги направления и времени, сложные случаи",
        difficulty="Средний",
        estimated_time="3-4 часа",
        sections=_sections(
            "Основные предлоги",
            "Предлоги направления",
            "Предлоги времени",
            "Универсальный предлог je",
            "Сложные случаи",
        ),
    ),
    Chapter(
        id=12,
        title="Вопросительные слова и предложения",
        description="Вопросительные местоимения, слово ĉu, прямой и косвенный вопрос",
        difficulty="Средний",
        estimated_time="2-3 часа",
        sections=_sections(
            "Вопросительные слова на ki-",
            "Частица ĉu",
            "Прямой вопрос",
            "Косвенный вопрос",
        ),
    ),
    Chapter(
        id=13,
        title="Синтаксис и структура предложений",
        description="Порядок слов, согласование, дополнения, сложные предложения",
        difficulty="Сложный",
        estimated_time="4-5 часов",
        sections=_sections(
            "Порядок слов",
            "Согласование",
            "Дополнения",
            "Сложносочиненные предложения",
            "Сложноподчиненные предложения",
        ),
    ),
    Chapter(
        id=14,
        title="Практика и устойчивые выражения",
        description="Приветствия, часто используемые фразы, диалоги, этикет общения",
        difficulty="Средний",
        estimated_time="3-4 часа",
        sections=_sections(
            "Приветствия и прощания",
            "Часто используемые фразы",
            "Диалоги",
            "Этикет общения",
        ),
    ),
)

QUIZ_QUESTIONS = (
    QuizQuestion(
        question="Какое окончание имеют существительные в эсперанто?",
        options=("-a", "-o", "-e", "-i"),
        correct_answer=1,
    ),
    QuizQuestion(
        question="Какое окончание имеют прилагательные?",
        options=("-o", "-as", "-a", "-u"),
        correct_answer=2,
    ),
    QuizQuestion(
        question="Как образуется множественное число?",
        options=("Окончанием -j", "Окончанием -n", "Приставкой mal-", "Суффиксом -et-"),
        correct_answer=0,
    ),
    QuizQuestion(
        question="Какое окончание у глагола в настоящем времени?",
        options=("-is", "-os", "-us", "-as"),
        correct_answer=3,
    ),
    QuizQuestion(
        question="Как переводится «Saluton!»?",
        options=("Спасибо!", "Привет!", "До свидания!", "Пожалуйста!"),
        correct_answer=1,
    ),
    QuizQuestion(
        question="На какой слог падает ударение в эсперанто?",
        options=("На первый", "На последний", "На предпоследний", "Ударение свободное"),
        correct_answer=2,
    ),
    QuizQuestion(
        question="Что означает приставка mal-?",
        options=("Противоположность", "Уменьшение", "Увеличение", "Повторение"),
        correct_answer=0,
    ),
    QuizQuestion(
        question="Какое окончание обозначает винительный падеж?",
        options=("-j", "-e", "-n", "-o"),
        correct_answer=2,
    ),
    QuizQuestion(
        question="Кто создал эсперанто?",
        options=("Иоганн Шлейер", "Людвик Заменгоф", "Отто Есперсен", "Луи Кутюра"),
        correct_answer=1,
    ),
    QuizQuestion(
        question="Как переводится «Dankon»?",
        options=("Извините", "Пожалуйста", "Привет", "Спасибо"),
        correct_answer=3,
    ),
)

BASIC_PHRASES = (
    Phrase(esperanto="Saluton", russian="Привет"),
    Phrase(esperanto="Bonan matenon", russian="Доброе утро"),
    Phrase(esperanto="Bonan tagon", russian="Добрый день"),
    Phrase(esperanto="Bonan vesperon", russian="Добрый вечер"),
    Phrase(esperanto="Ĝis revido", russian="До свидания"),
    Phrase(esperanto="Dankon", russian="Спасибо"),
    Phrase(esperanto="Bonvolu", russian="Пожалуйста"),
    Phrase(esperanto="Pardonu", russian="Извините"),
    Phrase(esperanto="Kiel vi fartas?", russian="Как дела?"),
    Phrase(esperanto="Mi amas vin", russian="Я тебя люблю"),
)


class CourseCatalog:
    """Неизменяемый каталог курса."""

    def __init__(
        self,
        chapters: Sequence[Chapter] = ESPERANTO_CHAPTERS,
        quiz_questions: Sequence[QuizQuestion] = QUIZ_QUESTIONS,
        phrases: Sequence[Phrase] = BASIC_PHRASES,
    ):
        self.chapters: Tuple[Chapter, ...] = tuple(chapters)
        self.quiz_questions: Tuple[QuizQuestion, ...] = tuple(quiz_questions)
        self.phrases: Tuple[Phrase, ...] = tuple(phrases)
        self._by_id = {chapter.id: chapter for chapter in self.chapters}

    @property
    def total_chapters(self) -> int:
        return len(self.chapters)

    def get_chapter(self, chapter_id: int) -> Chapter:
        """Возвращает главу или бросает UnknownChapter."""
        chapter = self._by_id.get(chapter_id)
        if chapter is None:
            raise UnknownChapter(chapter_id)
        return chapter

    def get_section(self, chapter_id: int, section_id: int) -> Section:
        """Возвращает раздел главы или бросает UnknownSection."""
        chapter = self.get_chapter(chapter_id)
        for section in chapter.sections:
            if section.id == section_id:
                return section
        raise UnknownSection(chapter_id, section_id)

    def find_phrase(self, text: str) -> Optional[Phrase]:
        """Ищет фразу разговорника, упомянутую в тексте."""
        lowered = text.lower()
        for phrase in self.phrases:
            if phrase.russian.lower() in lowered or phrase.esperanto.lower() in lowered:
                return phrase
        return None


default_catalog = CourseCatalog()
