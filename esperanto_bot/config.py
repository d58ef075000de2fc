"""
Модуль для настройки конфигурации проекта.
Значения читаются из файла .env в корне проекта и из переменных окружения.
"""
import os
import pathlib
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Получаем путь к корневой директории проекта
BASE_DIR = pathlib.Path(__file__).parent.parent.absolute()

# Загружаем переменные окружения из файла .env
env_path = os.path.join(BASE_DIR, ".env")
load_dotenv(env_path)


def _get_int(name: str, default: int) -> int:
    """Читает целое число из окружения."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Некорректное значение {name}={value!r}, используется {default}")
        return default


def _get_float(name: str, default: float) -> float:
    """Читает дробное число из окружения."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Некорректное значение {name}={value!r}, используется {default}")
        return default


# Токен телеграм бота
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN")
BOT_USERNAME = os.getenv("BOT_USERNAME", "YOUR_BOT_USERNAME")

# Настройки хранилища. Значение "memory" включает хранение в памяти процесса
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///esperanto_bot.db")

# Веб-приложение (Telegram Mini App)
DEFAULT_WEBAPP_URL = "https://esperanto-leto-miniapp.onrender.com"
WEBAPP_URL = os.getenv("WEBAPP_URL", DEFAULT_WEBAPP_URL)

# Настройки AI-помощника (OpenAI-совместимый API)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")
OPENAI_MAX_TOKENS = _get_int("OPENAI_MAX_TOKENS", 500)
OPENAI_TEMPERATURE = _get_float("OPENAI_TEMPERATURE", 0.7)
OPENAI_TIMEOUT = _get_int("OPENAI_TIMEOUT", 30)
OPENAI_PLACEHOLDER_KEYS = ("your_openai_api_key", "")
MAX_INPUT_LENGTH = 4000  # Максимальная длина сообщения для AI

# Настройки расчета прогресса
TOTAL_CHAPTERS = 14  # Количество глав в курсе
MAX_TESTS_COUNTED = 10  # Сколько тестов учитывается в прогрессе
CHAPTER_WEIGHT = 0.8  # 80% прогресса дают главы
TESTS_WEIGHT = 0.2  # 20% прогресса дают тесты
ADVANCED_THRESHOLD = 80
INTERMEDIATE_THRESHOLD = 40

# История диалога с AI-помощником
HISTORY_LIMIT = 20

# Логирование
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = BASE_DIR / "logs"

# Команды для запуска бота
START_COMMANDS = ["старт", "start", "начать", "saluton", "/start"]
