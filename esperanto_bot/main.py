"""
Точка входа в бот для изучения эсперанто.
"""
import logging
import os
import sys
import traceback
from typing import Optional

from telegram import Update
from telegram.ext import Application

from esperanto_bot.config import DATABASE_URL, LOG_DIR, LOG_LEVEL, TELEGRAM_TOKEN
from esperanto_bot.database import SqlUserStore, check_connection, close_db, get_db


# Настройка логирования
def setup_logging(level: str = LOG_LEVEL, log_dir=LOG_DIR):
    """Настройка системы логирования."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    # Создаем директорию для логов
    os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Обработчик для файла
    file_handler = logging.FileHandler(os.path.join(log_dir, "bot.log"), encoding='utf-8')
    file_handler.setFormatter(formatter)
    file_handler.setLevel(log_level)

    # Обработчик для консоли
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    logging.basicConfig(
        level=log_level,
        handlers=[file_handler, console_handler]
    )
    # httpx логирует каждый запрос к Telegram API
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logging.getLogger(__name__)


class EsperantoBot:
    """Класс для управления ботом."""

    def __init__(self, token: Optional[str] = TELEGRAM_TOKEN):
        self.logger = setup_logging()
        self.token = token
        self.application: Optional[Application] = None

    def check_configuration(self) -> bool:
        """Проверка конфигурации."""
        if not self.token:
            self.logger.error("❌ TELEGRAM_TOKEN не установлен")
            self.logger.error("Создайте файл .env и добавьте токен от @BotFather")
            return False

        if len(self.token) < 20:
            self.logger.error("❌ TELEGRAM_TOKEN выглядит некорректно")
            return False

        self.logger.info("✅ Конфигурация загружена")
        self.logger.info(f"✅ База данных: {DATABASE_URL}")
        return True

    def initialize(self) -> bool:
        """Создает движок прогресса и Telegram приложение."""
        if not self.check_configuration():
            return False

        from esperanto_bot.bot.handlers import get_engine, setup_handlers

        engine = get_engine()
        if isinstance(engine.store, SqlUserStore):
            db = get_db()
            try:
                if not check_connection(db):
                    return False
            finally:
                close_db(db)
        self.logger.info(f"✅ Хранилище готово, пользователей: {engine.user_count()}")

        self.application = Application.builder().token(self.token).build()
        self.application.add_error_handler(self._error_handler)
        setup_handlers(self.application)

        self.logger.info("✅ Telegram приложение создано")
        return True

    async def _error_handler(self, update: object, context):
        """Обработчик ошибок."""
        error = context.error
        self.logger.error(f"Ошибка при обработке обновления: {update}")
        self.logger.error("".join(traceback.format_exception(type(error), error, error.__traceback__)))

        if isinstance(update, Update) and update.effective_chat:
            try:
                await context.bot.send_message(
                    chat_id=update.effective_chat.id,
                    text="😔 Произошла ошибка при обработке вашего запроса. Пожалуйста, попробуйте еще раз."
                )
            except Exception as e:
                self.logger.error(f"Не удалось отправить сообщение об ошибке пользователю: {e}")

    def start(self):
        """Запуск бота."""
        self.logger.info("📡 Начинаю polling...")
        self.application.run_polling(
            allowed_updates=Update.ALL_TYPES,
            drop_pending_updates=True
        )


def main() -> int:
    """Основная функция запуска."""
    bot = EsperantoBot()
    if not bot.initialize():
        print("❌ Не удалось инициализировать бота")
        return 1

    try:
        bot.start()
    except KeyboardInterrupt:
        print("\n👋 До свидания!")
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
