"""
Хранилища записей учеников.

Движок прогресса работает с абстрактным UserStore, поэтому хранение в памяти
можно заменить базой данных без изменения логики обучения.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from esperanto_bot.config import DATABASE_URL
from esperanto_bot.database.models import close_db, create_db_engine, init_db
from esperanto_bot.database.operations import (
    count_user_records,
    delete_user_record,
    get_user_record,
    iter_user_ids,
    save_user_record,
)
from esperanto_bot.learning.models import UserRecord

logger = logging.getLogger(__name__)

MEMORY_STORE_URL = "memory"


class UserStore(ABC):
    """Интерфейс хранилища учеников."""

    @abstractmethod
    def get(self, user_id: int) -> Optional[UserRecord]:
        """Возвращает запись или None."""

    @abstractmethod
    def put(self, record: UserRecord) -> None:
        """Сохраняет запись."""

    @abstractmethod
    def delete(self, user_id: int) -> bool:
        """Удаляет запись."""

    @abstractmethod
    def count(self) -> int:
        """Количество записей."""

    @abstractmethod
    def user_ids(self) -> List[int]:
        """Идентификаторы всех учеников."""


class InMemoryUserStore(UserStore):
    """Хранение в памяти процесса. Данные теряются при перезапуске."""

    def __init__(self):
        self._records: Dict[int, UserRecord] = {}

    def get(self, user_id: int) -> Optional[UserRecord]:
        return self._records.get(user_id)

    def put(self, record: UserRecord) -> None:
        self._records[record.user_id] = record

    def delete(self, user_id: int) -> bool:
        return self._records.pop(user_id, None) is not None

    def count(self) -> int:
        return len(self._records)

    def user_ids(self) -> List[int]:
        return list(self._records)


class SqlUserStore(UserStore):
    """Хранение в базе данных через SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, user_id: int) -> Optional[UserRecord]:
        db = self.session_factory()
        try:
            return get_user_record(db, user_id)
        finally:
            close_db(db)

    def put(self, record: UserRecord) -> None:
        db = self.session_factory()
        try:
            save_user_record(db, record)
        finally:
            close_db(db)

    def delete(self, user_id: int) -> bool:
        db = self.session_factory()
        try:
            return delete_user_record(db, user_id)
        finally:
            close_db(db)

    def count(self) -> int:
        db = self.session_factory()
        try:
            return count_user_records(db)
        finally:
            close_db(db)

    def user_ids(self) -> List[int]:
        db = self.session_factory()
        try:
            return list(iter_user_ids(db))
        finally:
            close_db(db)


def create_store(url: str = DATABASE_URL) -> UserStore:
    """Создает хранилище по адресу из конфигурации."""
    if url == MEMORY_STORE_URL:
        logger.info("Используется хранилище в памяти")
        return InMemoryUserStore()
    logger.info(f"Используется база данных: {url}")
    return SqlUserStore(init_db(create_db_engine(url)))
