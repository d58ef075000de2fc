"""
Операции для работы с записями учеников в базе данных.
"""
import logging
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from esperanto_bot.database.models import UserRecordRow
from esperanto_bot.learning.models import UserRecord, record_from_dict, record_to_dict

logger = logging.getLogger(__name__)


def get_user_record(db: Session, telegram_id: int) -> Optional[UserRecord]:
    """Получает запись ученика по Telegram ID."""
    try:
        row = db.get(UserRecordRow, telegram_id)
        return record_from_dict(row.data) if row else None
    except Exception as e:
        logger.error(f"Ошибка при получении пользователя {telegram_id}: {e}")
        raise


def save_user_record(db: Session, record: UserRecord) -> UserRecord:
    """Создает или обновляет запись ученика."""
    try:
        row = db.get(UserRecordRow, record.user_id)
        data = record_to_dict(record)
        if row:
            row.data = data
        else:
            db.add(UserRecordRow(telegram_id=record.user_id, data=data))
        db.commit()
        return record
    except Exception as e:
        logger.error(f"Ошибка при сохранении пользователя {record.user_id}: {e}")
        db.rollback()
        raise


def delete_user_record(db: Session, telegram_id: int) -> bool:
    """Удаляет запись ученика. Возвращает True, если запись была."""
    try:
        row = db.get(UserRecordRow, telegram_id)
        if not row:
            return False
        db.delete(row)
        db.commit()
        logger.info(f"Удален пользователь {telegram_id}")
        return True
    except Exception as e:
        logger.error(f"Ошибка при удалении пользователя {telegram_id}: {e}")
        db.rollback()
        raise


def count_user_records(db: Session) -> int:
    """Количество зарегистрированных учеников."""
    return db.query(UserRecordRow).count()


def iter_user_ids(db: Session) -> Iterator[int]:
    """Перебирает Telegram ID всех учеников."""
    for (telegram_id,) in db.query(UserRecordRow.telegram_id).order_by(UserRecordRow.telegram_id):
        yield telegram_id
