"""
Модели базы данных для хранения состояния учеников.
"""
import logging
from typing import Optional

from sqlalchemy import BigInteger, Column, DateTime, JSON, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.sql import func

from esperanto_bot.config import DATABASE_URL

logger = logging.getLogger(__name__)

# Создаем базовый класс
Base = declarative_base()


class UserRecordRow(Base):
    """Запись ученика в виде JSON-документа."""
    __tablename__ = "user_records"

    telegram_id = Column(BigInteger, primary_key=True, index=True, autoincrement=False)
    data = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """Создает движок базы данных."""
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {}
    )


_engine: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None


def init_db(engine: Optional[Engine] = None) -> sessionmaker:
    """Инициализирует базу данных и возвращает фабрику сессий."""
    global _engine, SessionLocal
    try:
        _engine = engine or create_db_engine()
        Base.metadata.create_all(bind=_engine)
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
        logger.info("База данных инициализирована успешно")
        return SessionLocal
    except Exception as e:
        logger.error(f"Ошибка при инициализации базы данных: {e}")
        raise


def get_db() -> Session:
    """Получает сессию базы данных."""
    if SessionLocal is None:
        init_db()
    return SessionLocal()


def close_db(db: Session):
    """Закрывает сессию базы данных."""
    try:
        db.close()
    except Exception as e:
        logger.error(f"Ошибка при закрытии сессии базы данных: {e}")


def check_connection(db: Session) -> bool:
    """Проверяет подключение к базе данных."""
    try:
        db.execute(text("SELECT 1"))
        logger.info("Подключение к базе данных успешно")
        return True
    except Exception as e:
        logger.error(f"Ошибка подключения к базе данных: {e}")
        return False
