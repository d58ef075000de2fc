"""
Инициализация модуля базы данных.
"""

from .models import (
    Base,
    UserRecordRow,
    create_db_engine,
    init_db,
    get_db,
    close_db,
    check_connection,
)

from .operations import (
    get_user_record,
    save_user_record,
    delete_user_record,
    count_user_records,
    iter_user_ids,
)

from .stores import (
    UserStore,
    InMemoryUserStore,
    SqlUserStore,
    create_store,
)

__all__ = [
    # Модели
    'Base',
    'UserRecordRow',

    # Функции работы с БД
    'create_db_engine',
    'init_db',
    'get_db',
    'close_db',
    'check_connection',

    # Операции с записями учеников
    'get_user_record',
    'save_user_record',
    'delete_user_record',
    'count_user_records',
    'iter_user_ids',

    # Хранилища
    'UserStore',
    'InMemoryUserStore',
    'SqlUserStore',
    'create_store',
]
