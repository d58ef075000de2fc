"""
Telegram-интерфейс бота: обработчики, клавиатуры и форматирование сообщений.
"""
