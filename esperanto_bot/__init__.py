"""
Telegram бот для изучения эсперанто.
"""

__version__ = "1.0.0"
