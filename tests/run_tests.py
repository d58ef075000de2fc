"""
Скрипт для запуска всех тестов проекта.

Использование:
    python tests/run_tests.py            # все тесты
    python tests/run_tests.py learning   # только tests/test_learning.py
"""
import os
import sys
import unittest

# Корень проекта в пути импорта, чтобы пакет esperanto_bot находился без установки
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def main(argv):
    pattern = f"test_{argv[1]}.py" if len(argv) > 1 else "test_*.py"
    start_dir = os.path.dirname(os.path.abspath(__file__))
    suite = unittest.TestLoader().discover(start_dir, pattern=pattern)

    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return 0 if result.wasSuccessful() else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
