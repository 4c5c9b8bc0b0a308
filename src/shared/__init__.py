# src/shared/__init__.py
"""
Общие модели, используемые клиентом и сервисами.
"""
