# src/services/__init__.py
"""
Клиентские сервисы приложения.

Сервисы:
- rides: заказ поездки, статус, live-обновления поездки и позиции водителя
- admin: статистика панели администратора и её live-обновления
"""

__all__: list[str] = []
