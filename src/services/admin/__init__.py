# src/services/admin/__init__.py
from src.services.admin.service import AdminService

__all__ = ["AdminService"]
