from .base import Base
from .session import create_engine_from_settings, create_session_factory, get_db_session
from .models import ItemModel

__all__ = [
    "Base",
    "create_engine_from_settings",
    "create_session_factory",
    "get_db_session",
    "ItemModel",
]
