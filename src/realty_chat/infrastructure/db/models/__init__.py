"""Import all models so Base.metadata sees every table."""
from realty_chat.infrastructure.db.models.message import MessageModel
from realty_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "MessageModel",
    "UserModel",
]
