"""Import all models so ``Base.metadata.create_all`` sees every table."""
from portal_chat.infrastructure.db.models.message import MessageModel
from portal_chat.infrastructure.db.models.profile import AdminModel, FacultyModel, StudentModel

__all__ = [
    "AdminModel",
    "FacultyModel",
    "MessageModel",
    "StudentModel",
]
