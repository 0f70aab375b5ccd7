"""SQLAlchemy ORM Models for the TeachHub Database Schema"""
from teachhub.models.user import User
from teachhub.models.batch import Batch
from teachhub.models.section import Section
from teachhub.models.lesson import Lesson
from teachhub.models.note import Note
from teachhub.models.enrollment import Enrollment
from teachhub.models.notification import Notification

__all__ = [
    "User",
    "Batch",
    "Section",
    "Lesson",
    "Note",
    "Enrollment",
    "Notification",
]
