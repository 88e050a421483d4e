"""Data models for the Book Tracker application."""

from booktracker.models.book import Book, BookCreate, BookFormat, BookStatus, BookUpdate
from booktracker.models.note import Note
from booktracker.models.reading_event import ReadingEvent

__all__ = [
    "Book",
    "BookCreate",
    "BookFormat",
    "BookStatus",
    "BookUpdate",
    "Note",
    "ReadingEvent",
]
