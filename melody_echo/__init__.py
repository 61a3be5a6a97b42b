"""Melody Echo - sing a melody back and get note-by-note feedback."""

__version__ = "0.1.0"
