"""Daily job matching, assignment and task scheduling."""

__version__ = "0.1.0"
