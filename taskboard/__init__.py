"""
Taskboard - task management backend.

Users register and authenticate, create tasks with due dates and
categories, share tasks through opaque tokens and comment on them.
"""

__version__ = "1.0.0"
