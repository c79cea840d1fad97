"""Identifier generation"""
from uuid import uuid4


def new_id() -> str:
    """Random 32-char hex identifier for habits, subtasks, check-ins and cards"""
    return uuid4().hex
