"""Data access helpers."""

from .users import UserRepository

__all__ = ["UserRepository"]
