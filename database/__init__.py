# database/__init__.py
"""Persistence of the shared documents every engine and UI surface reads."""

from .models import Base, StateDocument
from .state_store import ConcurrentUpdateError, SharedStateStore

__all__ = ['Base', 'StateDocument', 'SharedStateStore', 'ConcurrentUpdateError']
