"""Persistence of both sides of every exchange.

Backends:
    - SupabaseMessageStore: hosted Postgres table via PostgREST
    - InMemoryMessageStore: process-local list for development and tests
"""

from src.store.base import MessageStore, StoreError
from src.store.memory import InMemoryMessageStore
from src.store.supabase import SupabaseMessageStore

__all__ = ["InMemoryMessageStore", "MessageStore", "StoreError", "SupabaseMessageStore"]
