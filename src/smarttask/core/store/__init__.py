"""SmartTask Core Store -- 托管平台协作者

Protocol 契约 + Supabase（GoTrue/PostgREST）实现。
"""

from .protocols import Backend, BackendSession, IdentityService, TaskStore
from .supabase import (
    SupabaseBackend,
    SupabaseIdentityService,
    SupabaseSession,
    SupabaseTaskStore,
)

__all__ = [
    "Backend",
    "BackendSession",
    "IdentityService",
    "TaskStore",
    "SupabaseBackend",
    "SupabaseSession",
    "SupabaseIdentityService",
    "SupabaseTaskStore",
]
