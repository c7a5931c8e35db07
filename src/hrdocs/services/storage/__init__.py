"""
Storage service package.
Provides identity verification and document record persistence backends.
"""

from .memory import InMemoryDocumentStore, StaticTokenVerifier
from .supabase import SupabaseDocumentStore, SupabaseIdentityVerifier

__all__ = [
    'InMemoryDocumentStore',
    'StaticTokenVerifier',
    'SupabaseDocumentStore',
    'SupabaseIdentityVerifier'
]
