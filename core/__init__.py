"""
Core - Shared infrastructure for Quill

This package provides:
- Cache store, key policy and mutation-triggered invalidation (core.cache)
- Role-aware DRF permission classes (core.permissions)
"""
