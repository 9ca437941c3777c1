"""Data stores for persistence and caching.

Stores handle:
- PostgreSQL: engine, transactional sessions, ORM base
- Redis: guide summary caching, TTL policies

No business/payout logic in stores - that belongs in services.
"""
