"""Database Metadata — declarative Base shared by models, migrations, and test fixtures.

Invariants:
    - All sessions are async (AsyncSession); engines live in infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL (native async, no thread pool overhead)
"""
