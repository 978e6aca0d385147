"""Infrastructure Layer — database sessions, repositories, and logging setup.

Invariants:
    - Implements the Protocols declared in core/repository_protocols.py
    - The only layer that talks to SQLAlchemy directly
"""
