"""Services Layer — async orchestration around the pure core.

Invariants:
    - Services read through repositories, call core rules, then write through repositories
    - No service imports FastAPI; routes build services per request
"""
