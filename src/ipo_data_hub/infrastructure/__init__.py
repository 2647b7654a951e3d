"""
Infrastructure Layer

Reusable services that support the allotment domain without containing
registrar business rules themselves.

Components:
- resolution: Company-code resolution with per-registrar caches
- factory: Wiring of transport, resolver, checkers and dispatcher
"""

__all__: list[str] = []
