"""
Pytest suite for the Pickup Point Orders backend.

Markers:
- unit: rules, validators, cache backends, CLI parsing
- integration: SqlOrderStore against in-memory SQLite
- api: FastAPI routes over httpx ASGITransport
"""
