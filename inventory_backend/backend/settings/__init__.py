# backend/settings/__init__.py
"""
PATH: backend/settings/__init__.py

Settings package entrypoint. Nothing is imported here; select a concrete module
with DJANGO_SETTINGS_MODULE:
- backend.settings.dev   (local development)
- backend.settings.test  (test runs: in-memory SQLite)
- backend.settings.prod  (production, PostgreSQL only)
"""
