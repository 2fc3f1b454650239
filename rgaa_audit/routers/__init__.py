"""Routers package — HTTP endpoint definitions.

Files:
  v1/         — Versioned API routes (/api/v1/*)
  uploads.py  — Example image bytes served at settings.storage_url
"""
