"""Pydantic schemas package.

Folder intent:
  common.py   — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  audit.py    — audit create / update payloads and the edit-side audit view
  result.py   — criterion results, batch update payload, example images
  report.py   — public report computed from results
"""
