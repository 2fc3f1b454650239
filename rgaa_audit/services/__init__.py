"""Services package — all business logic lives here, never in routers.

Files:
  audit.py      — audit lifecycle: create, update, publish, delete, NotFound vs Gone
  reconcile.py  — pure diff of a stored collection against a desired one
  results.py    — criterion result matrix, batch upsert, example images
  report.py     — report statistics computed from stored results
  storage.py    — file storage for example image bytes
  notifier.py   — "audit created" notification

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
