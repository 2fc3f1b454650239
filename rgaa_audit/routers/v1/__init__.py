"""v1 router package — all /api/v1/* endpoints live here.

Files:
  audits.py   — edit-token routes: audit CRUD, publication, results, example images
  reports.py  — consult-token routes: read-only audit report

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to rgaa_audit/services/.
"""
