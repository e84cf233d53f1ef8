"""v1 router package — all /api/v1/* endpoints live here.

Files:
  product_requests.py  — buyers' product requests (create, list, detail, updates)

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
