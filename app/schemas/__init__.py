"""Pydantic schemas package.

Folder intent:
  common.py           — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  product_request.py  — product request DTOs and the detail read model
"""
