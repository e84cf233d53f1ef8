"""Services package — all business logic lives here, never in routers.

Files:
  product_request.py  — ProductRequestService (create / read / update requests)
  authorization.py    — allow/deny policy for request and status updates
  notification.py     — WebhookNotifier for delivery-status changes

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
