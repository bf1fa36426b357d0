# Routes package init
"""
SnapShare Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles a specific resource or action.

Route Inventory:
    - auth.py:    POST /api/auth/register    (create account, returns token)
                  POST /api/auth/login       (exchange credentials for token)
    - users.py:   GET  /api/users/{user_id}  (owner or creator only)
    - photos.py:  GET  /api/photos[/{photo_id}]  (public)
                  POST|PUT|DELETE /api/photos...   (creators, poster only for PUT|DELETE)
                  POST /api/photos/{photo_id}/like (signed in)
    - comments.py: GET /api/comments/photo/{photo_id} (public)
                  POST /api/comments              (signed in)
    - health.py:  GET  /health               (service health check)

Routes stay thin: they read the body or path, call AuthService or
PhotoService, and pick the status code. Access checks are declared as dependencies
(app/dependencies.py), never written inline.
"""
