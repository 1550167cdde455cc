# Routes package init
"""
Noteful Backend — API Routes Package
======================================

Route Inventory:
    - users.py:    POST /api/users                  (register, no token)
    - auth.py:     POST /api/login                  (no token)
                   POST /api/refresh
    - folders.py:  GET/POST /api/folders, GET/PUT/DELETE /api/folders/{id}
    - tags.py:     GET/POST /api/tags,    GET/PUT/DELETE /api/tags/{id}
    - notes.py:    GET/POST /api/notes,   GET/PUT/DELETE /api/notes/{id}
    - health.py:   GET /health

Routes stay thin: validate the path/query/body, call a service, and shape
the HTTP response (status, Location header). Status codes for failures are
assigned in one place, `noteful.main.register_exception_handlers`.
"""
