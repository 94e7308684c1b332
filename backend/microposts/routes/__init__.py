# Routes package init
"""
Microposts Backend - API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:        /auth/register, /auth/login, /auth/logout, /auth/me
    - users.py:       /users, /users/{id}, follows and follower listings
    - microposts.py:  /posts (paginated feed), /posts/{id}
    - health.py:      /health

Routes are thin: they pull the identity and inputs out of the request,
call a service, and pick the status code. Business rules live in services.
"""
