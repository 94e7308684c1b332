# Services package init
"""
Microposts Backend - Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and repositories
       (persistence).
How:   Services take a session plus plain values or request schemas, apply
       the rules, and return schemas or raise MicroPostsError subclasses.
       Routes translate nothing themselves; the exception handlers in
       main.py pick the status codes.

Service Inventory:
    - authorization.has_access: "may this user change this post?"
    - UserService:      registration, login, profiles, the user listing
    - FollowService:    follow toggling and follow listings
    - MicroPostService: the paginated feed and post create/edit/delete

Services are unit-tested against an in-memory database without any HTTP
in between.
"""
