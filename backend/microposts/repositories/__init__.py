"""
Microposts Backend - Repositories (Row Store)
===============================================

What:  Thin async data-access layer over SQLAlchemy.
How:   Each operation is one atomic get/create/update/delete keyed by an
       opaque string id. Missing rows come back as None; deciding whether
       that is a 404 belongs to the services.
"""
