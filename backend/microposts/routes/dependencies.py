"""
Microposts Backend - Route Dependencies
=========================================

What:  FastAPI dependencies shared by the routers.

    get_identity      → the Identity resolved by AuthenticationMiddleware
                        (anonymous if the middleware did not run)
    require_identity  → same, but raises AuthenticationRequiredError (401)
                        for anonymous callers
    get_app_settings  → the Settings instance the app was built with
"""

from fastapi import Depends, Request

from microposts.config import Settings
from microposts.exceptions import AuthenticationRequiredError
from microposts.identity import ANONYMOUS, Identity


def get_identity(request: Request) -> Identity:
    return getattr(request.state, "identity", ANONYMOUS)


def require_identity(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_authenticated:
        raise AuthenticationRequiredError()
    return identity


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
