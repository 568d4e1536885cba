"""Mini README: Web interface for the KPiR portal.

Exports the FastAPI application factory serving the reset page, the
recovery resolver, and the account-security JSON endpoints.
"""

from .web_app import create_application

__all__ = ["create_application"]
