"""Mini README: Core package initialiser for the KPiR portal service.

The package bundles the recovery-link routing logic (``recovery``), the
account-security services backing it (``auth``), the e-mail outbox
(``notifications``) and the FastAPI surface (``interface``). Only the
logging helper is re-exported here so importing the package stays cheap.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
