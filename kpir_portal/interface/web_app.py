"""Mini README: FastAPI surface for recovery routing and account security.

Structure:
    * create_application - application factory wiring middleware, pages, and
      JSON endpoints to the recovery gate and the auth services.
    * Request models - Pydantic bodies for the JSON endpoints.

Every ``GET`` page request passes through the recovery gate: a reset token
or ``type=recovery`` marker in the path or query sends the browser to the
canonical reset page with a ``307`` redirect. Fragments are invisible to the
server, so rendered pages post ``window.location`` to
``/api/recovery/resolve`` and let the browser replace its own location.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from ..auth import (
    LoginEventLog,
    PasswordResetService,
    PortalError,
    ResetTokenError,
    UserDirectory,
)
from ..auth.reset_tokens import Clock, utcnow
from ..configuration import PortalSettings, get_settings
from ..logging_utils import get_logger
from ..notifications import Mailer, OutboxMailer
from ..recovery import (
    Location,
    NavigationIntent,
    RecoveryRouteGate,
    RequestLocationProvider,
    extract_reset_token,
)

LOGGER = get_logger(__name__)

RESOLVE_URL = "/api/recovery/resolve"
RESET_REQUEST_MESSAGE = "If the account exists, a password reset e-mail has been sent"


class LocationPayload(BaseModel):
    pathname: str = "/"
    search: str = ""
    hash: str = ""


class ResetRequestPayload(BaseModel):
    email: Optional[str] = None


class ResetVerifyPayload(BaseModel):
    token: Optional[str] = None
    new_password: Optional[str] = None


class LoginEventPayload(BaseModel):
    email: Optional[str] = None
    user_id: Optional[str] = None
    success: bool = False
    error_message: Optional[str] = None


class FailedLoginQuery(BaseModel):
    user_id: Optional[str] = None
    email: Optional[str] = None
    since: Optional[datetime] = None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def _client_ip(request: Request) -> Optional[str]:
    return request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip")


def create_application(
    settings: Optional[PortalSettings] = None,
    *,
    users: Optional[UserDirectory] = None,
    mailer: Optional[Mailer] = None,
    login_log: Optional[LoginEventLog] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    app = FastAPI(title="KPiR Portal", version="0.1.0")
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

    users = users if users is not None else UserDirectory()
    mailer = mailer if mailer is not None else OutboxMailer()
    login_log = login_log if login_log is not None else LoginEventLog(clock=clock)
    reset_service = PasswordResetService(
        users,
        mailer,
        app_base_url=settings.app_base_url,
        ttl_minutes=settings.reset_token_ttl_minutes,
        min_password_length=settings.min_password_length,
        clock=clock,
    )

    app.state.settings = settings
    app.state.users = users
    app.state.mailer = mailer
    app.state.login_log = login_log
    app.state.reset_service = reset_service

    def render_reset_page(
        request: Request,
        token: Optional[str],
        *,
        error: Optional[str] = None,
        completed: bool = False,
        status_code: int = 200,
    ) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "reset_password.html",
            {
                "token": token,
                "error": error,
                "completed": completed,
                "reset_path": settings.reset_path,
                "resolve_url": RESOLVE_URL,
                "min_password_length": settings.min_password_length,
            },
            status_code=status_code,
        )

    @app.middleware("http")
    async def recovery_redirect(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Send recovery links arriving on any page to the reset route."""

        if request.method != "GET" or request.url.path.startswith("/api/"):
            return await call_next(request)

        issued: List[NavigationIntent] = []

        def navigate(target: NavigationIntent, *, replace: bool) -> None:
            issued.append(target)

        gate = RecoveryRouteGate(navigate, reset_path=settings.reset_path)
        gate.observe(RequestLocationProvider.from_request(request))
        if issued:
            return RedirectResponse(issued[0].to_url(), status_code=307)
        return await call_next(request)

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        """Render the landing page carrying the client-side recovery check."""

        return templates.TemplateResponse(request, "index.html", {"resolve_url": RESOLVE_URL})

    @app.get(settings.reset_path, response_class=HTMLResponse)
    async def reset_password_page(request: Request) -> HTMLResponse:
        """Read the token from this page's own URL and show the reset form."""

        location = RequestLocationProvider.from_request(request).current()
        token = extract_reset_token(location)
        if token is None:
            LOGGER.debug("Reset page opened without a token")
            return render_reset_page(request, None)
        try:
            reset_service.lookup(token)
        except ResetTokenError as error:
            return render_reset_page(request, token, error=str(error), status_code=400)
        return render_reset_page(request, token)

    @app.post(settings.reset_path, response_class=HTMLResponse)
    async def reset_password_submit(
        request: Request,
        token: str = Form(...),
        new_password: str = Form(...),
        confirm_password: str = Form(...),
    ) -> HTMLResponse:
        """Complete a reset from the HTML form."""

        if new_password != confirm_password:
            return render_reset_page(
                request, token, error="The passwords do not match", status_code=400
            )
        try:
            reset_service.verify_reset(token, new_password)
        except (PortalError, ValueError) as error:
            return render_reset_page(request, token, error=str(error), status_code=400)
        return render_reset_page(request, token, completed=True)

    @app.post(RESOLVE_URL)
    async def resolve_recovery(payload: LocationPayload) -> JSONResponse:
        """Evaluate a browser location and return the navigation to perform."""

        location = Location.from_components(payload.pathname, payload.search, payload.hash)
        intent = RecoveryRouteGate(_ignore_navigation, reset_path=settings.reset_path).evaluate(
            location
        )
        token = extract_reset_token(location)
        return JSONResponse(
            {
                "navigate": intent.as_dict() if intent else None,
                "replace": intent is not None,
                "token_detected": token is not None,
                "token": token,
            }
        )

    @app.post("/api/password-reset/request")
    async def request_password_reset(payload: ResetRequestPayload) -> JSONResponse:
        """Issue a reset token and e-mail the link; silent for unknown e-mails."""

        try:
            reset_service.request_reset(payload.email or "")
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse({"success": True, "message": RESET_REQUEST_MESSAGE})

    @app.post("/api/password-reset/verify")
    async def verify_password_reset(payload: ResetVerifyPayload) -> JSONResponse:
        """Consume a reset token; failures are reported in the body with 200."""

        try:
            reset_service.verify_reset(payload.token or "", payload.new_password or "")
        except (PortalError, ValueError) as error:
            LOGGER.info("Password reset rejected: %s", error)
            return JSONResponse({"success": False, "error": str(error)})
        return JSONResponse({"success": True, "message": "Password changed successfully"})

    @app.post("/api/login-events")
    async def log_login_event(payload: LoginEventPayload, request: Request) -> JSONResponse:
        """Record a sign-in attempt with the caller's address and user agent."""

        try:
            event = login_log.record(
                payload.email or "",
                success=payload.success,
                user_id=payload.user_id,
                error_message=payload.error_message,
                ip=_client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse({"success": True, "event_id": event.event_id})

    @app.post("/api/login-events/failed-count")
    async def failed_login_count(payload: FailedLoginQuery) -> JSONResponse:
        """Count failed attempts since a timestamp for a user id or e-mail."""

        if (not payload.user_id and not payload.email) or payload.since is None:
            raise HTTPException(
                status_code=400, detail="Missing user_id/email or since parameter"
            )
        count = login_log.count_failed(
            _as_utc(payload.since), user_id=payload.user_id, email=payload.email
        )
        return JSONResponse({"count": count})

    @app.get("/api/login-events/lockout")
    async def lockout(email: Optional[str] = None, user_id: Optional[str] = None) -> JSONResponse:
        """Report whether recent failures block further sign-in attempts."""

        try:
            status = login_log.lockout_status(
                window_minutes=settings.failed_login_window_minutes,
                threshold=settings.max_failed_logins,
                user_id=user_id,
                email=email,
            )
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse(
            {"locked": status.locked, "count": status.count, "threshold": status.threshold}
        )

    return app


def _ignore_navigation(target: NavigationIntent, *, replace: bool) -> None:
    """Navigator for pure evaluation; the browser performs the navigation."""
