"""Browser-based console for managing records on the user-records service."""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from .config import ConsoleSettings, load_settings
from .controller import DashboardController
from .models import Record
from .notifications import NotificationCenter
from .sessions import DashboardSessionManager
from .transport import RecordTransport, TransportError


TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

SESSION_KEY = "dashboard_token"

logger = logging.getLogger("userconsole.web")


def _use_secure_cookies() -> bool:
    raw = os.getenv("USER_CONSOLE_SESSION_SECURE")
    if raw is None:
        return False
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def create_app(
    *,
    settings: Optional[ConsoleSettings] = None,
    transport: Optional[RecordTransport] = None,
    session_secret: Optional[str] = None,
) -> FastAPI:
    """Create the console web application."""

    if settings is None:
        settings = load_settings()
    if session_secret is not None:
        settings = settings.with_session_secret(session_secret)
    if not settings.session_secret:
        raise RuntimeError(
            "USER_CONSOLE_SESSION_SECRET must be configured to use the web console"
        )

    owns_transport = transport is None
    if transport is None:
        transport = RecordTransport(settings.endpoints, timeout=settings.timeout)

    def _new_controller() -> DashboardController:
        return DashboardController(
            transport,
            notifications=NotificationCenter(delay=settings.notification_seconds),
        )

    sessions = DashboardSessionManager(_new_controller, ttl=settings.session_ttl)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            for controller in sessions.drain():
                await controller.unmount()
            if owns_transport:
                await transport.aclose()

    app = FastAPI(
        title="User Management Console",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.transport = transport
    app.state.sessions = sessions

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie="user_console_session",
        https_only=_use_secure_cookies(),
        same_site="lax",
    )

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

    async def _controller_for(request: Request) -> DashboardController:
        for expired in sessions.expire_idle():
            await expired.unmount()

        token = request.session.get(SESSION_KEY)
        controller = sessions.resolve(token)
        if controller is None:
            token, controller = sessions.create()
            request.session[SESSION_KEY] = token
            logger.info("Mounted a new dashboard session")
        if not controller.mounted:
            await controller.mount()
        return controller

    def _find_record(controller: DashboardController, record_id: str) -> Record:
        record = controller.list_view.find(record_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return record

    def _redirect_to_dashboard(request: Request) -> RedirectResponse:
        return RedirectResponse(
            request.url_for("dashboard"),
            status_code=status.HTTP_303_SEE_OTHER,
        )

    @app.get("/", response_class=HTMLResponse)
    async def root(request: Request):
        return _redirect_to_dashboard(request)

    @app.get("/healthz")
    async def healthz():
        return JSONResponse({"status": "ok", "sessions": len(sessions)})

    @app.get("/dashboard", response_class=HTMLResponse, name="dashboard")
    async def dashboard(request: Request):
        controller = await _controller_for(request)
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "form": controller.form,
                "listing": controller.list_view.render(),
                "notification": controller.notifications.snapshot(),
                "state": controller.state,
            },
        )

    @app.post("/dashboard/refresh", name="refresh_records")
    async def refresh_records(request: Request):
        controller = await _controller_for(request)
        await controller.refresh()
        return _redirect_to_dashboard(request)

    @app.post("/dashboard/close", name="close_dashboard")
    async def close_dashboard(request: Request):
        controller = sessions.discard(request.session.pop(SESSION_KEY, None))
        if controller is not None:
            await controller.unmount()
            logger.info("Dashboard session closed")
        return JSONResponse({"status": "closed"})

    @app.post("/records/new", name="open_create_form")
    async def open_create_form(request: Request):
        controller = await _controller_for(request)
        controller.open_create()
        return _redirect_to_dashboard(request)

    @app.post("/records/form", name="submit_record_form")
    async def submit_record_form(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        age: str = Form(""),
    ):
        controller = await _controller_for(request)
        form = controller.form
        if form is None or form.disabled:
            return _redirect_to_dashboard(request)
        form.update({"name": name.strip(), "email": email.strip(), "age": age})
        await form.submit()
        return _redirect_to_dashboard(request)

    @app.post("/records/form/cancel", name="cancel_record_form")
    async def cancel_record_form(request: Request):
        controller = await _controller_for(request)
        if controller.form is not None:
            controller.form.cancel()
        return _redirect_to_dashboard(request)

    @app.post("/records/{record_id}/edit", name="edit_record")
    async def edit_record(request: Request, record_id: str):
        controller = await _controller_for(request)
        controller.list_view.edit(_find_record(controller, record_id))
        return _redirect_to_dashboard(request)

    @app.get("/records/{record_id}/delete", response_class=HTMLResponse, name="confirm_delete")
    async def confirm_delete(request: Request, record_id: str):
        controller = await _controller_for(request)
        record = _find_record(controller, record_id)
        return templates.TemplateResponse(
            request,
            "confirm_delete.html",
            {"record": record},
        )

    @app.post("/records/{record_id}/delete", name="delete_record")
    async def delete_record(request: Request, record_id: str, confirm: str = Form("")):
        controller = await _controller_for(request)
        record = _find_record(controller, record_id)
        confirmed = confirm.strip().lower() == "yes"
        await controller.delete_record(record, confirm=lambda _record: confirmed)
        return _redirect_to_dashboard(request)

    @app.get("/records/{record_id}", name="record_detail")
    async def record_detail(record_id: str):
        try:
            record = await transport.get_by_id(record_id)
        except TransportError as exc:
            if exc.is_not_found:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to fetch user",
            ) from exc
        return JSONResponse(record.model_dump(mode="json", by_alias=True))

    return app


__all__ = ["create_app"]
