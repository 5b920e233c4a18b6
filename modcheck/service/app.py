"""FastAPI application entrypoint for modcheck service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import ConfigError, ModcheckError, WorkspaceError
from ..orchestrator import AuditOutcome, Orchestrator


class AuditRequest(BaseModel):
    path: str
    checkers: Optional[List[str]] = None
    properties: Optional[List[str]] = None
    formats: Optional[List[str]] = None
    fail_on_issue: Optional[bool] = None
    timeout: Optional[float] = None


class AuditResponse(BaseModel):
    issue_count: int
    failed: bool
    warnings: List[str]
    report_paths: Dict[str, str]


class CheckersResponse(BaseModel):
    checkers: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing modcheck operations."""

    app = FastAPI(title="modcheck Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # One orchestrator per request keeps runs isolated.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/checkers", response_model=CheckersResponse)
    async def list_checkers(
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> CheckersResponse:
        return CheckersResponse(checkers=orchestrator.registry.list_checkers())

    @app.post("/audit", response_model=AuditResponse)
    async def audit(
        payload: AuditRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AuditResponse:
        def _run_audit() -> AuditOutcome:
            return orchestrator.run(
                payload.path,
                checkers=payload.checkers,
                properties=payload.properties,
                formats=payload.formats,
                fail_on_issue=payload.fail_on_issue,
                timeout=payload.timeout,
            )

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run_audit)
        return AuditResponse(
            issue_count=outcome.issue_count,
            failed=outcome.failed,
            warnings=outcome.warnings,
            report_paths={name: str(path) for name, path in outcome.report_paths.items()},
        )

    @app.exception_handler(WorkspaceError)
    async def workspace_error_handler(_: Any, exc: WorkspaceError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ModcheckError)
    async def modcheck_error_handler(_: Any, exc: ModcheckError) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
