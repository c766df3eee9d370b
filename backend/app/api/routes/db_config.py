"""
Database connection config: read the active config (password masked) or switch to a new one.
A new config is only installed after a round-trip test succeeds.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError, field_validator

from app.config import coerce_port
from app.core.constants import DEFAULT_DB_PORT
from app.core.errors import STATUS_BAD_REQUEST, ConnectionFailure
from app.db.session import ConnectionManager, DbConfig, get_connection_manager

router = APIRouter()
logger = logging.getLogger(__name__)


class DbConfigBody(BaseModel):
    host: str = "localhost"
    port: int = DEFAULT_DB_PORT
    user: str = ""
    password: str | None = None  # blank or omitted keeps the active password
    database: str = ""

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, v):
        return coerce_port(v)

    @field_validator("host", "user", "database", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else str(v).strip()

    def to_config(self) -> DbConfig:
        return DbConfig(
            host=self.host or "localhost",
            port=self.port,
            user=self.user,
            password=self.password or "",
            database=self.database,
        )


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def _failure(message: str) -> JSONResponse:
    return JSONResponse(status_code=STATUS_BAD_REQUEST, content={"ok": False, "error": message})


@router.get("/config")
def get_config(manager: ConnectionManager = Depends(get_connection_manager)):
    """Active connection config; the password is always returned as ***."""
    return manager.get_config()


@router.post("/config")
async def set_config(
    request: Request,
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Test the submitted config, then switch the process-wide pool to it.
    Every failure (unparseable body, connection test) is a 400 {ok: false, error}; the
    previous config stays active.
    """
    try:
        body = DbConfigBody.model_validate_json(await request.body())
    except ValidationError as e:
        logger.warning("Rejected config body: %s", _validation_message(e))
        return _failure(_validation_message(e))
    try:
        await run_in_threadpool(manager.set_config, body.to_config(), keep_password=not body.password)
    except ConnectionFailure as e:
        return _failure(e.message)
    return {"ok": True}
