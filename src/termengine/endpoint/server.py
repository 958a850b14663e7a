"""FastAPI HTTP server for an engine session.

Stands in for the terminal widget of a page: committed lines and raw key
events come in over HTTP, and the rendered output is read back from the
session's scrollback buffer.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from termengine import __version__
from termengine.config.settings import Settings
from termengine.domain.models import CommandResult, KeyCombo, Keystroke, TextInput
from termengine.engine.session import EngineSession
from termengine.terminal.buffer import BufferedOutputSink

logger = logging.getLogger(__name__)


class LineRequest(BaseModel):
    line: str = Field(description="Committed input line (without the trailing Enter)")


class KeystrokeRequest(BaseModel):
    key: str = Field(description="Key name (e.g., 'Enter', 'Up', 'a')")


class KeyComboRequest(BaseModel):
    modifiers: list[str] = Field(description="Modifier keys (e.g., ['ctrl'])")
    key: str = Field(description="Main key in the combination")


class TextInputRequest(BaseModel):
    text: str = Field(description="Text to type")


class EndpointStatus(BaseModel):
    status: str = "ok"
    busy: bool = False
    reading: bool = False


def create_app(
    session: EngineSession | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.session.start()
        logger.info("Endpoint started")
        yield
        logger.info("Endpoint stopped")

    app = FastAPI(
        title="termengine Endpoint",
        description="HTTP line source and output sink for a termengine session",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.session = session or EngineSession(settings)

    @app.get("/health")
    async def health_check() -> EndpointStatus:
        s: EngineSession = app.state.session
        return EndpointStatus(status="ok", busy=s.is_busy, reading=s.reader.is_active)

    @app.post("/line")
    async def receive_line(request: LineRequest) -> CommandResult:
        s: EngineSession = app.state.session
        return await s.handle_line(request.line)

    @app.post("/keystroke")
    async def receive_keystroke(request: KeystrokeRequest) -> dict[str, str]:
        s: EngineSession = app.state.session
        if not s.handle_key(Keystroke(key=request.key)):
            return {"status": "ignored", "reason": "No active input request"}
        return {"status": "ok", "key": request.key}

    @app.post("/key-combo")
    async def receive_key_combo(request: KeyComboRequest) -> dict[str, str]:
        s: EngineSession = app.state.session
        combo = f"{'+'.join(request.modifiers)}+{request.key}"
        if "ctrl" in [m.lower() for m in request.modifiers] and request.key.lower() == "c":
            if s.abort():
                return {"status": "ok", "combo": combo}
            return {"status": "ignored", "reason": "Nothing to abort"}
        if not s.handle_key(KeyCombo(modifiers=request.modifiers, key=request.key)):
            return {"status": "ignored", "reason": "No active input request"}
        return {"status": "ok", "combo": combo}

    @app.post("/text")
    async def receive_text(request: TextInputRequest) -> dict[str, str]:
        s: EngineSession = app.state.session
        if not s.handle_key(TextInput(text=request.text)):
            return {"status": "ignored", "reason": "No active input request"}
        return {"status": "ok", "length": str(len(request.text))}

    @app.get("/screen")
    async def get_screen_content(rows: int | None = None) -> dict[str, str]:
        s: EngineSession = app.state.session
        if not isinstance(s.sink, BufferedOutputSink):
            raise HTTPException(status_code=404, detail="Session output is not buffered")
        return {"content": s.sink.get_screen_content(rows)}

    @app.get("/history")
    async def get_history() -> dict[str, list[str]]:
        s: EngineSession = app.state.session
        return {"history": s.history.get_history()}

    return app


def main(settings: Settings | None = None) -> None:
    """Entry point for running the endpoint server standalone."""
    settings = settings or Settings()
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.endpoint.host, port=settings.endpoint.port)


if __name__ == "__main__":
    main()
