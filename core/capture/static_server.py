"""Local static server for the pre-built SSR artifact folder."""

from __future__ import annotations

import logging
import socket
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from core.utils.errors import ServerStartError
from core.utils.log_events import log_event

logger = logging.getLogger("ssrdiag.capture")

_HOST = "127.0.0.1"
_STARTUP_TIMEOUT_SECONDS = 10.0
_SHUTDOWN_TIMEOUT_SECONDS = 5.0


def build_static_app(folder: Path) -> FastAPI:
    """Build an app serving every file under folder from the URL root."""

    if not folder.is_dir():
        raise ServerStartError(f"Folder not found: {folder}")
    app = FastAPI(title="ssr-diag static", docs_url=None, redoc_url=None, openapi_url=None)
    app.mount("/", StaticFiles(directory=str(folder), html=True), name="artifact")
    return app


@contextmanager
def serve_folder(folder: Path, port: int | None = None) -> Iterator[str]:
    """Serve folder on 127.0.0.1 and yield the base URL.

    Port None binds an ephemeral port. The server is stopped on exit,
    including when the body raises.
    """

    app = build_static_app(folder)
    sock = _bind_socket(port)
    bound_port = sock.getsockname()[1]

    config = uvicorn.Config(app, log_level="error", lifespan="off")
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()

    try:
        _wait_until_started(server, thread, bound_port)
        base_url = f"http://{_HOST}:{bound_port}"
        log_event(logger, logging.INFO, "server_started", folder=str(folder), base_url=base_url)
        yield base_url
    finally:
        server.should_exit = True
        thread.join(timeout=_SHUTDOWN_TIMEOUT_SECONDS)
        sock.close()
        log_event(logger, logging.INFO, "server_stopped", port=bound_port)


def _bind_socket(port: int | None) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((_HOST, port or 0))
    except OSError as exc:
        sock.close()
        raise ServerStartError(f"Failed to bind {_HOST}:{port}: {exc}", port=port) from exc
    return sock


def _wait_until_started(server: uvicorn.Server, thread: threading.Thread, port: int) -> None:
    deadline = time.monotonic() + _STARTUP_TIMEOUT_SECONDS
    while not server.started:
        if not thread.is_alive():
            raise ServerStartError("Static server exited during startup", port=port)
        if time.monotonic() > deadline:
            raise ServerStartError("Static server did not start in time", port=port)
        time.sleep(0.05)
