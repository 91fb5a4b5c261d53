"""Development server: ``python -m newhire``.

Listens on the first free port starting at ``PORT`` and, unless
``OPEN_BROWSER`` is off, opens the chat page once the server is up.
"""

from __future__ import annotations

import socket
import threading
import webbrowser

import uvicorn

from newhire.config import Settings, get_settings
from newhire.logging import configure_logging, get_logger

logger = get_logger(__name__)

APP_PATH = "newhire.main:app"
BROWSER_DELAY_SECONDS = 0.6


def find_free_port(host: str, first: int, tries: int) -> int:
    """Return the first port in ``[first, first + tries)`` that binds on ``host``.

    Falls back to ``first`` so uvicorn reports the clash itself.
    """
    for candidate in range(first, first + max(1, tries)):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind((host, candidate))
            except OSError:
                continue
            return candidate
    return first


def serve(settings: Settings) -> None:
    port = find_free_port(settings.host, settings.port, settings.port_tries)
    if port != settings.port:
        logger.info("Port %d is busy, using %d", settings.port, port)
    url = f"http://{settings.host}:{port}/"

    if settings.open_browser:
        # uvicorn.run blocks, so the page is opened from a timer thread
        opener = threading.Timer(BROWSER_DELAY_SECONDS, webbrowser.open, args=(url,))
        opener.daemon = True
        opener.start()

    logger.info("Serving onboarding chat at %s", url)
    uvicorn.run(
        APP_PATH,
        host=settings.host,
        port=port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    configure_logging()
    serve(get_settings())


if __name__ == "__main__":
    main()
