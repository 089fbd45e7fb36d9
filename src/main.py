"""Entry point for the chat widget.

``RUN_MODE=integrated`` (default) mounts the NiceGUI widget on the relay app
and serves both from one uvicorn process. ``RUN_MODE=separate`` starts the
relay and the widget as two child processes.
"""

import logging
import os
import subprocess
import sys
import time

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

RELAY_PORT = 8000
WIDGET_PORT = 8080


def _storage_secret() -> str:
    return os.getenv("NICEGUI_STORAGE_SECRET", "chat-widget-secret")


def run_integrated() -> None:
    """Serve the relay and the widget from the same uvicorn server."""
    import uvicorn
    from nicegui import ui

    from src.api.app import create_app
    from src.ui.chat_page import chat_page  # noqa: F401 - registers the pages

    app = create_app()
    ui.run_with(app, title="Chat", favicon="💬", storage_secret=_storage_secret())

    port = int(os.getenv("PORT", str(RELAY_PORT)))
    logger.info(f"Widget and relay on http://localhost:{port}")
    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def _spawn_children() -> list[subprocess.Popen]:
    relay = [
        sys.executable, "-m", "uvicorn", "src.api.app:app",
        "--host", os.getenv("HOST", "0.0.0.0"),
        "--port", str(RELAY_PORT),
    ]
    widget = [sys.executable, "-c", "from src.ui.chat_page import main; main()"]
    widget_env = os.environ | {
        "UI_BASE_URL": os.getenv("UI_BASE_URL", f"http://localhost:{WIDGET_PORT}")
    }
    return [subprocess.Popen(relay), subprocess.Popen(widget, env=widget_env)]


def run_separate() -> None:
    """Run the relay on port 8000 and the widget on port 8080.

    Stops both as soon as either exits. Point ``API_BASE_URL`` at the relay.
    """
    logger.info(f"Relay on :{RELAY_PORT}, widget on :{WIDGET_PORT}")
    children = _spawn_children()
    try:
        while all(child.poll() is None for child in children):
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping relay and widget")
    finally:
        for child in children:
            child.terminate()
        for child in children:
            child.wait()


def main() -> None:
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting chat widget ({mode})")
    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
