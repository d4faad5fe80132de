"""Main entry point for the message server."""

import sys
from pathlib import Path

from dotenv import load_dotenv

from message_server.app import Application
from message_server.config import Settings
from message_server.lifecycle import ServerLifecycle
from message_server.logging_config import setup_logging


def main() -> int:
    """Run the application."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    # Get configuration from environment
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    application = Application(settings=settings)

    # Run with uvicorn until SIGTERM/SIGINT
    return ServerLifecycle(application).run()


if __name__ == "__main__":
    sys.exit(main())
