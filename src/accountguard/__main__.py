"""Run the accountguard API with uvicorn."""

from __future__ import annotations

import os

import uvicorn

from accountguard.api.app import create_app
from accountguard.config import Settings
from accountguard.logging import setup_logging


def main() -> None:
    """Start the API server."""
    setup_logging()
    settings = Settings.from_env()
    uvicorn.run(
        create_app(settings),
        host=os.environ.get("ACCOUNTGUARD_HOST", "127.0.0.1"),
        port=int(os.environ.get("ACCOUNTGUARD_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
