#!/usr/bin/env python
"""
Report API Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py
"""

import argparse
import os

from superstore.config import get_settings
from superstore.config.logging import configure_logging


def run_dev_server(port: int) -> None:
    """Run development server with auto-reload."""
    import uvicorn

    uvicorn.run(
        "superstore.serving.api.main:app",
        host="127.0.0.1",
        port=port,
        reload=True,
        reload_dirs=["superstore"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int) -> None:
    """Run production server with Uvicorn directly."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "superstore.serving.api.main:app",
        host=settings.api_host,
        port=port,
        workers=int(os.getenv("WORKERS", 2)),
        log_level=settings.monitoring.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        server_header=False,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Superstore Profitability API Server")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with auto-reload"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run on (default: API_PORT)"
    )

    args = parser.parse_args()
    port = args.port or get_settings().api_port

    configure_logging("DEBUG" if args.dev else None)

    if args.dev:
        run_dev_server(port)
    else:
        run_prod_server(port)
