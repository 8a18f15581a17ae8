#!/usr/bin/env python3
"""
Serve the content pipeline API with uvicorn.

Host and port default to SERVER_HOST / SERVER_PORT so containers can be
configured without flags. Credentials are read by the app factory.
"""

import argparse
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()


def main() -> None:
    parser = argparse.ArgumentParser(description="Content pipeline API server")
    parser.add_argument("--host", default=os.getenv("SERVER_HOST", "127.0.0.1"), help="Bind address")
    parser.add_argument(
        "--port", type=int, default=int(os.getenv("SERVER_PORT", "8000")), help="Bind port"
    )
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    parser.add_argument(
        "--log-level",
        default=os.getenv("UVICORN_LOG_LEVEL", "info"),
        choices=["critical", "error", "warning", "info", "debug"],
    )
    args = parser.parse_args()

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        timeout_keep_alive=75,
    )


if __name__ == "__main__":
    main()
