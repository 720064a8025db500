#!/usr/bin/env python3
"""FastAPI server entry point for Claritool."""

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from config.config import get_config  # noqa: E402


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Claritool FastAPI Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument(
        "--check", action="store_true", help="Print configuration problems and exit"
    )

    args = parser.parse_args()

    if args.check:
        problems = get_config().validate()
        for problem in problems:
            print(f"- {problem}")
        raise SystemExit(1 if problems else 0)

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
