"""
Main module entry point.

This allows running the service as: python -m src.main [serve]
and bootstrapping an entity secret as: python -m src.main generate-entity-secret
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from src.main.config import get_settings
from src.shared import configure_logging, get_logger, update_logging_from_settings

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m src.main")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP API (default)")
    serve.add_argument("--host", default=None, help="Interface to bind")
    serve.add_argument("--port", type=int, default=None, help="Port to bind")
    serve.add_argument("--reload", action="store_true", help="Reload on changes")

    subparsers.add_parser(
        "generate-entity-secret",
        help="Create an entity secret and the ciphertext to register with Circle",
    )
    return parser


def serve(host: Optional[str], port: Optional[int], reload: bool) -> int:
    import uvicorn

    settings = get_settings()
    bind_host = host or settings.app.host
    bind_port = port or settings.app.port
    logger.info("server.starting", host=bind_host, port=bind_port)
    uvicorn.run(
        "src.main.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload or settings.app.reload,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Dispatch to the selected command and return its exit code."""
    configure_logging()
    settings = get_settings()
    update_logging_from_settings(settings)

    args = build_parser().parse_args(argv)

    if args.command == "generate-entity-secret":
        from src.main.cli import generate_entity_secret_command

        return asyncio.run(
            generate_entity_secret_command(
                settings, err=lambda line: print(line, file=sys.stderr)
            )
        )

    return serve(
        getattr(args, "host", None),
        getattr(args, "port", None),
        getattr(args, "reload", False),
    )


if __name__ == "__main__":
    sys.exit(main())
