"""
Command-line launcher.

Usage:
    # Serve the API with uvicorn
    python -m nexusmarket --host 127.0.0.1 --port 8000

    # Create the database tables and exit
    python -m nexusmarket --init-db
"""

import argparse
import logging

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(description="NexusMarket API server")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    parser.add_argument(
        "--init-db", action="store_true", help="Create tables and exit"
    )
    args = parser.parse_args()

    if args.init_db:
        from nexusmarket.core.config import settings
        from nexusmarket.infrastructure.marketplace.database import (
            build_engine,
            init_schema,
        )
        from nexusmarket.shared.logging import configure_logging

        configure_logging(level=settings.log_level)
        init_schema(build_engine(settings.database_url))
        return

    import uvicorn

    logger.info("Starting API at http://%s:%d", args.host, args.port)
    uvicorn.run("nexusmarket.main:app", host=args.host, port=args.port, reload=False)


if __name__ == "__main__":
    main()
