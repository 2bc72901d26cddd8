"""
Canonical entry point for sensio_server package.

Usage:
    sensio-air mcp --environment development
    sensio-air api --environment development
    sensio-air setup-db --environment development
    sensio-air grant --user USER_ID --device SA123 [--name "Living room"]
"""

import argparse
import logging
import os
import sys

import uvicorn
from sensio_core.config.environments import get_settings

from sensio_server.bootstrap import build_dispatcher, setup_logging


def run_mcp_server(args: argparse.Namespace) -> None:
    """Run the MCP server on stdio."""
    from sensio_server.adapters.mcp.server import run_stdio

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    log.info("Starting MCP server...")
    log.info("Environment: %s", args.environment)
    log.info("Data source: %s", config.DATA_SOURCE.value)
    log.info("Access backend: %s", config.ACCESS_BACKEND.value)

    run_stdio(build_dispatcher(config))
    return None


def run_api_server(args: argparse.Namespace) -> None:
    """Run the FastAPI server."""
    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    # Override with command line arguments
    host = args.host or config.API_HOST
    port = args.port or config.API_PORT
    reload = args.reload and args.environment != "production"

    log.info("Starting API server...")
    log.info("Environment: %s", args.environment)
    log.info("Host: %s", host)
    log.info("Port: %s", port)
    log.info("Reload: %s", reload)

    uvicorn.run(
        "sensio_server.adapters.api.main:create_app_from_settings",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=config.LOG_LEVEL.lower(),
    )
    return None


def setup_database(args: argparse.Namespace) -> None:
    """Create the device ownership table."""
    from sqlalchemy import create_engine

    from sensio_server.adapters.db.sqlalchemy_models import Base

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    log.info("Setting up database for %s environment...", args.environment)
    log.info("Database URL: %s", config.DATABASE_URL)

    engine = create_engine(config.DATABASE_URL, future=True, echo=False)
    Base.metadata.create_all(bind=engine)
    log.info("Database setup completed successfully")
    return None


def grant_device(args: argparse.Namespace) -> None:
    """Record that a user owns a device."""
    from sensio_server.adapters.db.repository import SqlDeviceDirectory
    from sensio_server.adapters.db.session import create_session_factory

    config = get_settings()
    setup_logging(config)
    log = logging.getLogger(__name__)

    if not args.user or not args.device:
        log.error("grant needs --user and --device")
        sys.exit(2)

    directory = SqlDeviceDirectory(create_session_factory(config.DATABASE_URL))
    directory.grant(args.user, args.device, args.name)
    log.info("Granted %s access to %s", args.user, args.device)
    return None


def main() -> None:
    """Main entry point for sensio_server commands."""
    parser = argparse.ArgumentParser(
        description="Sensio Air - MCP tool server, HTTP API, and device ownership management"
    )
    parser.add_argument(
        "--environment",
        choices=["production", "development", "testing"],
        default="development",
        help="Environment to run in",
    )
    parser.add_argument(
        "command",
        choices=["mcp", "api", "setup-db", "grant"],
        help="Command to run",
    )
    parser.add_argument("--host", help="Host to bind to (overrides config)")
    parser.add_argument("--port", type=int, help="Port to bind to (overrides config)")
    parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload (development only)"
    )
    parser.add_argument("--user", help="User id (grant)")
    parser.add_argument("--device", help="Device serial (grant)")
    parser.add_argument("--name", help="Friendly device name (grant)")

    args = parser.parse_args()

    # Set environment variable for config
    os.environ["SENSIO_ENV"] = args.environment

    if args.command == "mcp":
        run_mcp_server(args)
    elif args.command == "api":
        run_api_server(args)
    elif args.command == "setup-db":
        setup_database(args)
    elif args.command == "grant":
        grant_device(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
