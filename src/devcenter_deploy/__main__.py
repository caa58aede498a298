"""CLI entrypoint: publish a package to the store (devcenter-deploy)."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

import aiofiles
import structlog
from pydantic import ValidationError

from devcenter_deploy import __version__
from devcenter_deploy.core.config import Settings
from devcenter_deploy.core.exceptions import ConfigurationError, DevCenterDeployError
from devcenter_deploy.deploy.models import DeploymentRequest
from devcenter_deploy.deploy.orchestrator import deploy
from devcenter_deploy.utils.logging import setup_logging

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devcenter-deploy",
        description="Publish a package to the Microsoft Store via the Dev Center submission API",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--tenant-id", dest="tenant_id", help="Azure AD tenant ID")
    parser.add_argument("--client-id", dest="client_id", help="Azure AD client ID")
    parser.add_argument("--app-id", dest="app_id", help="Store application ID")
    parser.add_argument("--flight-id", dest="flight_id", help="Package flight ID")
    parser.add_argument("--package", dest="package_path", help="Path to the package file")
    parser.add_argument("--poll-interval", dest="poll_interval_seconds", type=float,
                        help="Seconds between commit status polls")
    parser.add_argument("--log-level", dest="log_level", help="Log level (default INFO)")
    parser.add_argument("--log-format", dest="log_format", choices=["json", "console"])
    # Client secret is only read from DEVCENTER_CLIENT_SECRET or .env
    return parser


def load_settings(argv: Optional[List[str]] = None) -> Settings:
    """Environment/.env settings with CLI flags layered on top."""
    args = build_parser().parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


async def run(settings: Settings) -> None:
    request = DeploymentRequest(
        tenantId=settings.tenant_id,
        clientId=settings.client_id,
        clientSecret=settings.client_secret,
        appId=settings.app_id,
        flightId=settings.flight_id,
    )
    if not settings.package_path:
        # Let validation report the missing package by its field name
        await deploy(request, settings=settings)
        return

    async with aiofiles.open(settings.package_path, "rb") as appx:
        request.appx = appx
        await deploy(request, settings=settings)


def main(argv: Optional[List[str]] = None) -> None:
    try:
        settings = load_settings(argv)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(2)

    setup_logging(settings.log_level, settings.log_format)

    try:
        asyncio.run(run(settings))
    except DevCenterDeployError as exc:
        logger.error("Deployment failed", error=str(exc), code=exc.code)
        sys.exit(1)
    except OSError as exc:
        logger.error("Could not read package", path=settings.package_path, error=str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Deployment interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
