"""Submission lifecycle for the Dev Center store API."""

from .models import (
    AppTarget,
    DeploymentRequest,
    FileStatus,
    FlightTarget,
    PackageEntry,
    SubmissionRecord,
)
from .client import DevCenterClient
from .orchestrator import SubmissionOrchestrator, build_package_list, deploy

__all__ = [
    "deploy",
    "SubmissionOrchestrator",
    "DevCenterClient",
    "build_package_list",
    "DeploymentRequest",
    "AppTarget",
    "FlightTarget",
    "FileStatus",
    "PackageEntry",
    "SubmissionRecord",
]
