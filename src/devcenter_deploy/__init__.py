"""devcenter-deploy - Publish packages to the Microsoft Store submission API."""

__version__ = "0.1.0"

from devcenter_deploy.core.config import Settings
from devcenter_deploy.core.exceptions import DevCenterDeployError
from devcenter_deploy.deploy import DeploymentRequest, SubmissionOrchestrator, deploy

__all__ = [
    "Settings",
    "DevCenterDeployError",
    "DeploymentRequest",
    "SubmissionOrchestrator",
    "deploy",
    "__version__",
]
