"""Input validation for deployment requests."""

from devcenter_deploy.core.exceptions import MissingFieldError
from devcenter_deploy.deploy.models import DeploymentRequest


# Checked in this order; the first missing one is reported.
REQUIRED_FIELDS = ("tenantId", "clientId", "clientSecret", "appId", "appx")


def validate_request(request: DeploymentRequest) -> None:
    """Fail fast on the first missing required field. flightId is optional."""
    for field in REQUIRED_FIELDS:
        if not getattr(request, field):
            raise MissingFieldError(field)
