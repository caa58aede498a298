"""Tests for required-field validation."""

import io

import pytest

from devcenter_deploy.core.exceptions import MissingFieldError
from devcenter_deploy.deploy.models import DeploymentRequest
from devcenter_deploy.deploy.orchestrator import deploy
from devcenter_deploy.deploy.validation import REQUIRED_FIELDS, validate_request


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["tenantId", "clientId", "clientSecret", "appId", "appx"])
async def test_missing_field_fails_before_any_request(store, settings, options, missing):
    del options[missing]

    async with store.client() as http:
        with pytest.raises(MissingFieldError, match=f"^Missing required field: {missing}$"):
            await deploy(options, settings=settings, http_client=http)

    assert store.requests == []


def test_first_missing_field_is_reported():
    with pytest.raises(MissingFieldError) as exc_info:
        validate_request(DeploymentRequest(appId="q"))
    assert exc_info.value.field == "tenantId"


def test_empty_string_counts_as_missing():
    request = DeploymentRequest(
        tenantId="t", clientId="", clientSecret="s", appId="a", appx=io.BytesIO()
    )
    with pytest.raises(MissingFieldError, match="clientId"):
        validate_request(request)


def test_flight_id_is_optional():
    assert "flightId" not in REQUIRED_FIELDS
    validate_request(
        DeploymentRequest(tenantId="t", clientId="c", clientSecret="s", appId="a", appx=io.BytesIO())
    )
