"""Custom exceptions for devcenter-deploy."""

import json
from typing import Any, Optional, Union


class DevCenterDeployError(Exception):
    """Base exception for all deployment errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class MissingFieldError(DevCenterDeployError):
    """A required deployment option was not supplied."""

    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}", code="missing_field")
        self.field = field


class TokenMissingError(DevCenterDeployError):
    """Identity provider answered successfully but without a token."""

    def __init__(self):
        super().__init__("No access token received.", code="no_access_token")


class StoreRequestError(DevCenterDeployError):
    """A call to the identity provider or the store API failed.

    The message is always ``"<stage>: <detail>"`` where detail is the
    structured error field of the response body, or the HTTP status when
    the body carries none.
    """

    def __init__(
        self,
        stage: str,
        detail: Union[str, int],
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{stage}: {detail}", code=str(detail))
        self.stage = stage
        self.detail = detail
        self.status_code = status_code


class SubmissionFailedError(DevCenterDeployError):
    """Store processing ended in a non-success status."""

    def __init__(self, status: Optional[str], details: Any = None):
        super().__init__(f"Failed: {status} {json.dumps(details)}", code=status)
        self.status = status
        self.details = details


class ConfigurationError(DevCenterDeployError):
    """Settings or CLI flags failed validation."""

    def __init__(self, message: str):
        super().__init__(f"Invalid configuration: {message}", code="invalid_configuration")
