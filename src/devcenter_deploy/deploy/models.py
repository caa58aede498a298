"""Models for store submissions and deployment requests."""

from enum import Enum
from typing import Any, ClassVar, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


PACKAGE_FILE_NAME = "package.appx"

# Commit status progression reported by the store.
RETRY_STATUSES = frozenset({"PendingCommit", "CommitStarted"})
# Anything past PreProcessing is unlikely on the first poll, but technically
# possible if the store is fast.
SUCCESS_STATUSES = frozenset({"PreProcessing", "Certification", "Release"})


def _dump_present(model: BaseModel) -> dict:
    """Dump a model, leaving out declared fields that were never supplied."""
    data = model.model_dump()
    for name in type(model).model_fields:
        if name not in model.model_fields_set:
            data.pop(name, None)
    return data


class FileStatus(str, Enum):
    PENDING_UPLOAD = "PendingUpload"
    UPLOADED = "Uploaded"
    PENDING_DELETE = "PendingDelete"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class PackageEntry(BaseModel):
    """One package attached to a submission.

    Unknown fields returned by the store are kept so the entry can be sent
    back unchanged apart from its status.
    """

    model_config = ConfigDict(extra="allow")

    fileName: Optional[str] = None
    fileStatus: Optional[str] = None
    minimumDirectXVersion: Optional[str] = None
    minimumSystemRam: Optional[str] = None

    @classmethod
    def new_upload(cls, file_name: str = PACKAGE_FILE_NAME) -> "PackageEntry":
        return cls(
            fileName=file_name,
            fileStatus=FileStatus.PENDING_UPLOAD.value,
            minimumDirectXVersion="None",
            minimumSystemRam="None",
        )

    def marked_for_deletion(self) -> "PackageEntry":
        data = _dump_present(self)
        data["fileStatus"] = FileStatus.PENDING_DELETE.value
        return PackageEntry.model_validate(data)

    def to_payload(self) -> dict:
        return _dump_present(self)


class SubmissionRecord(BaseModel):
    """Server-owned submission, round-tripped verbatim apart from its packages."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    fileUploadUrl: Optional[str] = None

    def packages(self, field_name: str) -> List[PackageEntry]:
        raw = (self.model_extra or {}).get(field_name) or []
        return [PackageEntry.model_validate(p) for p in raw]

    def with_packages(self, field_name: str, entries: List[PackageEntry]) -> dict:
        """Return the full JSON payload with the package list replaced."""
        payload = _dump_present(self)
        payload[field_name] = [e.to_payload() for e in entries]
        return payload


class SubmissionStatusReport(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Optional[str] = None
    statusDetails: Any = None


class AppTarget(BaseModel):
    """Publish to the application itself."""

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[str] = "app"
    pending_submission_field: ClassVar[str] = "pendingApplicationSubmission"
    packages_field: ClassVar[str] = "applicationPackages"

    app_id: str

    def resource_url(self, base_url: str) -> str:
        return f"{base_url}/applications/{self.app_id}"


class FlightTarget(BaseModel):
    """Publish to a package flight of the application."""

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[str] = "flight"
    pending_submission_field: ClassVar[str] = "pendingFlightSubmission"
    packages_field: ClassVar[str] = "flightPackages"

    app_id: str
    flight_id: str

    def resource_url(self, base_url: str) -> str:
        return f"{base_url}/applications/{self.app_id}/flights/{self.flight_id}"


SubmissionTarget = Union[AppTarget, FlightTarget]


class DeploymentRequest(BaseModel):
    """Options for a single deployment run.

    Fields are deliberately optional here; presence is enforced by
    ``validate_request`` so the first missing one is reported by name.
    """

    tenantId: Optional[str] = None
    clientId: Optional[str] = None
    clientSecret: Optional[str] = Field(None, repr=False)
    appId: Optional[str] = None
    flightId: Optional[str] = None
    appx: Any = Field(None, repr=False)

    @property
    def target(self) -> SubmissionTarget:
        if self.flightId:
            return FlightTarget(app_id=self.appId, flight_id=self.flightId)
        return AppTarget(app_id=self.appId)
