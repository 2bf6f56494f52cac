from datetime import datetime, timedelta
from enum import StrEnum
from typing import Literal

from pydantic import ConfigDict, Field

from dcatbridge.domain.shared.model.value import ValueObject


class Credential(ValueObject):
    """Bearer token for the metadata API."""

    value: str
    expires_at: datetime

    def expires_within(self, margin: timedelta, now: datetime) -> bool:
        return self.expires_at - now <= margin


class ShareContext(ValueObject):
    """Share being exported; used to build proxied download and catalog URLs."""

    share_id: str
    share_token: str


class DiagnosticLevel(StrEnum):
    ERROR = "E"
    WARNING = "W"


class Diagnostic(ValueObject):
    level: DiagnosticLevel
    message: str

    @classmethod
    def error(cls, message: str) -> "Diagnostic":
        return cls(level=DiagnosticLevel.ERROR, message=message)

    @classmethod
    def warning(cls, message: str) -> "Diagnostic":
        return cls(level=DiagnosticLevel.WARNING, message=message)


class ServiceQuery(ValueObject):
    """Queryable endpoint resolved for one web-service layer."""

    service_id: str
    title: str | None = None
    format: str
    query_url: str


# =============================================================================
# DCAT catalog entities (serialized into the output document)
# =============================================================================


class CatalogEntity(ValueObject):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class Distribution(CatalogEntity):
    type_: Literal["dcat:Distribution"] = Field(default="dcat:Distribution", alias="@type")
    identifier: str
    title: str | None = None
    format: str | None = None
    download_url: str = Field(alias="downloadURL")
    modified: str | None = None


class Dataset(CatalogEntity):
    type_: Literal["dcat:Dataset"] = Field(default="dcat:Dataset", alias="@type")
    identifier: str
    license: str | None = None
    title: str | None = None
    description: str
    keyword: list[str] = []
    temporal: str | None = None
    frequency: str
    distribution: list[Distribution] = []


class TransformOutcome(ValueObject):
    """A transformed record together with the diagnostics collected on the way."""

    source_id: str
    dataset: Dataset
    diagnostics: list[Diagnostic] = []

    @property
    def is_valid(self) -> bool:
        return not any(d.level is DiagnosticLevel.ERROR for d in self.diagnostics)
