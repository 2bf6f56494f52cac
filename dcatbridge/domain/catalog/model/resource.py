"""Upstream metadata models, as returned by the metadata API.

Only the fields the catalog needs are declared; everything else in the
upstream payload is ignored.
"""

from typing import Any

from pydantic import AliasChoices, ConfigDict, Field

from dcatbridge.domain.shared.model.value import ValueObject


class UpstreamModel(ValueObject):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class License(UpstreamModel):
    name: str | None = None


class Condition(UpstreamModel):
    license: License | None = None


class Link(UpstreamModel):
    id: str = Field(alias="_id")
    url: str | None = None
    kind: str | None = None  # "data", "url", "wfs", ...
    actions: list[str] = []  # "download", "view", "other"
    title: str | None = None
    filename: str | None = Field(
        default=None,
        validation_alias=AliasChoices("fileName", "filename"),
    )

    @property
    def is_downloadable_data(self) -> bool:
        return self.kind == "data" and "download" in self.actions


class ServiceInfo(UpstreamModel):
    model_config = ConfigDict(extra="allow")

    format: str | None = None  # "wfs", "wms", "efs", ...


class ServiceLayer(UpstreamModel):
    """A web-service layer attached to a resource.

    Extra keys are kept: the layer is forwarded as-is to the service
    resolution API.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = Field(default=None, alias="_id")
    service: ServiceInfo | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FeatureAttribute(UpstreamModel):
    name: str | None = None
    alias: str | None = None
    comment: str | None = None
    data_type: str | None = Field(default=None, alias="dataType")


class CreatorRef(UpstreamModel):
    id: str = Field(alias="_id")


class Resource(UpstreamModel):
    """A metadata record from /resources/search."""

    id: str = Field(alias="_id")
    type: str | None = None  # "vectorDataset", "rasterDataset", "service", ...
    title: str | None = None
    abstract: str | None = None
    tags: dict[str, str | None] = {}
    conditions: list[Condition] = []
    links: list[Link] = []
    service_layers: list[ServiceLayer] = Field(default=[], alias="serviceLayers")
    valid_from: str | None = Field(default=None, alias="validFrom")
    valid_to: str | None = Field(default=None, alias="validTo")
    update_frequency: str | None = Field(default=None, alias="updateFrequency")
    modified: str | None = Field(
        default=None,
        validation_alias=AliasChoices("modified", "_modified"),
    )
    creator: CreatorRef | None = Field(default=None, alias="_creator")
    collection_context: str | None = Field(default=None, alias="collectionContext")
    collection_method: str | None = Field(default=None, alias="collectionMethod")
    feature_attributes: list[FeatureAttribute] = Field(default=[], alias="feature-attributes")

    @property
    def license_names(self) -> list[str]:
        return [c.license.name for c in self.conditions if c.license and c.license.name]


class Page(UpstreamModel):
    """One slice of a paginated /resources/search listing."""

    offset: int
    total: int
    results: list[Resource]


class Share(UpstreamModel):
    id: str = Field(alias="_id")
    url_token: str | None = Field(default=None, alias="urlToken")
    name: str | None = None
