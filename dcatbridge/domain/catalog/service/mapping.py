"""Field mappings from upstream metadata to DCAT values.

Each table is frozen to a single version; the upstream vocabulary changes
are absorbed here and nowhere else.
"""

import posixpath
import re
import unicodedata
from urllib.parse import urlparse

from dcatbridge.domain.catalog.model.resource import FeatureAttribute, Resource
from dcatbridge.domain.catalog.model.value import ShareContext

# Ordered by priority: the first entry found among a resource's licenses wins
LICENSE_MAPPING: tuple[tuple[str, str], ...] = (
    ("Licence ouverte ETALAB 2.0", "Licence Ouverte v2.0"),
    ("Licence ouverte ETALAB 1.0", "Licence Ouverte v2.0"),
    ("ODbL 1.0 - Open Database Licence", "Open Database License (ODbL) 1.0"),
)

PERIODICITY_MAPPING: dict[str, str] = {
    "PT1H": "hourly",
    "PT6H": "fourTimesADay",
    "PT12H": "semidaily",
    "P1D": "daily",
    "P3D": "semiweekly",
    "P1W": "weekly",
    "P2W": "biweekly",
    "P1M": "monthly",
    "P2M": "bimonthly",
    "P3M": "quarterly",
    "P4M": "threeTimesAYear",
    "P6M": "semiannual",
    "P1Y": "annual",
    "P2Y": "biennial",
    "P3Y": "triennial",
    "P5Y": "quinquennial",
}
UNKNOWN_PERIODICITY = "unknown"

KEYWORD_NAMESPACES: tuple[str, ...] = ("keyword:isogeo:", "keyword:group-theme:")

# Ordered: content-type sniffing returns the first whitelisted format found
FORMAT_WHITELIST: tuple[str, ...] = (
    "zip",
    "geojson",
    "csv",
    "tiff",
    "gz",
    "xls",
    "xlsx",
    "jp2",
    "ecw",
    "jpg",
    "gpkg",
)

CONTENT_TYPE_FORMATS: dict[str, str] = {
    "application/zip": "zip",
    "application/x-zip-compressed": "zip",
    "application/geo+json": "geojson",
    "text/csv": "csv",
    "image/tiff": "tiff",
    "application/gzip": "gz",
    "application/x-gzip": "gz",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "image/jp2": "jp2",
    "image/jpeg": "jpg",
    "application/geopackage+sqlite3": "gpkg",
}

UNSUPPORTED_RESOURCE_TYPES = frozenset({"service"})

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


def get_license(resource: Resource) -> str | None:
    names = set(resource.license_names)
    for name, canonical in LICENSE_MAPPING:
        if name in names:
            return canonical
    return None


def get_periodicity(update_frequency: str | None) -> str:
    if update_frequency is None:
        return UNKNOWN_PERIODICITY
    return PERIODICITY_MAPPING.get(update_frequency, UNKNOWN_PERIODICITY)


def get_temporal(start: str | None, end: str | None) -> str | None:
    if start and end:
        return f"{start}/{end}"
    return None


def slugify(value: str) -> str:
    """Case-fold, strip diacritics and collapse separators into hyphens."""
    decomposed = unicodedata.normalize("NFKD", value.casefold())
    ascii_only = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _SLUG_SEPARATORS.sub("-", ascii_only).strip("-")


def get_keywords(tags: dict[str, str | None]) -> list[str]:
    keywords: list[str] = []
    for key, value in tags.items():
        namespace = next((ns for ns in KEYWORD_NAMESPACES if key.startswith(ns)), None)
        if namespace is None:
            continue
        slug = slugify(value or key[len(namespace) :])
        if slug and slug not in keywords:
            keywords.append(slug)
    return keywords


def whitelisted_format(extension: str | None) -> str | None:
    if not extension:
        return None
    extension = extension.lstrip(".").lower()
    return extension if extension in FORMAT_WHITELIST else None


def format_from_filename(filename: str | None) -> str | None:
    if not filename:
        return None
    return whitelisted_format(posixpath.splitext(filename)[1])


def format_from_url(url: str) -> str | None:
    return whitelisted_format(posixpath.splitext(urlparse(url).path)[1])


def format_from_content_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type in CONTENT_TYPE_FORMATS:
        return CONTENT_TYPE_FORMATS[media_type]
    return next((f for f in FORMAT_WHITELIST if f in media_type), None)


def is_absolute_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


def open_catalog_url(base_url: str, share: ShareContext, resource_id: str) -> str:
    return f"{base_url}/s/{share.share_id}/{share.share_token}/r/{resource_id}"


def proxied_download_url(
    server_url: str, share: ShareContext, resource_id: str, link_id: str
) -> str:
    return f"{server_url}/{share.share_id}/{share.share_token}/download/{resource_id}/{link_id}"


def _attribute_table(attributes: list[FeatureAttribute]) -> str:
    rows = [
        "**Attributes**",
        "",
        "| Field | Alias | Type |",
        "| --- | --- | --- |",
    ]
    for attribute in attributes:
        alias = attribute.alias or attribute.comment or ""
        rows.append(f"| `{attribute.name}` | {alias} | `{attribute.data_type or ''}` |")
    return "\n".join(rows)


def get_description(resource: Resource, share: ShareContext, catalog_base_url: str) -> str:
    """Build the markdown description: abstract, context, method, attributes, link."""
    parts: list[str] = []

    if resource.abstract:
        parts.append(resource.abstract)

    if resource.collection_context:
        parts.append(f"**Collection context**\n\n{resource.collection_context}")

    if resource.collection_method:
        parts.append(f"**Collection method**\n\n{resource.collection_method}")

    # Nameless attributes have no field to document
    attributes = [a for a in resource.feature_attributes if a.name]
    if attributes:
        parts.append(_attribute_table(attributes))

    url = open_catalog_url(catalog_base_url, share, resource.id)
    parts.append(f"For more information, see [the metadata record in the open catalog]({url}).")

    return "\n\n".join(parts)
