"""Incremental framing of datasets into a DCAT catalog document."""

from collections.abc import AsyncIterable, AsyncIterator

from dcatbridge.domain.catalog.model.value import Dataset

CATALOG_HEADER = (
    "{\n"
    '  "@context":"https://project-open-data.cio.gov/v1.1/schema/catalog.jsonld",\n'
    '  "@type":"dcat:Catalog",\n'
    '  "conformsTo":"https://project-open-data.cio.gov/v1.1/schema",\n'
    '  "describedBy":"https://project-open-data.cio.gov/v1.1/schema/catalog.json",\n'
    '  "dataset":[\n'
)
DATASET_SEPARATOR = ",\n"
CATALOG_FOOTER = "\n]\n}\n"


async def serialize_catalog(datasets: AsyncIterable[Dataset]) -> AsyncIterator[bytes]:
    """Yield the catalog document chunk by chunk.

    The footer is only emitted once ``datasets`` is exhausted: if the source
    raises, the document is left unterminated and the error propagates.
    """
    yield CATALOG_HEADER.encode()

    first = True
    async for dataset in datasets:
        if not first:
            yield DATASET_SEPARATOR.encode()
        first = False
        yield dataset.to_json().encode()

    yield CATALOG_FOOTER.encode()
