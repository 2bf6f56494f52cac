"""Fetch, transform, filter and serialize a share as a streamed catalog."""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import dataclass
from enum import StrEnum

from dcatbridge.domain.catalog.model.value import Dataset, ShareContext, TransformOutcome
from dcatbridge.domain.catalog.port.diagnostics_sink import DiagnosticsSink
from dcatbridge.domain.catalog.service.fetcher import PaginatedFetcher, ResourceSequence
from dcatbridge.domain.catalog.service.serializer import serialize_catalog
from dcatbridge.domain.catalog.service.transform import RecordTransformer
from dcatbridge.domain.shared.service import Service

logger = logging.getLogger(__name__)


class PipelineState(StrEnum):
    INIT = "init"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    DRAINING = "draining"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass
class PipelineRun:
    """Bookkeeping for one pipeline run."""

    share_id: str
    state: PipelineState = PipelineState.INIT
    pages_fetched: int = 0
    records_fetched: int = 0
    records_emitted: int = 0
    records_dropped: int = 0

    def advance(self, state: PipelineState) -> None:
        if state is not self.state:
            logger.debug("Pipeline %s: %s -> %s", self.share_id, self.state, state)
            self.state = state


class CatalogPipeline(Service):
    """Streams a share's resources as a DCAT catalog.

    Each stage pulls its next input only after it has forwarded or dropped
    the current one, so memory stays bounded by one page plus one record
    whatever the size of the share.
    """

    fetcher: PaginatedFetcher
    transformer: RecordTransformer
    diagnostics_sink: DiagnosticsSink | None = None

    async def stream(
        self, share: ShareContext, run: PipelineRun | None = None
    ) -> AsyncIterator[bytes]:
        """Yield the catalog document as UTF-8 chunks.

        On a fatal error the run moves to FAILED and the error propagates
        before the closing brackets are written, so a truncated document
        cannot be mistaken for a complete one.
        """
        run = run or PipelineRun(share_id=share.share_id)
        sequence = self.fetcher.open_sequence(share.share_id)
        finished = False

        try:
            async with (
                aclosing(self._valid_datasets(sequence, share, run)) as datasets,
                aclosing(serialize_catalog(datasets)) as chunks,
            ):
                async for chunk in chunks:
                    yield chunk
            finished = True
        except Exception:
            run.advance(PipelineState.FAILED)
            logger.exception(
                "Catalog stream for share %s failed after %d records (%d pages)",
                share.share_id,
                run.records_fetched,
                run.pages_fetched,
            )
            raise
        finally:
            if not finished and run.state is not PipelineState.FAILED:
                # Consumer stopped pulling: nothing more is fetched
                logger.info(
                    "Catalog stream for share %s closed by consumer after %d records",
                    share.share_id,
                    run.records_fetched,
                )

        run.advance(PipelineState.CLOSED)
        logger.info(
            "Catalog stream for share %s completed: %d fetched, %d emitted, %d dropped, %d pages",
            share.share_id,
            run.records_fetched,
            run.records_emitted,
            run.records_dropped,
            run.pages_fetched,
        )

    async def _valid_datasets(
        self, sequence: ResourceSequence, share: ShareContext, run: PipelineRun
    ) -> AsyncIterator[Dataset]:
        run.advance(PipelineState.FETCHING)
        async for resource in sequence:
            run.pages_fetched = sequence.pages_fetched
            run.records_fetched += 1
            run.advance(PipelineState.TRANSFORMING)

            outcome = await self.transformer.transform(resource, share)
            self._report(outcome)

            run.advance(PipelineState.DRAINING if sequence.draining else PipelineState.FETCHING)

            if outcome.is_valid:
                run.records_emitted += 1
                yield outcome.dataset
            else:
                run.records_dropped += 1
        run.pages_fetched = sequence.pages_fetched

    def _report(self, outcome: TransformOutcome) -> None:
        for diagnostic in outcome.diagnostics:
            logger.info("%s | %s | %s", outcome.source_id, diagnostic.level, diagnostic.message)
        if self.diagnostics_sink is not None:
            self.diagnostics_sink.report(outcome)
