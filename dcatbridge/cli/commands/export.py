"""Export command: write a share's catalog to a file or stdout."""

import asyncio
import sys
from pathlib import Path
from typing import BinaryIO

from dcatbridge.application.di import create_container
from dcatbridge.cli.console import get_console
from dcatbridge.config import Config, configure_logging
from dcatbridge.domain.catalog.model.value import ShareContext
from dcatbridge.domain.catalog.service.pipeline import CatalogPipeline, PipelineRun
from dcatbridge.domain.catalog.service.share import ShareService
from dcatbridge.domain.shared.error import DcatError, NotFoundError
from dcatbridge.util.di.scope import Scope


def export(share_id: str, share_token: str, *, output: Path | None = None) -> None:
    """Export the DCAT catalog of a share.

    Args:
        share_id: Share identifier.
        share_token: Share URL token.
        output: File to write; defaults to stdout.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        if output is None:
            run = asyncio.run(_export(config, share_id, share_token, sys.stdout.buffer))
        else:
            with output.open("wb") as sink:
                run = asyncio.run(_export(config, share_id, share_token, sink))
    except NotFoundError:
        console.error(f"Share not found: {share_id}", hint="Check the share id and token")
        sys.exit(1)
    except DcatError as e:
        console.error(f"Export failed: {e.message}")
        if output is not None:
            console.info(f"{output} is incomplete and should be discarded")
        sys.exit(1)

    if output is not None:
        console.success(f"Catalog written to {output}")
    console.summary(
        [
            ("Pages fetched", run.pages_fetched),
            ("Records fetched", run.records_fetched),
            ("Datasets written", run.records_emitted),
            ("Records dropped", run.records_dropped),
        ],
        title=f"Share {share_id}",
    )


async def _export(config: Config, share_id: str, share_token: str, sink: BinaryIO) -> PipelineRun:
    container = create_container(config)
    try:
        async with container(scope=Scope.UOW) as uow:
            shares = await uow.get(ShareService)
            pipeline = await uow.get(CatalogPipeline)

            share = await shares.verify_share(share_id, share_token)
            run = PipelineRun(share_id=share.id)
            async for chunk in pipeline.stream(
                ShareContext(share_id=share.id, share_token=share_token), run
            ):
                sink.write(chunk)
            sink.flush()
            return run
    finally:
        await container.close()
