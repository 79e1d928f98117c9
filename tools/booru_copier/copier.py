"""Core copy logic – orchestrates source search → rewrite → target upload."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .api import BooruAPI, make_client
from .backoff import Backoff, RetriesExhausted
from .config import BooruConfig, CopierConfig
from .links import LinkRewriter, import_tag
from .models import Image, SearchPage, UploadStatus

logger = logging.getLogger("copier.core")


@dataclass
class CopyResult:
    total: int
    processed: int = 0
    cancelled: bool = False
    stats: dict[str, int] = field(default_factory=dict)


class Copier:
    """Copies every image matching a query from one board to another."""

    def __init__(
        self,
        source: BooruConfig,
        target: BooruConfig,
        cfg: CopierConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.cfg = cfg or CopierConfig()
        self.source = source
        self.target = target
        self._client = make_client(self.cfg, transport)
        self.source_api = BooruAPI(source, self.cfg, self._client)
        self.target_api = BooruAPI(target, self.cfg, self._client)
        self.rewriter = LinkRewriter(source.host)
        self.import_tag = import_tag(source.host)
        self._sleep = sleep
        # Stats
        self.stats = {"pages": 0, "uploaded": 0, "duplicates": 0, "failed": 0, "retries": 0}

    def _backoff(self, *, give_up: bool) -> Backoff:
        return Backoff.from_config(self.cfg.retry, give_up=give_up, sleep=self._sleep)

    # ── search pages ─────────────────────────────────────────────

    def fetch_page(self, query: str, page: int) -> SearchPage:
        """Fetch a page of source results, retrying until it arrives."""

        def _retrying(exc: BaseException, delay: float) -> None:
            self.stats["retries"] += 1
            logger.warning("Error loading page %d (%s); retrying in %s seconds...", page, exc, delay)

        # A page that never loads blocks everything after it, so never give up
        result = self._backoff(give_up=False).run(
            lambda: self.source_api.fetch_page(query, page), on_retry=_retrying
        )
        self.stats["pages"] += 1
        logger.debug("Page %d: %d images (total %d)", page, len(result.images), result.total)
        return result

    # ── images ───────────────────────────────────────────────────

    def prepare_image(self, image: Image) -> None:
        """Point description links at the source board and tag the import."""
        image.description = self.rewriter(image.description)
        image.add_tag(self.import_tag)

    def copy_image(self, image: Image) -> UploadStatus | None:
        """Upload one image to the target.

        Returns the upload status, or None if the image was given up on.
        """
        self.prepare_image(image)

        def _retrying(exc: BaseException, delay: float) -> None:
            self.stats["retries"] += 1
            logger.warning("Error uploading image %d (%s); retrying in %s seconds...", image.id, exc, delay)

        try:
            status = self._backoff(give_up=True).run(
                lambda: self.target_api.upload_image(image), on_retry=_retrying
            )
        except RetriesExhausted as exc:
            logger.error("Image %d: %s; moving onto next image.", image.id, exc)
            self.stats["failed"] += 1
            return None

        if status is UploadStatus.DUPLICATE:
            self.stats["duplicates"] += 1
        else:
            self.stats["uploaded"] += 1
        return status

    # ── full run ─────────────────────────────────────────────────

    def copy(self, query: str, *, confirm: Callable[[int], bool] | None = None) -> CopyResult:
        """Copy every image matching *query*, oldest first.

        *confirm* is called with the result count before anything is
        uploaded; returning False cancels the run.
        """
        page_no = 1
        page = self.fetch_page(query, page_no)
        if page.total == 0:
            logger.warning("Query %r has no images on %s", query, self.source.host)
            return CopyResult(total=0, stats=dict(self.stats))

        logger.info("There are %d images in this query", page.total)
        if confirm is not None and not confirm(page.total):
            logger.info("Copy cancelled before uploading")
            return CopyResult(total=page.total, cancelled=True, stats=dict(self.stats))

        total = page.total
        processed = 0
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            disable=not self.cfg.show_progress,
        ) as progress:
            task = progress.add_task(f"{self.source.host} → {self.target.host}", total=total)
            # total can go stale during a long run; only an empty page ends it
            while not page.empty:
                for image in page.images:
                    processed += 1
                    logger.info("Uploading image %d/%d (%d)...", processed, total, image.id)
                    self.copy_image(image)
                    progress.advance(task)
                    # Delay to avoid overloading the target
                    self._sleep(self.cfg.retry.initial_delay)

                page_no += 1
                page = self.fetch_page(query, page_no)
                if page.total:
                    total = max(page.total, processed)
                    progress.update(task, total=total)

        logger.info(
            "Copy of %r complete: %d uploaded, %d duplicates, %d failed",
            query, self.stats["uploaded"], self.stats["duplicates"], self.stats["failed"],
        )
        return CopyResult(total=total, processed=processed, stats=dict(self.stats))

    # ── lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Copier:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
