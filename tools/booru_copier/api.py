"""Booru API client – search pages and image uploads over the JSON API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import BooruConfig, CopierConfig
from .errors import BooruRequestError, DecodeError, DuplicateImageError
from .models import Image, SearchPage, UploadStatus

logger = logging.getLogger("copier.api")

UPLOAD_PATH = "/api/v1/json/images"
PAYLOAD_LOG_LIMIT = 500


def make_client(cfg: CopierConfig, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Build the HTTP client shared by the source and target boards."""
    return httpx.Client(
        timeout=cfg.timeout,
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        transport=transport,
    )


def search_params(cfg: CopierConfig, api_key: str, query: str, page: int) -> dict[str, str | int]:
    return {
        "key": api_key,
        "page": page,
        "per_page": cfg.per_page,
        "q": query,
        "sf": cfg.sort_field,
        "sd": cfg.sort_direction,
    }


def upload_body(image: Image) -> dict[str, Any]:
    return {
        "image": {
            "description": image.description,
            "tag_input": image.tag_input,
            "source_url": image.source_url,
        },
        "url": image.view_url,
    }


class BooruAPI:
    """Thin wrapper around one board's JSON API."""

    def __init__(self, board: BooruConfig, cfg: CopierConfig | None = None, client: httpx.Client | None = None) -> None:
        self.board = board
        self.cfg = cfg or CopierConfig()
        self._owns_client = client is None
        self._client = client or make_client(self.cfg)

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.board.base_url}{path}"
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.debug("%s %s%s failed: %s", method, self.board.host, path, exc)
            raise BooruRequestError(f"{self.board.host}: {exc}") from exc

    # ── public API ───────────────────────────────────────────────

    def fetch_page(self, query: str, page: int) -> SearchPage:
        """Fetch one page of search results, sorted oldest first."""
        dialect = self.board.dialect
        resp = self._request(
            "GET",
            dialect.search_path,
            params=search_params(self.cfg, self.board.api_key, query, page),
        )
        if not resp.is_success:
            logger.debug("Error fetching page %d from %s (%d)", page, self.board.host, resp.status_code)
            raise BooruRequestError(
                f"search page {page} returned HTTP {resp.status_code}", status_code=resp.status_code
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise self._decode_failure(DecodeError(f"invalid JSON: {exc}"), resp) from exc
        try:
            return dialect.decode_page(data)
        except DecodeError as exc:
            raise self._decode_failure(exc, resp) from exc

    def _decode_failure(self, exc: DecodeError, resp: httpx.Response) -> DecodeError:
        payload = resp.text
        logger.error(
            "Could not read search results from %s (%s). Payload: %s",
            self.board.host, exc, payload[:PAYLOAD_LOG_LIMIT],
        )
        return DecodeError(str(exc), payload=payload, status_code=resp.status_code)

    def post_image(self, image: Image) -> None:
        """Upload *image*; raises :class:`DuplicateImageError` on HTTP 400."""
        resp = self._request(
            "POST",
            UPLOAD_PATH,
            params={"key": self.board.api_key},
            json=upload_body(image),
            headers={"Content-Type": "application/json"},
            # a followed redirect re-sends the POST as a body-less GET
            follow_redirects=False,
        )
        if resp.status_code == 400:  # duplicate hash
            raise DuplicateImageError(image.id)
        if not resp.is_success:
            logger.debug("Error uploading image %d (%d)", image.id, resp.status_code)
            raise BooruRequestError(
                f"upload of image {image.id} returned HTTP {resp.status_code}", status_code=resp.status_code
            )

    def upload_image(self, image: Image) -> UploadStatus:
        """Upload *image*, reporting an already-present image as a status."""
        try:
            self.post_image(image)
        except DuplicateImageError:
            logger.info("Image %d has already been uploaded", image.id)
            return UploadStatus.DUPLICATE
        return UploadStatus.SUCCESS

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> BooruAPI:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
