"""Shared fixtures: fake boards behind httpx.MockTransport and a recording sleep."""

from __future__ import annotations

import json

import httpx
import pytest

from booru_copier.config import BooruConfig, CopierConfig

SOURCE_KEY = "s" * 20
TARGET_KEY = "t" * 20


def philomena_image(image_id: int, **overrides: object) -> dict:
    image = {
        "id": image_id,
        "description": f"Image {image_id}",
        "source_url": f"https://example.com/art/{image_id}",
        "tags": ["safe", "solo"],
        "view_url": f"https://derpicdn.net/img/view/{image_id}.png",
        "created_at": "2020-01-01T00:00:00Z",
    }
    image.update(overrides)
    return image


class FakeBoards:
    """Answers search requests from a list of pages and uploads from a status script."""

    def __init__(
        self,
        pages: list[dict],
        *,
        upload_statuses: list[int] | None = None,
        search_statuses: list[int] | None = None,
    ) -> None:
        self.pages = pages
        self.upload_statuses = list(upload_statuses or [])
        self.search_statuses = list(search_statuses or [])
        self.search_requests: list[httpx.Request] = []
        self.upload_requests: list[httpx.Request] = []

    @property
    def uploads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.upload_requests]

    @property
    def pages_requested(self) -> list[int]:
        return [int(r.url.params["page"]) for r in self.search_requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.search_requests.append(request)
            if self.search_statuses:
                return httpx.Response(self.search_statuses.pop(0), text="unavailable")
            page = int(request.url.params["page"])
            if page <= len(self.pages):
                return httpx.Response(200, json=self.pages[page - 1])
            total = self.pages[0].get("total", 0) if self.pages else 0
            return httpx.Response(200, json={"images": [], "total": total})

        self.upload_requests.append(request)
        status = self.upload_statuses.pop(0) if self.upload_statuses else 200
        return httpx.Response(status, json={})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def source() -> BooruConfig:
    return BooruConfig("derpibooru.org", SOURCE_KEY)


@pytest.fixture
def target() -> BooruConfig:
    return BooruConfig("target.example.com", TARGET_KEY)


@pytest.fixture
def cfg() -> CopierConfig:
    return CopierConfig(show_progress=False)
