"""Exceptions raised while talking to a board."""

from __future__ import annotations


class BooruRequestError(Exception):
    """A request failed in a way worth retrying."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(BooruRequestError):
    """The board answered, but not with a search page we can read."""

    def __init__(self, message: str, *, payload: str = "", status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code)
        self.payload = payload


class DuplicateImageError(Exception):
    """The target already has this image (HTTP 400 on upload).  Never retried."""

    status_code = 400

    def __init__(self, image_id: int) -> None:
        super().__init__(f"image {image_id} has already been uploaded")
        self.image_id = image_id
