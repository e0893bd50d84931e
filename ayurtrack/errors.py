# -*- coding: utf-8 -*-
"""Domain errors shared by the storage, cache and AI layers."""

from __future__ import annotations


class AyurTrackError(Exception):
    """Base error; `status` is the HTTP status the global handler responds with."""

    status: int = 500

    def __init__(self, message: str = "", *, status: int | None = None) -> None:
        super().__init__(message)
        if status is not None:
            self.status = status


class NotFoundError(AyurTrackError):
    status = 404

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"Document {doc_id} not found in {collection}")
        self.collection = collection
        self.doc_id = doc_id


class IndexNotReadyError(AyurTrackError):
    """The query needs a composite index the database is still building."""

    def __init__(self, collection: str, detail: str = "") -> None:
        super().__init__(f"Query on {collection} requires an index that is not ready. {detail}".strip())
        self.collection = collection


class DocumentShapeError(AyurTrackError):
    """A stored document does not match its entity model."""


class AIServiceError(AyurTrackError):
    """Model call or response parsing failed; the message is safe to show to users."""


class RateLimitExceeded(AyurTrackError):
    status = 429


class ConflictError(AyurTrackError):
    status = 409
