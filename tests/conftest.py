"""Test configuration and fixtures."""

import logfire

from atpark.domain.model.photo import PhotoDraft

# Spans and events are no-ops without a token, keep them off the console too
logfire.configure(send_to_logfire=False, console=False)


def make_draft(image: str = "https://cdn.example/x.jpg", **fields) -> PhotoDraft:
    """Helper function to build a valid photo draft for tests."""
    fields.setdefault("tags", ["dog", "park"])
    fields.setdefault("created_at", "2024-01-01T00:00:00Z")
    return PhotoDraft(image=image, **fields)
