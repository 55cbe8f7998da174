"""Artifact id allocation."""

import uuid


def new_artifact_id() -> str:
    """Return a fresh 128-bit random artifact id (32 hex chars).

    Hex keeps the id usable as a file stem and inside a module name.
    """
    return uuid.uuid4().hex
