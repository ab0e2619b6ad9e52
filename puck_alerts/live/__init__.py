"""Live NHL snapshot fetching (api-web.nhle.com)."""

from .nhl_client import NHLSnapshotClient

__all__ = ["NHLSnapshotClient"]
