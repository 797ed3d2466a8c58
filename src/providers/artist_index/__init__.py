"""Artist collision index strategies used by the artist aggregator."""

from src.providers.artist_index.linear_scan_index import LinearScanArtistIndex

__all__ = ["LinearScanArtistIndex"]
