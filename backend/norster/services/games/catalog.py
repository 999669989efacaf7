import logging
from typing import Iterable, List

from norster.models import Track
from .errors import InvalidSetup

logger = logging.getLogger(__name__)


def unique_tracks(tracks: Iterable[Track]) -> List[Track]:
    """Drop repeated track ids, keeping the first occurrence.

    Playlists often list the same song twice; the deck holds each id once.
    """
    seen = set()
    unique = []
    for track in tracks:
        if track.id in seen:
            continue
        seen.add(track.id)
        unique.append(track)
    return unique


def parse_tracks(raw) -> List[Track]:
    """Turn a catalog payload list into tracks, raising InvalidSetup on bad entries."""
    if not isinstance(raw, list):
        raise InvalidSetup('tracks must be a list')
    tracks = []
    for position, item in enumerate(raw):
        try:
            tracks.append(Track.from_dict(item))
        except ValueError as exc:
            raise InvalidSetup(f'Track {position}: {exc}')
    unique = unique_tracks(tracks)
    if len(unique) != len(tracks):
        logger.info(f"[tracks] dropped {len(tracks) - len(unique)} duplicate tracks")
    return unique
