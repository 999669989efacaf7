import random
import string
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class Phase(str, Enum):
    IDLE = 'idle'
    PLAYING = 'playing'
    REVEALED = 'revealed'
    WON = 'won'


class Verdict(str, Enum):
    CORRECT = 'correct'
    WRONG = 'wrong'


@dataclass(frozen=True)
class Track:
    id: str
    title: str
    artists: Tuple[str, ...]
    album: str
    release_date: str
    artwork_url: Optional[str] = None

    @property
    def year(self) -> str:
        """Four-digit release year, the leading characters of the release date."""
        return self.release_date[:4]

    @classmethod
    def from_dict(cls, data: dict) -> 'Track':
        """Build a track from a catalog payload.

        Accepts the music service shape (``name``, ``artists`` as objects,
        ``album.release_date``, ``album.images``) as well as flat artist
        names and a top-level ``artwork_url``. Raises ValueError when the
        payload has no id, no four-digit release year, or a malformed album.
        """
        if not isinstance(data, dict):
            raise ValueError('track must be an object')
        if not data.get('id'):
            raise ValueError('track has no id')
        album = data.get('album') or {}
        if not isinstance(album, dict):
            raise ValueError(f"track {data['id']} has a malformed album")
        raw_artists = data.get('artists') or []
        if not isinstance(raw_artists, list):
            raise ValueError(f"track {data['id']} has malformed artists")
        artists = tuple(
            a.get('name', '') if isinstance(a, dict) else str(a)
            for a in raw_artists
        )
        release_date = str(album.get('release_date') or album.get('releaseDate') or '')
        if len(release_date) < 4 or not release_date[:4].isdigit():
            raise ValueError(f"track {data['id']} has no usable release date")
        artwork = data.get('artwork_url') or data.get('artworkUrl')
        if not artwork:
            images = album.get('images') or []
            if not isinstance(images, list) or not all(isinstance(i, dict) for i in images):
                raise ValueError(f"track {data['id']} has malformed album images")
            artwork = images[0].get('url') if images else None
        return cls(
            id=str(data['id']),
            title=data.get('name') or data.get('title') or '',
            artists=artists,
            album=album.get('name', ''),
            release_date=release_date,
            artwork_url=artwork,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'artists': list(self.artists),
            'album': self.album,
            'release_date': self.release_date,
            'year': self.year,
            'artwork_url': self.artwork_url,
        }


@dataclass
class Player:
    name: str
    score: int = 0
    tokens: int = 0

    def to_dict(self):
        return {
            'name': self.name,
            'score': self.score,
            'tokens': self.tokens,
        }


@dataclass(frozen=True)
class PlayerConfig:
    names: Tuple[str, ...]
    starting_tokens: int


@dataclass(frozen=True)
class BonusGuess:
    guesser_index: int
    guess: str
    verdict: Verdict

    def to_dict(self):
        return {
            'guesser_index': self.guesser_index,
            'guess': self.guess,
            'verdict': self.verdict.value,
        }


# Round states. Each carries exactly the data valid in that phase.

@dataclass(frozen=True)
class Idle:
    phase = Phase.IDLE


@dataclass(frozen=True)
class Playing:
    track: Track
    phase = Phase.PLAYING


@dataclass(frozen=True)
class Revealed:
    track: Track
    bonus: Optional[BonusGuess] = None
    phase = Phase.REVEALED


@dataclass(frozen=True)
class Won:
    winner: str
    track: Track
    bonus: Optional[BonusGuess] = None
    phase = Phase.WON


RoundState = Union[Idle, Playing, Revealed, Won]


@dataclass(frozen=True)
class Snapshot:
    phase: Phase
    current_track: Optional[Track]
    players: Tuple[Player, ...]
    active_player_index: int
    winner: Optional[str]
    bonus_guess: Optional[BonusGuess]
    tracks_remaining: int = 0
    tracks_used: int = 0
    win_score: int = 10

    def to_dict(self):
        return {
            'phase': self.phase.value,
            'current_track': self.current_track.to_dict() if self.current_track else None,
            'players': [p.to_dict() for p in self.players],
            'active_player_index': self.active_player_index,
            'winner': self.winner,
            'bonus_guess': self.bonus_guess.to_dict() if self.bonus_guess else None,
            'deck': {
                'remaining': self.tracks_remaining,
                'used': self.tracks_used,
            },
            'win_score': self.win_score,
        }


def generate_game_code(taken, length=4):
    """Generate a unique, short game code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in taken:
            return code


def playback_uri(track_id: str, scheme: str = 'spotify') -> str:
    """Opaque deep link handed to the device's music app."""
    return f"{scheme}:track:{track_id}"
