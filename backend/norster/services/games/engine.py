import logging
import random
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from norster.models import (
    BonusGuess, Idle, Phase, Player, PlayerConfig, Playing, Revealed,
    RoundState, Snapshot, Track, Verdict, Won,
)
from .bonus import evaluate_year_guess
from .catalog import unique_tracks
from .deck import Deck
from .errors import InsufficientTokens, InvalidAction, InvalidSetup
from .ledger import Ledger
from .scoring import next_player_index, score_placement

logger = logging.getLogger(__name__)

WIN_SCORE = 10


@dataclass(frozen=True)
class SetupLimits:
    min_players: int = 2
    max_players: int = 10
    min_tokens: int = 1
    max_tokens: int = 5
    max_name_length: int = 20

    @classmethod
    def from_config(cls, cfg) -> 'SetupLimits':
        """Limits from a Flask config mapping, falling back to the defaults."""
        defaults = cls()
        return cls(
            min_players=int(cfg.get('MIN_PLAYERS', defaults.min_players)),
            max_players=int(cfg.get('MAX_PLAYERS', defaults.max_players)),
            min_tokens=int(cfg.get('MIN_STARTING_TOKENS', defaults.min_tokens)),
            max_tokens=int(cfg.get('MAX_STARTING_TOKENS', defaults.max_tokens)),
            max_name_length=int(cfg.get('MAX_NAME_LENGTH', defaults.max_name_length)),
        )


def validate_player_config(names: Sequence[str], starting_tokens: int,
                           limits: Optional[SetupLimits] = None) -> PlayerConfig:
    """Normalise a roster and starting token count.

    Names are trimmed and blank entries dropped. Raises InvalidSetup when the
    remaining roster or the token count falls outside ``limits``.
    """
    limits = limits or SetupLimits()
    if isinstance(names, str) or not isinstance(names, (list, tuple)):
        raise InvalidSetup('Player names must be a list')
    if any(not isinstance(n, str) for n in names):
        raise InvalidSetup('Player names must be strings')
    cleaned = [n.strip() for n in names if n.strip()]
    if len(cleaned) < limits.min_players:
        raise InvalidSetup(f'At least {limits.min_players} players are required')
    if len(cleaned) > limits.max_players:
        raise InvalidSetup(f'At most {limits.max_players} players are allowed')
    if len(set(cleaned)) != len(cleaned):
        raise InvalidSetup('Player names must be unique')
    too_long = [n for n in cleaned if len(n) > limits.max_name_length]
    if too_long:
        raise InvalidSetup(f'Player names are limited to {limits.max_name_length} characters')
    if isinstance(starting_tokens, bool) or not isinstance(starting_tokens, int):
        raise InvalidSetup('Starting tokens must be an integer')
    if not limits.min_tokens <= starting_tokens <= limits.max_tokens:
        raise InvalidSetup(f'Starting tokens must be between {limits.min_tokens} and {limits.max_tokens}')
    return PlayerConfig(names=tuple(cleaned), starting_tokens=starting_tokens)


class GameEngine:
    """One game session: deck, players and the current round.

    All state changes go through the action methods below. Each action either
    applies fully or raises a GameError before touching anything.
    """

    def __init__(self, tracks: Iterable[Track], player_config: PlayerConfig, *,
                 win_score: int = WIN_SCORE, rng: Optional[random.Random] = None,
                 limits: Optional[SetupLimits] = None):
        self.limits = limits or SetupLimits()
        config = validate_player_config(player_config.names, player_config.starting_tokens, self.limits)
        self.tracks = tuple(unique_tracks(tracks))
        self.win_score = win_score
        self.rng = rng or random.Random()
        self._start(config)

    def _start(self, config: PlayerConfig) -> None:
        self.config = config
        self.players = [Player(name=n, tokens=config.starting_tokens) for n in config.names]
        self.ledger = Ledger(self.players)
        self.deck = Deck(self.tracks, rng=self.rng)
        self.active_player_index = 0
        self.state: RoundState = Idle()
        logger.info(f"[new_game] players={len(self.players)} tracks={len(self.tracks)} tokens={config.starting_tokens}")

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def current_track(self) -> Optional[Track]:
        return getattr(self.state, 'track', None)

    @property
    def winner(self) -> Optional[str]:
        return self.state.winner if isinstance(self.state, Won) else None

    @property
    def bonus_guess(self) -> Optional[BonusGuess]:
        return getattr(self.state, 'bonus', None)

    @property
    def active_player(self) -> Player:
        return self.players[self.active_player_index]

    def snapshot(self) -> Snapshot:
        return Snapshot(
            phase=self.phase,
            current_track=self.current_track,
            players=tuple(Player(p.name, p.score, p.tokens) for p in self.players),
            active_player_index=self.active_player_index,
            winner=self.winner,
            bonus_guess=self.bonus_guess,
            tracks_remaining=self.deck.remaining,
            tracks_used=len(self.deck.used),
            win_score=self.win_score,
        )

    def _require(self, state_type, action: str) -> None:
        if isinstance(self.state, Won):
            raise InvalidAction(f'Game is over, {self.state.winner} won; start a new game')
        if not isinstance(self.state, state_type):
            raise InvalidAction(f'Cannot {action} while {self.phase.value}')

    def draw(self) -> Track:
        self._require(Idle, 'draw')
        track = self.deck.draw()
        self.state = Playing(track)
        logger.info(f"[draw] track={track.id} remaining={self.deck.remaining}")
        return track

    def reveal(self) -> Track:
        self._require(Playing, 'reveal')
        track = self.state.track
        self.deck.retire(track)
        self.state = Revealed(track)
        return track

    def skip(self) -> Track:
        self._require(Playing, 'skip')
        player = self.active_player
        if player.tokens <= 0:
            raise InsufficientTokens(f'{player.name} has no tokens left to skip')
        skipped = self.state.track
        track = self.deck.swap(skipped)
        self.ledger.adjust_tokens(self.active_player_index, -1)
        self.state = Playing(track)
        logger.info(f"[skip] player={player.name} skipped={skipped.id} next={track.id} tokens={player.tokens}")
        return track

    def check_year_guess(self, guess: str, guesser_index: Optional[int] = None) -> BonusGuess:
        """Evaluate the round's single bonus year guess.

        Once a verdict exists for this round, later calls return it unchanged
        whatever they pass in.
        """
        self._require(Revealed, 'guess the year')
        if self.state.bonus is not None:
            return self.state.bonus
        if not isinstance(guess, str) or not guess.strip():
            raise InvalidAction('A year guess is required')
        if guesser_index is None:
            guesser_index = self.active_player_index
        guesser = self.ledger.player(guesser_index)
        record = evaluate_year_guess(self.state.track, guess, guesser_index)
        if record.verdict is Verdict.CORRECT:
            self.ledger.adjust_tokens(guesser_index, 1)
        self.state = Revealed(self.state.track, bonus=record)
        logger.info(f"[bonus] guesser={guesser.name} guess={record.guess} verdict={record.verdict.value}")
        return record

    def resolve_placement(self, correct: bool) -> RoundState:
        self._require(Revealed, 'resolve a placement')
        if not isinstance(correct, bool):
            raise InvalidAction('Placement result must be true or false')
        winner = score_placement(self.ledger, self.active_player_index, correct, self.win_score)
        if winner is not None:
            self.state = Won(winner, self.state.track, self.state.bonus)
            logger.info(f"[win] winner={winner}")
            return self.state
        self.active_player_index = next_player_index(self.active_player_index, len(self.players))
        self.state = Idle()
        return self.state

    def adjust_tokens(self, player_index: int, delta: int) -> int:
        if isinstance(self.state, Won):
            raise InvalidAction(f'Game is over, {self.state.winner} won; start a new game')
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidAction('Token adjustment must be an integer')
        return self.ledger.adjust_tokens(player_index, delta)

    def new_game(self, player_config: Optional[PlayerConfig] = None,
                 tracks: Optional[Iterable[Track]] = None) -> None:
        """Discard the whole session and deal again.

        Defaults to the current roster and track list.
        """
        config = player_config or self.config
        config = validate_player_config(config.names, config.starting_tokens, self.limits)
        if tracks is not None:
            self.tracks = tuple(unique_tracks(tracks))
        self._start(config)
