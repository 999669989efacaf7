from typing import List

from norster.models import Player
from .errors import InvalidAction


class Ledger:
    """Scores and token balances. Neither ever drops below zero."""

    def __init__(self, players: List[Player]):
        self.players = players

    def player(self, index: int) -> Player:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.players):
            raise InvalidAction(f'No player at index {index!r}')
        return self.players[index]

    def adjust_tokens(self, index: int, delta: int) -> int:
        player = self.player(index)
        player.tokens = max(0, player.tokens + delta)
        return player.tokens

    def award_point(self, index: int) -> int:
        player = self.player(index)
        player.score += 1
        return player.score
