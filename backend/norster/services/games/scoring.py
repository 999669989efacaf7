import logging
from typing import Optional

from .ledger import Ledger

logger = logging.getLogger(__name__)


def score_placement(ledger: Ledger, active_index: int, correct: bool, win_score: int) -> Optional[str]:
    """Apply scoring for the active player's placement.

    +1 on a correct placement, nothing otherwise. Returns the player's name
    when the placement brings them to ``win_score``; a wrong placement is
    never checked for a win.
    """
    if not correct:
        return None
    score = ledger.award_point(active_index)
    player = ledger.player(active_index)
    logger.info(f"[score] player={player.name} score={score}")
    if score >= win_score:
        return player.name
    return None


def next_player_index(current: int, player_count: int) -> int:
    return (current + 1) % player_count
