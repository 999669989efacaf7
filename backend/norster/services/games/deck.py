import logging
import random
from typing import Iterable, List, Optional

from norster.models import Track
from .errors import EmptyCatalog

logger = logging.getLogger(__name__)


class Deck:
    """Sampling without replacement over a fixed track set.

    Cards leave ``queue`` when drawn and come back through ``used`` once
    retired. When the queue runs dry the whole used pile is reshuffled into a
    new queue. A drawn card that has not been retired is in neither list.
    """

    def __init__(self, tracks: Iterable[Track], rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.queue: List[Track] = list(tracks)
        self.rng.shuffle(self.queue)
        self.used: List[Track] = []

    def __len__(self) -> int:
        return len(self.queue) + len(self.used)

    @property
    def remaining(self) -> int:
        return len(self.queue)

    def draw(self) -> Track:
        if not self.queue:
            if not self.used:
                raise EmptyCatalog('No tracks to draw from')
            self._reshuffle()
        return self.queue.pop(0)

    def retire(self, track: Track) -> None:
        self.used.append(track)

    def swap(self, held: Track) -> Track:
        """Retire ``held`` and draw a replacement, avoiding an immediate repeat
        unless ``held`` is the only track left in circulation."""
        if not self.queue and not self.used:
            return held
        replacement = self.draw()
        self.retire(held)
        return replacement

    def _reshuffle(self) -> None:
        pile = self.used
        self.used = []
        self.rng.shuffle(pile)
        self.queue = pile
        logger.info(f"[reshuffle] {len(pile)} tracks back in the queue")
