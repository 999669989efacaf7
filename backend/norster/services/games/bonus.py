from norster.models import BonusGuess, Track, Verdict


def evaluate_year_guess(track: Track, guess: str, guesser_index: int) -> BonusGuess:
    """Exact string match of the trimmed guess against the track's year."""
    guess = guess.strip()
    verdict = Verdict.CORRECT if guess == track.year else Verdict.WRONG
    return BonusGuess(guesser_index=guesser_index, guess=guess, verdict=verdict)
