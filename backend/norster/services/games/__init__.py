"""Game domain services: deck, ledger, bonus guesses, scoring and the engine.

This package contains pure domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics. Nothing in here touches Flask, the network or
storage.
"""
from .catalog import parse_tracks, unique_tracks
from .engine import GameEngine, SetupLimits, WIN_SCORE, validate_player_config
from .errors import EmptyCatalog, GameError, InsufficientTokens, InvalidAction, InvalidSetup

__all__ = [
    'GameEngine', 'SetupLimits', 'WIN_SCORE', 'validate_player_config',
    'parse_tracks', 'unique_tracks',
    'GameError', 'InvalidSetup', 'InvalidAction', 'InsufficientTokens', 'EmptyCatalog',
]
