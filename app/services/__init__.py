"""Services package - expose all concrete services from one import."""
from .game_service import GameService
from .suggest_service import SuggestService

__all__ = [
    'GameService',
    'SuggestService',
]
