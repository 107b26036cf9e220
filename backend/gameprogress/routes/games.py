"""
Game catalog API route - the minigames the console offers and the badge
each one awards.
"""

from fastapi import APIRouter

from gameprogress import config
from gameprogress.games_config import GAMES
from gameprogress.services.badges import award_label

router = APIRouter()


@router.get("/api/games")
def list_games():
    """List catalog games with their badge label and the score needed."""
    return {
        "badge_threshold": config.BADGE_SCORE_THRESHOLD,
        "games": [
            {**game, "badge": award_label(game["num"])}
            for game in GAMES
        ]
    }
