# games_config.py
# Minigames shipped by the browser client, keyed by game number.
# Game numbers are what the client reports in session payloads.
GAMES = [
    {"num": 1, "name": "Mouse Trainer", "skill": "Mouse"},
    {"num": 2, "name": "Banana Chase", "skill": "Mouse"},
    {"num": 3, "name": "Typewriter", "skill": "Keyboard"},
    {"num": 4, "name": "Word Weaver", "skill": "Keyboard"},
    {"num": 5, "name": "Rainbow Painter", "skill": "Coloring"},
    {"num": 6, "name": "Fruit Drop", "skill": "Drag and drop"},
    {"num": 7, "name": "Art Puzzle", "skill": "Drag and drop"},
    {"num": 8, "name": "Sentence Scribe", "skill": "Keyboard"},
    {"num": 9, "name": "Story Self", "skill": "Reading"},
    {"num": 10, "name": "PC Part Picker", "skill": "Computer basics"},
    {"num": 11, "name": "Number Matching", "skill": "Numbers"},
    {"num": 12, "name": "Paragraph Pro", "skill": "Keyboard"},
    {"num": 13, "name": "Candy Sorter", "skill": "Drag and drop"},
    {"num": 14, "name": "Memory Melody", "skill": "Memory"},
    {"num": 15, "name": "Multiple Choice", "skill": "Reading"},
]

GAMES_BY_NUM = {g["num"]: g for g in GAMES}


def get_game(game_num):
    """Return the catalog entry for a game number, or None if unknown."""
    return GAMES_BY_NUM.get(game_num)
