"""
Card and deck model: event deck template expansion, treasure deck, shuffling.
Decks are plain lists; the top card is the end of the list.
"""

import random
from typing import TypeVar

from gremios.engine.state import Treasure, TREASURE_WEALTH, TREASURE_COMMON, TREASURE_RARE

T = TypeVar("T")

# (type, vp, copies)
TREASURE_TEMPLATE = [
    (TREASURE_WEALTH, 0, 8),
    (TREASURE_COMMON, 1, 15),
    (TREASURE_RARE, 2, 8),
]
WEALTH_COIN_VALUES = (3, 4)


def shuffle_array(items: list[T], rng: random.Random | None = None) -> list[T]:
    """Fisher-Yates shuffle. Returns a new list; the input is left as is."""
    rng = rng or random.Random()
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def generate_event_deck(event_defs: dict) -> list[str]:
    """Expand the event table into one id per physical card (unshuffled)."""
    deck: list[str] = []
    for event_id, event_def in event_defs.items():
        deck.extend([event_id] * event_def.count)
    return deck


def create_treasure_deck(rng: random.Random | None = None) -> list[Treasure]:
    """31 treasures, shuffled. Each wealth card gets its coin value here, once."""
    rng = rng or random.Random()
    deck: list[Treasure] = []
    for treasure_type, vp, copies in TREASURE_TEMPLATE:
        for _ in range(copies):
            coin_value = rng.choice(WEALTH_COIN_VALUES) if treasure_type == TREASURE_WEALTH else None
            deck.append(Treasure(treasure_type, vp, coin_value))
    return shuffle_array(deck, rng)
