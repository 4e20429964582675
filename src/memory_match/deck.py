# memory_match/deck.py
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
import random
from typing import List, Optional

PAIR_COUNT = 8
CONTENTS: List[str] = [str(i + 1) for i in range(PAIR_COUNT)]


@dataclass(eq=False)
class Card:
    """
    One card of a deck.

    Compared by identity: two decks never share Card objects, so a card
    from a discarded deck is never mistaken for a live one.
    """
    id: int
    content: str
    face_up: bool = False
    matched: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "face_up": self.face_up,
            "matched": self.matched,
        }


def generate(rng: Optional[random.Random] = None) -> List[Card]:
    """Build 8 pairs of face-down cards (ids in creation order) and shuffle them."""
    rng = rng or random.Random()

    cards: List[Card] = []
    next_id = 0
    for content in CONTENTS:
        for _ in range(2):
            cards.append(Card(id=next_id, content=content))
            next_id += 1

    rng.shuffle(cards)
    _check_deck(cards)
    return cards


def _check_deck(cards: List[Card]) -> None:
    assert len(cards) == 2 * PAIR_COUNT
    assert len({card.id for card in cards}) == len(cards)
    counts = Counter(card.content for card in cards)
    assert len(counts) == PAIR_COUNT
    assert all(n == 2 for n in counts.values())
