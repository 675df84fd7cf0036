from __future__ import annotations

import random
import unicodedata
from typing import Any, Callable, Iterable, List, Optional

from models.card import Card
from utils.sm2 import FLAT, PhaseSchedule

# Letters that carry a diacritic but have no Unicode decomposition.
_EXTRA_FOLDS = str.maketrans({
    "ł": "l", "Ł": "L",
    "ø": "o", "Ø": "O",
    "đ": "d", "Đ": "D",
    "ħ": "h", "Ħ": "H",
    "ı": "i",
    "æ": "ae", "Æ": "AE",
    "œ": "oe", "Œ": "OE",
})


def fold_text(text: str) -> str:
    """Collation key comparing base letters, ignoring case and diacritics."""
    decomposed = unicodedata.normalize("NFKD", text.translate(_EXTRA_FOLDS))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def order_for_session(
    cards: Iterable[Card],
    schedule: PhaseSchedule = FLAT,
    collate: Callable[[str], Any] = fold_text,
) -> List[Card]:
    """Cards still on a schedule step first, then by due time, then by front text."""
    threshold = schedule.mature_threshold
    return sorted(
        cards,
        key=lambda card: (
            card.repetitions >= threshold,
            card.due_at,
            collate(card.front),
            card.id,
        ),
    )


def shuffle_cards(cards: Iterable[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Fisher-Yates shuffle into a new list."""
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
