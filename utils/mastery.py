from typing import Iterable

from models.card import Card

DEFAULT_MASTERY_RULES = {
    "min_repetitions": 3,
}

def mastery_status(card: Card, rules: dict = DEFAULT_MASTERY_RULES) -> str:
    if card.repetitions <= 0:
        return "new"
    if card.repetitions >= rules["min_repetitions"]:
        return "mastered"
    return "learning"

def count_mastered(cards: Iterable[Card], rules: dict = DEFAULT_MASTERY_RULES) -> int:
    return sum(1 for card in cards if mastery_status(card, rules) == "mastered")

def mastery_percent(mastered: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round((mastered / total) * 100, 1)
