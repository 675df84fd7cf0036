from .card import Card, CardCreate, CardUpdate, new_card
from .review import Quality, ReviewCreate, SessionCreate, SessionMode, parse_quality

__all__ = [
    'Card', 'CardCreate', 'CardUpdate', 'new_card',
    'Quality', 'ReviewCreate', 'SessionCreate', 'SessionMode', 'parse_quality',
]
