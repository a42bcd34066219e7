"""
Canonical card ordering and labels for display.
"""

from typing import Iterable, List, Tuple

from .constants import COLOR_PRIORITY, COLORS, TYPES, WILD
from .models import Card


def color_name(code: str) -> str:
    """Display name of a color code; unknown codes are returned unchanged."""
    return COLORS.get(code, code)


def type_name(code: str) -> str:
    """Display name of a type code; unknown codes are returned unchanged."""
    return TYPES.get(code, code)


def card_label(card: Card) -> str:
    """
    Human-readable label for a card.

    Depends only on color and type, never on the key. Colorless cards
    show only the type name.
    """
    return f"{color_name(card.color)} {type_name(card.type)}".strip()


def get_color_rank(color: str) -> Tuple[int, str]:
    """
    Sort key of a color group.

    Known colors follow COLOR_PRIORITY, codes introduced later by the
    server come next in code order, and the colorless group is last.
    """
    if color in COLOR_PRIORITY:
        return COLOR_PRIORITY.index(color), ''
    if color == WILD:
        return len(COLOR_PRIORITY) + 1, ''
    return len(COLOR_PRIORITY), color


def card_sort_key(card: Card) -> Tuple[Tuple[int, str], str, str]:
    return get_color_rank(card.color), card.type, card.key


def canonical_order(cards: Iterable[Card]) -> List[Card]:
    """
    Sort cards into display order: grouped by color, then by type code.

    The key breaks ties between identical cards so the result does not
    depend on the input order.
    """
    return sorted(cards, key=card_sort_key)


def group_by_color(cards: Iterable[Card]) -> List[Tuple[str, List[Card]]]:
    """Canonically ordered cards split into (color, cards) groups."""
    groups: List[Tuple[str, List[Card]]] = []
    for card in canonical_order(cards):
        if groups and groups[-1][0] == card.color:
            groups[-1][1].append(card)
        else:
            groups.append((card.color, [card]))
    return groups
