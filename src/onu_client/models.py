"""Client-side session models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class Phase(str, Enum):
    START = 'start'      # no lobby joined yet
    LOBBY = 'lobby'      # joined, waiting for a round
    IN_GAME = 'in_game'  # round in progress


@dataclass(frozen=True)
class Card:
    color: str  # '' for colorless / wild cards
    type: str
    key: str    # server-assigned, unique within a hand


@dataclass(frozen=True)
class Player:
    name: str


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a Session handed to the presenter."""
    phase: Phase
    lobby_id: Optional[str]
    player_name: Optional[str]
    roster: Tuple[Player, ...]
    hand: Tuple[Card, ...]
    top_card: Optional[Card]
    pending_draw_count: int
    is_admin: bool


@dataclass
class Session:
    phase: Phase = Phase.START
    lobby_id: Optional[str] = None
    player_name: Optional[str] = None
    roster: List[Player] = field(default_factory=list)  # insertion order, unique by name
    hand: List[Card] = field(default_factory=list)  # display order is derived, see cards.canonical_order
    top_card: Optional[Card] = None
    pending_draw_count: int = 0
    is_admin: bool = False

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            lobby_id=self.lobby_id,
            player_name=self.player_name,
            roster=tuple(self.roster),
            hand=tuple(self.hand),
            top_card=self.top_card,
            pending_draw_count=self.pending_draw_count,
            is_admin=self.is_admin,
        )

    def hand_keys(self) -> List[str]:
        return [card.key for card in self.hand]
