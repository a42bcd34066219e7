"""
Push event types and payload models.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Card, Player


class EventType(str, Enum):
    """Server-initiated event types."""
    ROSTER_SNAPSHOT = "openLobby"
    PLAYER_JOINED = "playerJoin"
    PLAYER_LEFT = "playerLeave"
    ROUND_ENDED = "gameEnded"
    ADMIN_GRANTED = "admin"
    GAME_STARTED = "starting"
    TOP_CARD_CHANGED = "addStackCard"
    CARDS_ADDED = "addDeckCard"
    HAND_CLEARED = "clearCards"
    COLOR_WISH_REQUESTED = "wishColor"
    TURN_GRANTED = "yourTurn"


class CardPayload(BaseModel):
    """Card as sent by the server."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    color: str = ""
    type: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)

    @field_validator("color", mode="before")
    @classmethod
    def _none_is_colorless(cls, value):
        return "" if value is None else value

    def to_card(self) -> Card:
        return Card(color=self.color, type=self.type, key=self.key)


class PlayerPayload(BaseModel):
    """Player as sent by the server."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    username: str = Field(..., min_length=1)

    def to_player(self) -> Player:
        return Player(name=self.username)


class PushPayload(BaseModel):
    """Base payload; events without arguments use it as is."""

    @classmethod
    def from_args(cls, args: Sequence[Any]) -> "PushPayload":
        return cls()


class RosterSnapshot(PushPayload):
    model_config = ConfigDict(extra="ignore")

    players: List[PlayerPayload] = Field(default_factory=list)
    me: Optional[PlayerPayload] = None

    @classmethod
    def from_args(cls, args):
        return cls.model_validate(args[0])


class PlayerJoined(PushPayload):
    player: PlayerPayload

    @classmethod
    def from_args(cls, args):
        return cls(player=args[0])


class PlayerLeft(PushPayload):
    player: PlayerPayload

    @classmethod
    def from_args(cls, args):
        return cls(player=args[0])


class RoundEnded(PushPayload):
    pass


class AdminGranted(PushPayload):
    pass


class GameStarted(PushPayload):
    pass


class TopCardChanged(PushPayload):
    card: CardPayload

    @classmethod
    def from_args(cls, args):
        return cls(card=args[0])


class CardsAdded(PushPayload):
    """One or more cards dealt to the local player, always a list."""
    cards: List[CardPayload]

    @field_validator("cards", mode="before")
    @classmethod
    def _single_card_is_a_list(cls, value):
        if isinstance(value, dict):
            return [value]
        return value

    @classmethod
    def from_args(cls, args):
        return cls(cards=args[0])


class HandCleared(PushPayload):
    pass


class ColorWishRequested(PushPayload):
    pass


class TurnGranted(PushPayload):
    draw_amount: int = 0

    @field_validator("draw_amount", mode="before")
    @classmethod
    def _missing_is_zero(cls, value):
        return 0 if value is None else value

    @classmethod
    def from_args(cls, args):
        return cls(draw_amount=args[0] if args else 0)


EVENT_MODELS: Dict[EventType, Type[PushPayload]] = {
    EventType.ROSTER_SNAPSHOT: RosterSnapshot,
    EventType.PLAYER_JOINED: PlayerJoined,
    EventType.PLAYER_LEFT: PlayerLeft,
    EventType.ROUND_ENDED: RoundEnded,
    EventType.ADMIN_GRANTED: AdminGranted,
    EventType.GAME_STARTED: GameStarted,
    EventType.TOP_CARD_CHANGED: TopCardChanged,
    EventType.CARDS_ADDED: CardsAdded,
    EventType.HAND_CLEARED: HandCleared,
    EventType.COLOR_WISH_REQUESTED: ColorWishRequested,
    EventType.TURN_GRANTED: TurnGranted,
}


def parse_push_event(name: str, args: Sequence[Any]) -> PushPayload:
    """
    Parse a raw push event into its payload model.

    Args:
        name: Event name as received on the wire
        args: Positional event arguments

    Returns:
        Parsed payload model

    Raises:
        ValueError: If the event name is unknown or the payload is malformed
    """
    try:
        event_type = EventType(name)
    except ValueError:
        raise ValueError(f"Unknown event type: {name}")

    model = EVENT_MODELS[event_type]
    try:
        return model.from_args(list(args))
    except (IndexError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid {name} payload: {e}")


def parse_card(data: Any) -> Card:
    """Parse a single card returned by a call."""
    return CardPayload.model_validate(data).to_card()


def parse_cards(data: Any) -> List[Card]:
    """Parse a card list returned by a call; a lone card becomes a list."""
    return [payload.to_card() for payload in CardsAdded(cards=data).cards]
