"""Session transitions driven by server events"""

import logging
from typing import Iterable, Optional

from .models import Card, Phase, Player, Session

logger = logging.getLogger(__name__)


def _require(session: Session, action: str, *phases: Phase) -> bool:
    if session.phase in phases:
        return True
    logger.warning(f"Ignoring {action} in phase {session.phase.value}")
    return False


def enter_lobby(session: Session, lobby_id: str, player_name: str) -> bool:
    """Apply an accepted join handshake."""
    if not _require(session, "join", Phase.START):
        return False
    session.phase = Phase.LOBBY
    session.lobby_id = lobby_id
    session.player_name = player_name
    logger.info(f"Joined lobby {lobby_id} as {player_name}")
    return True


def replace_roster(session: Session, players: Iterable[Player]) -> bool:
    if not _require(session, "roster snapshot", Phase.LOBBY):
        return False
    roster = []
    seen = set()
    for player in players:
        if player.name not in seen:
            seen.add(player.name)
            roster.append(player)
    session.roster = roster
    return True


def add_player(session: Session, player: Player) -> bool:
    if not _require(session, "player join", Phase.LOBBY, Phase.IN_GAME):
        return False
    if all(p.name != player.name for p in session.roster):
        session.roster = session.roster + [player]
    return True


def remove_player(session: Session, name: str) -> bool:
    if not _require(session, "player leave", Phase.LOBBY, Phase.IN_GAME):
        return False
    session.roster = [p for p in session.roster if p.name != name]
    return True


def grant_admin(session: Session) -> bool:
    session.is_admin = True
    return True


def begin_game(session: Session) -> bool:
    """
    Enter a round. The hand and top card are left empty; the caller
    fetches them from the server afterwards.
    """
    if not _require(session, "game start", Phase.LOBBY):
        return False
    session.phase = Phase.IN_GAME
    session.hand = []
    session.top_card = None
    session.pending_draw_count = 0
    logger.info("Round started")
    return True


def end_round(session: Session) -> bool:
    if not _require(session, "round end", Phase.IN_GAME):
        return False
    session.phase = Phase.LOBBY
    logger.info("Round ended")
    return True


def set_top_card(session: Session, card: Optional[Card]) -> None:
    session.top_card = card


def add_cards(session: Session, cards: Iterable[Card]) -> None:
    """Add cards to the hand; a card whose key is already held replaces it."""
    hand = list(session.hand)
    for card in cards:
        for i, held in enumerate(hand):
            if held.key == card.key:
                hand[i] = card
                break
        else:
            hand.append(card)
    session.hand = hand


def clear_hand(session: Session) -> None:
    session.hand = []


def grant_turn(session: Session, draw_amount: int) -> bool:
    if not _require(session, "turn", Phase.IN_GAME):
        return False
    session.pending_draw_count = max(0, draw_amount)
    return True


def remove_card(session: Session, key: str) -> bool:
    """Drop the card with the given key after the server accepted it."""
    if key not in session.hand_keys():
        logger.warning(f"Accepted card {key} is not in hand")
        return False
    session.hand = [card for card in session.hand if card.key != key]
    return True
