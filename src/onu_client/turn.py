"""
Turn resolution: build the choice set, submit one decision, reconcile.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .cards import canonical_order, card_label
from .channel import EventChannel
from .constants import CARD_REQUEST, DRAW_LABEL, PLAY_CARD
from .errors import CallError
from .models import Session
from .prompts import Choice, Prompter
from .render import ConsolePresenter
from .session import remove_card

logger = logging.getLogger(__name__)


class TurnOutcome(str, Enum):
    DREW = "drew"
    PLAYED = "played"


@dataclass(frozen=True)
class Decision:
    """What the player picked: a draw, or the card to play."""
    kind: str  # 'draw' | 'play'
    key: Optional[str] = None

    @classmethod
    def draw(cls) -> 'Decision':
        return cls('draw')

    @classmethod
    def play(cls, key: str) -> 'Decision':
        return cls('play', key)


def build_choices(session: Session) -> List[Choice]:
    """Draw option first, then the hand in canonical order."""
    choices = [Choice(DRAW_LABEL.format(amount=max(session.pending_draw_count, 0)), Decision.draw())]
    for card in canonical_order(session.hand):
        choices.append(Choice(card_label(card), Decision.play(card.key)))
    return choices


class TurnResolver:
    """
    Runs one turn for the local player.

    The hand is only changed after the server accepts a play. A rejected
    or refused play re-prompts from the current session state.
    """

    def __init__(self, session: Session, channel: EventChannel, prompter: Prompter,
                 presenter: ConsolePresenter):
        self.session = session
        self.channel = channel
        self.prompter = prompter
        self.presenter = presenter

    def prompt_message(self) -> str:
        top = self.presenter.card_text(self.session.top_card, bold=True)
        return f"What card do you want to play? (Top Card: {top})"

    async def take_turn(self) -> TurnOutcome:
        while True:
            self.presenter.turn_screen()
            decision = await self.prompter.choose(self.prompt_message(), build_choices(self.session))

            if decision.kind == 'draw':
                await self.channel.emit(CARD_REQUEST)
                logger.info(f"Requested cards (draw amount {self.session.pending_draw_count})")
                return TurnOutcome.DREW

            try:
                accepted = await self.channel.call(PLAY_CARD, decision.key)
            except CallError as e:
                logger.warning(f"Play of {decision.key} refused: {e.reason}")
                continue
            if not accepted:
                logger.info(f"Play of {decision.key} rejected, asking again")
                continue

            remove_card(self.session, decision.key)
            self.presenter.table(self.session.snapshot())
            return TurnOutcome.PLAYED
