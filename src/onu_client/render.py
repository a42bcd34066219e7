"""
Console rendering of session snapshots.
"""

import sys
from typing import Optional, TextIO

from .cards import card_label, group_by_color
from .models import Card, SessionSnapshot


# ANSI colors for CLI rendering
class Ansi:
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


CARD_COLORS = {
    'r': Ansi.RED,
    'g': Ansi.GREEN,
    'b': Ansi.BLUE,
    'y': Ansi.YELLOW,
    'l': Ansi.MAGENTA,
    't': Ansi.CYAN,
}

# Lines pushed before a turn prompt so the previous screen scrolls away
TURN_SCROLL_LINES = 100


class ConsolePresenter:
    """Writes display text for a snapshot; never touches the session."""

    def __init__(self, out: Optional[TextIO] = None, color: Optional[bool] = None):
        self.out = out or sys.stdout
        if color is None:
            color = hasattr(self.out, "isatty") and self.out.isatty()
        self.color = color

    def style(self, text: str, *codes: str) -> str:
        if not self.color or not codes:
            return text
        return "".join(codes) + text + Ansi.RESET

    def card_text(self, card: Optional[Card], bold: bool = False) -> str:
        if card is None:
            return "-"
        codes = [CARD_COLORS[card.color]] if card.color in CARD_COLORS else []
        if bold:
            codes.append(Ansi.BOLD)
        return self.style(card_label(card), *codes)

    def write(self, line: str = "") -> None:
        print(line, file=self.out)

    def welcome(self) -> None:
        self.write("Welcome to " + self.style("Onu!", Ansi.YELLOW, Ansi.BOLD))

    def joined(self, lobby_id: str, invite_url: str) -> None:
        self.write(self.style("✔ ", Ansi.GREEN)
                   + f"Joined lobby {lobby_id}! Invite friends using this link: {invite_url}")

    def error(self, message: str) -> None:
        self.write(self.style("✖ ", Ansi.RED) + message)

    def player_joined(self, name: str) -> None:
        self.write(self.style(f"{name} has joined the lobby!", Ansi.GREEN))

    def player_left(self, name: str) -> None:
        self.write(self.style(f"{name} has left the lobby!", Ansi.RED))

    def round_ended(self) -> None:
        self.write(self.style("The round is over.", Ansi.BOLD))

    def hand_cleared(self) -> None:
        self.write("Clearing cards...")

    def top_card(self, card: Card) -> None:
        self.write(self.style("Top Card: ", Ansi.BOLD) + self.card_text(card))

    def table(self, snapshot: SessionSnapshot) -> None:
        self.top_card(snapshot.top_card)
        self.write(self.style("Deck:", Ansi.BOLD))
        for _, cards in group_by_color(snapshot.hand):
            for card in cards:
                self.write(f"\t{self.card_text(card)}")

    def turn_screen(self) -> None:
        self.write("\n" * TURN_SCROLL_LINES)
