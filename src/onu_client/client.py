"""Onu client: join handshake and the push event dispatch loop"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from . import session as transitions
from .channel import EventChannel, IncomingEvent
from .config import ClientConfig
from .constants import (
    COLORS, JOIN_LOBBY, REQUEST_INITIAL_CARDS, REQUEST_INITIAL_STACK, START_GAME,
    WISH_ACK_TIMEOUT, WISH_COLOR, WISH_COLORS,
)
from .errors import CallError, CallTimeout, ChannelError, JoinError
from .events import (
    AdminGranted, CardsAdded, ColorWishRequested, EventType, GameStarted, HandCleared,
    PlayerJoined, PlayerLeft, PushPayload, RosterSnapshot, RoundEnded, TopCardChanged,
    TurnGranted, parse_card, parse_cards, parse_push_event,
)
from .models import Phase, Session
from .prompts import Choice, Prompter
from .render import Ansi, CARD_COLORS, ConsolePresenter
from .turn import TurnResolver

logger = logging.getLogger(__name__)

Handler = Callable[[PushPayload, IncomingEvent], Awaitable[None]]


class OnuClient:
    def __init__(self, config: ClientConfig, channel: EventChannel, prompter: Prompter,
                 presenter: ConsolePresenter, session: Optional[Session] = None):
        self.config = config
        self.channel = channel
        self.prompter = prompter
        self.presenter = presenter
        self.session = session or Session()
        self.turns = TurnResolver(self.session, channel, prompter, presenter)
        self._start_offer_pending = False
        self.start_offer: Optional[asyncio.Task] = None
        self._handlers: Dict[EventType, Handler] = {
            EventType.ROSTER_SNAPSHOT: self.on_roster_snapshot,
            EventType.PLAYER_JOINED: self.on_player_joined,
            EventType.PLAYER_LEFT: self.on_player_left,
            EventType.ROUND_ENDED: self.on_round_ended,
            EventType.ADMIN_GRANTED: self.on_admin_granted,
            EventType.GAME_STARTED: self.on_game_started,
            EventType.TOP_CARD_CHANGED: self.on_top_card_changed,
            EventType.CARDS_ADDED: self.on_cards_added,
            EventType.HAND_CLEARED: self.on_hand_cleared,
            EventType.COLOR_WISH_REQUESTED: self.on_color_wish_requested,
            EventType.TURN_GRANTED: self.on_turn_granted,
        }

    async def run(self, name: Optional[str] = None, lobby: Optional[str] = None) -> None:
        self.presenter.welcome()
        try:
            await self.channel.connect()
            await self.join(name, lobby)
            await self.dispatch_forever()
        finally:
            if self.start_offer is not None:
                self.start_offer.cancel()
            await self.channel.close()

    async def join(self, name: Optional[str] = None, lobby: Optional[str] = None) -> None:
        """
        Join a lobby, asking for whatever was not given.

        Raises:
            JoinError: If the server rejects the join
        """
        name = name or await self.prompter.ask_text("What is your name?")
        lobby = lobby or await self.prompter.ask_text("What lobby do you want to join?")

        try:
            reply = await self.channel.call(JOIN_LOBBY, lobby, name)
        except CallError as e:
            raise JoinError(e.reason)
        if reply:
            raise JoinError(reply)

        transitions.enter_lobby(self.session, lobby, name)
        self.presenter.joined(lobby, self.config.invite_url(lobby))

    async def dispatch_forever(self) -> None:
        while True:
            incoming = await self.channel.next_event()
            if incoming is None:
                logger.info("Event stream ended")
                return
            await self.dispatch(incoming)

    async def dispatch(self, incoming: IncomingEvent) -> None:
        """Run the handler for one push event to completion."""
        try:
            event_type = EventType(incoming.name)
        except ValueError:
            logger.debug(f"No handler for event {incoming.name}")
            return

        try:
            payload = parse_push_event(incoming.name, incoming.args)
        except ValueError as e:
            logger.warning(f"Dropping malformed event: {e}")
            return

        await self._handlers[event_type](payload, incoming)

    # ---- lobby ----

    async def on_roster_snapshot(self, payload: RosterSnapshot, incoming: IncomingEvent) -> None:
        transitions.replace_roster(self.session, [p.to_player() for p in payload.players])

    async def on_player_joined(self, payload: PlayerJoined, incoming: IncomingEvent) -> None:
        player = payload.player.to_player()
        if transitions.add_player(self.session, player):
            self.presenter.player_joined(player.name)

    async def on_player_left(self, payload: PlayerLeft, incoming: IncomingEvent) -> None:
        player = payload.player.to_player()
        if transitions.remove_player(self.session, player.name):
            self.presenter.player_left(player.name)

    async def on_admin_granted(self, payload: AdminGranted, incoming: IncomingEvent) -> None:
        transitions.grant_admin(self.session)
        if self.session.phase == Phase.LOBBY:
            self.offer_start()
        else:
            self._start_offer_pending = True

    def offer_start(self) -> None:
        """Wait for the admin to start the game without holding up dispatch."""
        self._start_offer_pending = False
        if self.start_offer is None or self.start_offer.done():
            self.start_offer = asyncio.create_task(self._start_when_ready())

    async def _start_when_ready(self) -> None:
        await self.prompter.pause("Press enter to start the game!\n\n")
        if self.session.phase != Phase.LOBBY:
            logger.info("Round already running, not sending startGame")
            return
        try:
            await self.channel.emit(START_GAME)
        except ChannelError as e:
            logger.error(f"Could not start the game: {e}")

    async def on_round_ended(self, payload: RoundEnded, incoming: IncomingEvent) -> None:
        if not transitions.end_round(self.session):
            return
        self.presenter.round_ended()
        if self._start_offer_pending:
            self.offer_start()

    # ---- round ----

    async def on_game_started(self, payload: GameStarted, incoming: IncomingEvent) -> None:
        if not transitions.begin_game(self.session):
            return

        try:
            hand = parse_cards(await self.channel.call(REQUEST_INITIAL_CARDS))
            top_card = parse_card(await self.channel.call(REQUEST_INITIAL_STACK))
        except CallError as e:
            logger.error(f"Could not fetch the opening table: {e}")
            return
        except ValueError as e:
            logger.error(f"Malformed opening table: {e}")
            return

        transitions.add_cards(self.session, hand)
        transitions.set_top_card(self.session, top_card)

        # the first player gets a turn right away, which prints the table
        roster = self.session.roster
        if not roster or roster[0].name != self.session.player_name:
            self.presenter.table(self.session.snapshot())

    async def on_top_card_changed(self, payload: TopCardChanged, incoming: IncomingEvent) -> None:
        transitions.set_top_card(self.session, payload.card.to_card())
        logger.info(f"Top card is now {payload.card.type}/{payload.card.color}")

    async def on_cards_added(self, payload: CardsAdded, incoming: IncomingEvent) -> None:
        transitions.add_cards(self.session, [c.to_card() for c in payload.cards])
        self.presenter.table(self.session.snapshot())

    async def on_hand_cleared(self, payload: HandCleared, incoming: IncomingEvent) -> None:
        self.presenter.hand_cleared()
        transitions.clear_hand(self.session)
        await self.channel.acknowledge(incoming)

    async def on_color_wish_requested(self, payload: ColorWishRequested, incoming: IncomingEvent) -> None:
        choices = [Choice(self.presenter.style(COLORS[c], CARD_COLORS[c], Ansi.BOLD), c)
                   for c in WISH_COLORS]
        color = await self.prompter.choose("What color do you want?", choices)
        try:
            await self.channel.call(WISH_COLOR, color, timeout=WISH_ACK_TIMEOUT)
        except CallTimeout:
            logger.debug("Color wish was not acknowledged")
        except CallError as e:
            logger.error(f"Color wish refused: {e}")

    async def on_turn_granted(self, payload: TurnGranted, incoming: IncomingEvent) -> None:
        if not transitions.grant_turn(self.session, payload.draw_amount):
            return
        outcome = await self.turns.take_turn()
        logger.info(f"Turn finished: {outcome.value}")
