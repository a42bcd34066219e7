"""
Tests for the client's join handshake and event dispatch.
"""

import asyncio

import pytest

from onu_client.channel import IncomingEvent
from onu_client.client import OnuClient
from onu_client.errors import ChannelError, JoinError
from onu_client.events import EventType
from onu_client.models import Card, Phase, Player
from onu_client.tests.fakes import FakeChannel, wire_card


def make_client(config, channel, prompter, presenter):
    return OnuClient(config, channel, prompter, presenter)


def joined_client(config, channel, prompter, presenter, *names):
    client = make_client(config, channel, prompter, presenter)
    channel.reply("joinLobby", None)
    asyncio.run(client.join("Alice", "abc"))
    if names:
        dispatch(client, "openLobby", {"players": [{"username": n} for n in names]})
    return client


def dispatch(client, name, *args):
    """Dispatch one event and let a start prompt it opened finish."""
    async def scenario():
        incoming = IncomingEvent(name, list(args))
        await client.dispatch(incoming)
        if client.start_offer is not None and not client.start_offer.done():
            await client.start_offer
        return incoming
    return asyncio.run(scenario())


def start_round(client, channel, hand=(), top=None):
    channel.reply("requestInitialCards", [wire_card(*c) for c in hand])
    channel.reply("requestInitialStack", wire_card(*(top or ("y", "1", "top"))))
    dispatch(client, "starting")


def test_every_event_type_has_a_handler(config, channel, prompter, presenter):
    client = make_client(config, channel, prompter, presenter)
    assert set(client._handlers) == set(EventType)


def test_join_asks_for_name_and_lobby(config, channel, prompter, presenter, output):
    client = make_client(config, channel, prompter, presenter)
    prompter.texts = ["Alice", "abc"]
    channel.reply("joinLobby", None)

    asyncio.run(client.join())

    assert channel.calls == [("joinLobby", "abc", "Alice")]
    assert client.session.phase == Phase.LOBBY
    assert client.session.lobby_id == "abc"
    assert "https://onu.example.org/#abc" in output.getvalue()


def test_join_rejected(config, channel, prompter, presenter):
    client = make_client(config, channel, prompter, presenter)
    channel.reply("joinLobby", "Lobby is full")

    with pytest.raises(JoinError, match="Lobby is full"):
        asyncio.run(client.join("Alice", "abc"))
    assert client.session.phase == Phase.START


def test_join_error_reply(config, channel, prompter, presenter):
    client = make_client(config, channel, prompter, presenter)
    channel.reply("joinLobby", {"error": "Name taken"})

    with pytest.raises(JoinError, match="Name taken"):
        asyncio.run(client.join("Alice", "abc"))


def test_run_dispatches_until_stream_ends(config, prompter, presenter):
    channel = FakeChannel([
        IncomingEvent("openLobby", [{"players": [{"username": "Alice"}, {"username": "Bob"}]}]),
        IncomingEvent("playerLeave", [{"username": "Bob"}]),
    ])
    channel.reply("joinLobby", None)
    client = make_client(config, channel, prompter, presenter)

    asyncio.run(client.run("Alice", "abc"))

    assert channel.connected and channel.closed
    assert client.session.roster == [Player("Alice")]


def test_run_closes_channel_on_join_error(config, channel, prompter, presenter):
    channel.reply("joinLobby", "nope")
    client = make_client(config, channel, prompter, presenter)
    with pytest.raises(JoinError):
        asyncio.run(client.run("Alice", "abc"))
    assert channel.closed


def test_run_closes_channel_when_connect_fails(config, channel, prompter, presenter):
    channel.connect_error = ChannelError("Could not connect to https://onu.example.org")
    client = make_client(config, channel, prompter, presenter)

    with pytest.raises(ChannelError):
        asyncio.run(client.run("Alice", "abc"))
    assert channel.closed
    assert channel.calls == []


def test_roster_events(config, channel, prompter, presenter, output):
    client = joined_client(config, channel, prompter, presenter, "Alice", "Bob")
    dispatch(client, "playerJoin", {"username": "Carol"})
    dispatch(client, "playerJoin", {"username": "Carol"})
    dispatch(client, "playerLeave", {"username": "Bob"})

    assert client.session.roster == [Player("Alice"), Player("Carol")]
    assert "Carol has joined the lobby!" in output.getvalue()
    assert "Bob has left the lobby!" in output.getvalue()


def test_unknown_and_malformed_events_leave_session_alone(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice", "Bob")
    before = client.session.snapshot()

    dispatch(client, "somethingNew", 1, 2)
    dispatch(client, "playerLeave", {"name": "Bob"})
    dispatch(client, "openLobby", "nonsense")
    dispatch(client, "addDeckCard", [{"color": "r"}])

    assert client.session.snapshot() == before


def test_events_before_join_do_not_leave_start(config, channel, prompter, presenter):
    client = make_client(config, channel, prompter, presenter)
    dispatch(client, "starting")
    dispatch(client, "gameEnded")
    dispatch(client, "yourTurn", 3)
    assert client.session.phase == Phase.START
    assert channel.calls == []
    assert prompter.menus == []


def test_game_start_fetches_table(config, channel, prompter, presenter, output):
    client = joined_client(config, channel, prompter, presenter, "Bob", "Alice")
    start_round(client, channel, hand=[("g", "o", "k2"), ("r", "5", "k1")])

    session = client.session
    assert session.phase == Phase.IN_GAME
    assert session.hand_keys() == ["k2", "k1"]
    assert session.top_card == Card("y", "1", "top")
    assert session.pending_draw_count == 0
    assert channel.calls[-2:] == [("requestInitialCards",), ("requestInitialStack",)]
    # not first to move, so the table is printed right away
    assert "Red 5" in output.getvalue()


def test_first_player_does_not_get_table_at_start(config, channel, prompter, presenter, output):
    client = joined_client(config, channel, prompter, presenter, "Alice", "Bob")
    start_round(client, channel, hand=[("r", "5", "k1")])
    assert "Deck:" not in output.getvalue()


def test_game_start_fetch_failure_is_logged(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    channel.reply("requestInitialCards", {"error": "no game"})
    dispatch(client, "starting")
    assert client.session.phase == Phase.IN_GAME
    assert client.session.hand == []


def test_round_end_returns_to_lobby(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    start_round(client, channel)
    dispatch(client, "gameEnded")
    assert client.session.phase == Phase.LOBBY


def test_cards_added_and_top_card(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    start_round(client, channel, hand=[("r", "5", "k1")])
    dispatch(client, "addDeckCard", wire_card("b", "2", "k2"))
    dispatch(client, "addDeckCard", [wire_card("b", "3", "k3"), wire_card("", "wish", "k4")])
    dispatch(client, "addStackCard", wire_card("g", "9", "t2"))

    assert client.session.hand_keys() == ["k1", "k2", "k3", "k4"]
    assert client.session.top_card == Card("g", "9", "t2")


def test_hand_cleared_is_acknowledged(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    start_round(client, channel, hand=[("r", "5", "k1")])
    incoming = dispatch(client, "clearCards")

    assert client.session.hand == []
    assert len(channel.acked) == 1
    assert channel.acked[0] is incoming


def test_admin_in_lobby_starts_game(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    dispatch(client, "admin")

    assert client.session.is_admin
    assert prompter.pauses == 1
    assert channel.emitted == [("startGame",)]


def test_roster_updates_while_start_prompt_waits(config, channel, prompter, presenter, output):
    client = joined_client(config, channel, prompter, presenter, "Alice")

    async def scenario():
        prompter.enter = asyncio.Event()
        await client.dispatch(IncomingEvent("admin"))
        await asyncio.sleep(0)
        await client.dispatch(IncomingEvent("playerJoin", [{"username": "Bob"}]))
        announced = "Bob has joined the lobby!" in output.getvalue()
        emitted = list(channel.emitted)
        prompter.enter.set()
        await client.start_offer
        return announced, emitted

    announced, emitted_while_waiting = asyncio.run(scenario())

    assert announced
    assert emitted_while_waiting == []
    assert client.session.roster == [Player("Alice"), Player("Bob")]
    assert channel.emitted == [("startGame",)]


def test_start_prompt_skips_emit_once_round_runs(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    channel.reply("requestInitialCards", [])
    channel.reply("requestInitialStack", wire_card("y", "1", "top"))

    async def scenario():
        prompter.enter = asyncio.Event()
        await client.dispatch(IncomingEvent("admin"))
        await asyncio.sleep(0)
        await client.dispatch(IncomingEvent("starting"))
        prompter.enter.set()
        await client.start_offer

    asyncio.run(scenario())

    assert client.session.phase == Phase.IN_GAME
    assert channel.emitted == []


def test_admin_during_round_offers_start_after_it(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    start_round(client, channel)
    dispatch(client, "admin")
    assert channel.emitted == []

    dispatch(client, "gameEnded")
    assert channel.emitted == [("startGame",)]

    start_round(client, channel)
    dispatch(client, "gameEnded")
    assert channel.emitted == [("startGame",)]


def test_color_wish(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    channel.reply("wishColor", None)
    prompter.picks = ["g"]
    dispatch(client, "wishColor")

    assert [c.value for c in prompter.menus[0]] == ["r", "g", "b", "y"]
    assert [c.label for c in prompter.menus[0]] == ["Red", "Green", "Blue", "Yellow"]
    assert channel.calls[-1] == ("wishColor", "g")


def test_turn_granted_runs_turn(config, channel, prompter, presenter):
    """Scenario: draw amount 2, first play rejected, second accepted."""
    client = joined_client(config, channel, prompter, presenter, "Alice", "Bob")
    start_round(client, channel, hand=[("r", "5", "k1"), ("g", "o", "k2")])
    channel.reply("playCard", False)
    channel.reply("playCard", True)
    prompter.picks = [lambda choices: choices[1].value, lambda choices: choices[1].value]

    dispatch(client, "yourTurn", 2)

    assert client.session.pending_draw_count == 2
    assert [c.label for c in prompter.menus[0]] == [c.label for c in prompter.menus[1]]
    assert client.session.hand_keys() == ["k2"]


def test_turn_survives_error_reply(config, channel, prompter, presenter):
    """Scenario: playCard answered with an error reason, then accepted."""
    client = joined_client(config, channel, prompter, presenter, "Alice", "Bob")
    start_round(client, channel, hand=[("r", "5", "k1"), ("k", "1", "k2")])
    channel.reply("playCard", {"error": "Not your turn"})
    channel.reply("playCard", True)
    prompter.picks = [lambda choices: choices[1].value, lambda choices: choices[1].value]

    dispatch(client, "yourTurn", 0)

    assert len(prompter.menus) == 2
    assert [c.label for c in prompter.menus[0]] == [c.label for c in prompter.menus[1]]
    assert channel.calls[-2:] == [("playCard", "k1"), ("playCard", "k1")]
    assert client.session.hand_keys() == ["k2"]


def test_draw_does_not_touch_pending_count(config, channel, prompter, presenter):
    client = joined_client(config, channel, prompter, presenter, "Alice")
    start_round(client, channel, hand=[("r", "5", "k1")])
    prompter.picks = [lambda choices: choices[0].value]

    dispatch(client, "yourTurn", 2)

    assert channel.emitted[-1] == ("cardRequest",)
    assert client.session.pending_draw_count == 2
    assert client.session.hand_keys() == ["k1"]
