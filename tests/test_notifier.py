"""
Tests for alert rendering and subscriber fan-out.

Run with: pytest tests/test_notifier.py -v
"""
from unittest.mock import AsyncMock

import pytest

from crypto_rsi_bot.cogs.alert_engine import SignalKind
from crypto_rsi_bot.repositories.settings_store import RunConfig
from crypto_rsi_bot.services.notifier import AlertDispatcher


CONFIG = RunConfig(timeframe="15", limit=200, rsi_period=14, overbought=80, oversold=20)


def make_dispatcher(subscribers=None, send=None):
    get_subscribers = AsyncMock(return_value=set(subscribers or []))
    send = send or AsyncMock()
    return AlertDispatcher(get_subscribers=get_subscribers, send=send, timezone="UTC"), get_subscribers, send


class TestRender:
    """Tests for kind-specific message templates."""

    def test_short_message(self):
        dispatcher, _, _ = make_dispatcher()
        message = dispatcher.render("BTCUSDT", "SHORT", 85.123, CONFIG)

        assert "SHORT" in message
        assert "overbought" in message
        assert "🔴" in message
        assert "`BTCUSDT`" in message
        assert "85.12" in message
        assert "Timeframe: 15 min, candles: 200" in message
        assert "UTC" in message

    def test_long_message(self):
        dispatcher, _, _ = make_dispatcher()
        message = dispatcher.render("ETHUSDT", SignalKind.LONG, 12.5, CONFIG)

        assert "LONG" in message
        assert "oversold" in message
        assert "🟢" in message
        assert "12.50" in message

    def test_unknown_kind_uses_generic_template(self):
        dispatcher, _, _ = make_dispatcher()
        message = dispatcher.render("XRPUSDT", "DIVERGENCE", 50.0, CONFIG)

        assert message.startswith("🚨 DIVERGENCE SIGNAL")
        assert "Symbol: XRPUSDT" in message
        assert "RSI: 50.00" in message

    def test_register_template(self):
        dispatcher, _, _ = make_dispatcher()
        dispatcher.register_template("DIVERGENCE", "{kind}:{symbol}:{rsi:.1f}:{timeframe}:{limit}")

        assert dispatcher.render("XRPUSDT", "DIVERGENCE", 50.0, CONFIG) == "DIVERGENCE:XRPUSDT:50.0:15:200"


class TestDispatch:
    """Tests for best-effort broadcast to subscribers."""

    @pytest.mark.asyncio
    async def test_sends_to_every_subscriber(self):
        dispatcher, _, send = make_dispatcher(subscribers=[1, 2, 3])

        delivered = await dispatcher.dispatch("BTCUSDT", "SHORT", 85.0, CONFIG)

        assert delivered == 3
        assert sorted(call.args[0] for call in send.await_args_list) == [1, 2, 3]
        assert all("BTCUSDT" in call.args[1] for call in send.await_args_list)

    @pytest.mark.asyncio
    async def test_no_subscribers(self):
        dispatcher, _, send = make_dispatcher()

        assert await dispatcher.dispatch("BTCUSDT", "SHORT", 85.0, CONFIG) == 0
        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_recipient_does_not_stop_others(self):
        async def send(channel_id, message):
            if channel_id == 2:
                raise RuntimeError("Missing Access")

        dispatcher, _, _ = make_dispatcher(subscribers=[1, 2, 3], send=AsyncMock(side_effect=send))

        delivered = await dispatcher.dispatch("BTCUSDT", "LONG", 10.0, CONFIG)

        assert delivered == 2

    @pytest.mark.asyncio
    async def test_subscribers_are_fetched_on_every_dispatch(self):
        """A channel subscribed between two alerts gets the second one."""
        get_subscribers = AsyncMock(side_effect=[{1}, {1, 2}, {2}])
        send = AsyncMock()
        dispatcher = AlertDispatcher(get_subscribers=get_subscribers, send=send, timezone="UTC")

        assert await dispatcher.dispatch("BTCUSDT", "SHORT", 85.0, CONFIG) == 1
        assert await dispatcher.dispatch("ETHUSDT", "SHORT", 85.0, CONFIG) == 2
        assert await dispatcher.dispatch("XRPUSDT", "LONG", 15.0, CONFIG) == 1

        assert get_subscribers.await_count == 3
        assert send.await_args_list[-1].args[0] == 2

    @pytest.mark.asyncio
    async def test_broadcast_plain_text(self):
        dispatcher, _, send = make_dispatcher(subscribers=[7])

        assert await dispatcher.broadcast("hello") == 1
        send.assert_awaited_once_with(7, "hello")
