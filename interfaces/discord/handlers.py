from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import discord
from discord.ext import commands

from application.services import DeckSession, HistoryFeed
from domain.cells import ReadableCell
from domain.errors import DealerClientError
from interfaces.discord.rendering import render_hand, render_history

logger = logging.getLogger(__name__)


@dataclass
class ChannelState:
    """The client-side state shown in one Discord channel."""

    deck: DeckSession
    history: HistoryFeed


def create_discord_bot(
    state_factory: Callable[[], ChannelState],
) -> commands.Bot:
    """
    Configure and return a Discord bot acting as the UI for the dealer.

    The bot only calls component operations and reads their cells; each
    channel gets its own deck session and history feed.
    """

    intents = discord.Intents.default()
    intents.message_content = True

    # Disable the default help command so we can provide our own `!help`.
    bot = commands.Bot(command_prefix="!", intents=intents, help_command=None)

    # In-memory, per-channel state; lost on restart.
    channels: Dict[int, ChannelState] = {}

    def state_for(ctx: commands.Context) -> ChannelState:
        channel_id = ctx.channel.id
        state = channels.get(channel_id)
        if state is None:
            state = state_factory()
            _log_errors(channel_id, "deck", state.deck.error)
            _log_errors(channel_id, "history", state.history.error)
            channels[channel_id] = state
        return state

    @bot.event
    async def on_ready():
        logger.info("Discord bot logged in as %s (id=%s)", bot.user, bot.user.id)

    @bot.command(name="help")
    async def help_cmd(ctx: commands.Context):
        await ctx.send(
            "!deck            - shuffle a new deck\n"
            "!hand [offset]   - show the hand at <offset> in the current deck\n"
            "!next            - show the next hand in the current deck\n"
            "!history         - show recently dealt hands\n"
            "!more            - load older hands into the history\n"
        )

    @bot.command(name="deck")
    async def deck_cmd(ctx: commands.Context):
        deck = state_for(ctx).deck
        try:
            deck_id = await deck.create_deck()
        except DealerClientError:
            await ctx.send(deck.error.get() or "Failed to create deck.")
            return
        await ctx.send(f"New deck {deck_id}. Type !hand to deal.")

    @bot.command(name="hand")
    async def hand_cmd(ctx: commands.Context, offset: int = 0):
        deck = state_for(ctx).deck
        try:
            hand = await deck.fetch_hand(offset)
        except DealerClientError:
            await ctx.send(deck.error.get() or "Failed to fetch hand.")
            return
        await ctx.send(render_hand(hand, deck.hand_offset.get()))

    @bot.command(name="next")
    async def next_cmd(ctx: commands.Context):
        deck = state_for(ctx).deck
        try:
            hand = await deck.fetch_next_hand()
        except DealerClientError:
            await ctx.send(deck.error.get() or "Failed to fetch hand.")
            return
        if hand is None:
            await ctx.send("No more hands. Type !hand to start over or !deck for a new deck.")
            return
        await ctx.send(render_hand(hand, deck.hand_offset.get()))

    @bot.command(name="history")
    async def history_cmd(ctx: commands.Context):
        history = state_for(ctx).history
        await history.refresh()

        error = history.error.get()
        if error:
            await ctx.send(error)
            return
        await ctx.send(render_history(history.items.get(), history.next_offset.get()))

    @bot.command(name="more")
    async def more_cmd(ctx: commands.Context):
        history = state_for(ctx).history
        already_shown = len(history.items.get())
        if not await history.fetch_more():
            await ctx.send("No older hands.")
            return

        error = history.error.get()
        if error:
            await ctx.send(error)
            return
        # Only send the newly appended page; the rest is already in the channel.
        new_items = history.items.get()[already_shown:]
        await ctx.send(render_history(new_items, history.next_offset.get()))

    return bot


def _log_errors(
    channel_id: int, feed: str, error_cell: ReadableCell[Optional[str]]
) -> None:
    def on_error(message: Optional[str]) -> None:
        if message:
            logger.info("Channel %s %s error: %s", channel_id, feed, message)

    error_cell.subscribe(on_error)
