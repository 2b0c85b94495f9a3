import asyncio
import logging
import os

import discord
from dotenv import load_dotenv

from application.services import DeckSession, HistoryFeed
from infrastructure.http.aiohttp_remote_client import DEFAULT_TIMEOUT, AiohttpRemoteClient
from infrastructure.state.memory_cell import MemoryCellStore
from interfaces.discord.handlers import ChannelState, create_discord_bot


load_dotenv()

DISCORD_TOKEN = os.environ.get("DISCORD_TOKEN")
DEALER_API_URL = os.environ.get("DEALER_API_URL", "http://localhost:8080/api/v1")
DEALER_TIMEOUT = float(os.environ.get("DEALER_TIMEOUT", DEFAULT_TIMEOUT))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


def parse_log_level(name: str) -> int:
    # getLevelName maps unknown names to a "Level <name>" string, not an error.
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {name!r}.")
    return level


async def run_bot() -> None:
    async with AiohttpRemoteClient(DEALER_API_URL, timeout=DEALER_TIMEOUT) as client:

        def new_channel_state() -> ChannelState:
            cells = MemoryCellStore()
            return ChannelState(
                deck=DeckSession(client, cells),
                history=HistoryFeed(client, cells),
            )

        bot = create_discord_bot(new_channel_state)
        async with bot:
            await bot.start(DISCORD_TOKEN)


def main() -> None:
    if not DISCORD_TOKEN:
        raise RuntimeError("DISCORD_TOKEN environment variable is not set.")

    discord.utils.setup_logging(level=parse_log_level(LOG_LEVEL), root=True)
    asyncio.run(run_bot())


if __name__ == "__main__":
    main()
