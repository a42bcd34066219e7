#!/usr/bin/env python3
"""Command line entry point for the Onu client"""

import asyncio
import logging
import os
import sys

from .channel import SocketIOChannel
from .client import OnuClient
from .config import load_config
from .errors import ClientError
from .events import EventType
from .prompts import ConsolePrompter
from .render import ConsolePresenter

logger = logging.getLogger(__name__)


async def run_client(config, presenter: ConsolePresenter) -> None:
    channel = SocketIOChannel(config.onu_url, acked_events=[EventType.HAND_CLEARED.value])
    client = OnuClient(config, channel, ConsolePrompter(), presenter)
    await client.run()


def main() -> int:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "warning").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    presenter = ConsolePresenter()

    try:
        config = load_config()
        asyncio.run(run_client(config, presenter))
    except ClientError as e:
        logger.debug(f"Fatal: {e}")
        presenter.error(e.message)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
