#!/usr/bin/env python3
"""
Magic 8-Ball launcher plugin host process.

Connects to the launcher's NATS bus, runs the 8-ball plugin and keeps it
subscribed until interrupted. Query dispatch, result rendering and settings
storage belong to the launcher on the other side of the bus.

Usage:
    python launcher.py config.json
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from nats.aio.client import Client as NATS

# Plugins are loaded from ./plugins
sys.path.insert(0, str(Path(__file__).parent / "plugins"))

from common.config import get_config, get_plugin_config
from magic8ball import EightBallPlugin


logger = logging.getLogger(__name__)


class Launcher:
    """
    Plugin host.

    Responsibilities:
    1. Connect to NATS
    2. Start the 8-ball plugin with its config section
    3. Coordinate graceful shutdown
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.nats: Optional[NATS] = None
        self.plugin: Optional[EightBallPlugin] = None

    async def start(self) -> None:
        """Start all components in correct order"""
        nats_config = self.config.get("nats", {})
        nats_url = nats_config.get("url", "nats://localhost:4222")

        try:
            logger.info(f"Connecting to NATS: {nats_url}")
            self.nats = NATS()
            await self.nats.connect(
                servers=[nats_url],
                max_reconnect_attempts=nats_config.get("max_reconnect_attempts", -1),
                reconnect_time_wait=nats_config.get("reconnect_delay", 2),
                connect_timeout=nats_config.get("connection_timeout", 5),
            )

            plugin_config = get_plugin_config(self.config, EightBallPlugin.NAMESPACE)
            self.plugin = EightBallPlugin(self.nats, plugin_config)
            await self.plugin.initialize()

            logger.info(f"✅ {EightBallPlugin.NAME} plugin ready on {nats_url}")

        except Exception as e:
            logger.error(f"Failed to start launcher plugin host: {e}", exc_info=True)
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop all components in reverse order"""
        logger.info("Shutting down...")

        if self.plugin:
            await self.plugin.shutdown()
            self.plugin = None
        if self.nats and self.nats.is_connected:
            await self.nats.drain()
        self.nats = None

        logger.info("✅ Stopped")


async def main():
    """Entry point"""
    launcher = Launcher(get_config())

    try:
        await launcher.start()
        # Run until interrupted
        await asyncio.Event().wait()
    finally:
        await launcher.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
