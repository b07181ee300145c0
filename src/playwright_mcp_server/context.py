"""Process-scoped wiring of configuration, browser pool, executor and adapter."""

import logging
from dataclasses import dataclass

from .playwright.config import ServerConfig, load_server_config
from .playwright.pool_manager import BrowserPool
from .playwright.tools import ToolExecutor
from .protocol import ProtocolAdapter

logger = logging.getLogger(__name__)


@dataclass
class ServerContext:
    """Everything a transport needs to serve requests, built once at startup"""

    config: ServerConfig
    pool: BrowserPool
    executor: ToolExecutor
    adapter: ProtocolAdapter

    @classmethod
    def create(
        cls, config: ServerConfig | None = None, pool: BrowserPool | None = None
    ) -> "ServerContext":
        if config is None:
            config = load_server_config()
        if pool is None:
            pool = BrowserPool(config["browser"])
        executor = ToolExecutor(pool)
        return cls(config=config, pool=pool, executor=executor, adapter=ProtocolAdapter(executor))

    async def start(self) -> None:
        """Launch every browser engine. Raises if any engine fails to launch."""
        await self.pool.initialize()

    async def stop(self) -> None:
        """Close every browser engine"""
        await self.pool.shutdown()
