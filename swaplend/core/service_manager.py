"""
Service Manager for dependency injection and lifecycle management
"""
import logging
from typing import Callable, Optional

from swaplend.config.constants import DEFAULT_WORKFLOW
from swaplend.config.settings import Settings, get_settings
from swaplend.connectors.dex.uniswap import UniswapV3Connector
from swaplend.connectors.lending.aave import AaveLendingConnector
from swaplend.core.account import WalletAccount
from swaplend.core.chain_client import BaseChainClient, Web3ChainClient
from swaplend.core.data_models import WorkflowConfig
from swaplend.core.exceptions import ChainConnectionError, SwapLendException
from swaplend.workers.pipeline import SwapDepositPipeline

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings, WorkflowConfig], BaseChainClient]


def default_client_factory(settings: Settings, config: WorkflowConfig) -> BaseChainClient:
    return Web3ChainClient(
        rpc_url=settings.RPC_URL,
        chain_id=config.chain_id,
        receipt_timeout=settings.RECEIPT_TIMEOUT,
        poll_latency=settings.RECEIPT_POLL_LATENCY,
    )


class ServiceManager:

    def __init__(
        self,
        settings: Optional[Settings] = None,
        config: WorkflowConfig = DEFAULT_WORKFLOW,
        client_factory: ClientFactory = default_client_factory
    ):
        self.settings = settings or get_settings()
        self.config = config
        self._client_factory = client_factory

        self.client: Optional[BaseChainClient] = None
        self.account: Optional[WalletAccount] = None
        self.uniswap: Optional[UniswapV3Connector] = None
        self.lending: Optional[AaveLendingConnector] = None
        self.pipeline: Optional[SwapDepositPipeline] = None

    async def initialize(self):
        """
        Build and connect all services

        Credentials are checked before the chain client is created, so a
        missing RPC_URL or a missing or malformed PRIVATE_KEY fails without
        touching the network. Any connect failure surfaces as
        ChainConnectionError.
        """
        logger.info("Initializing services...")
        self.settings.require_credentials()

        self.client = self._client_factory(self.settings, self.config)
        try:
            await self.client.connect()
        except SwapLendException:
            raise
        except Exception as e:
            raise ChainConnectionError(f"Failed to connect to RPC: {e}", cause=e) from e

        self.account = WalletAccount(
            self.client,
            self.settings.PRIVATE_KEY.strip(),
            explorer_tx_url=self.config.explorer_tx_url,
        )
        self.uniswap = UniswapV3Connector(self.client, self.config)
        self.lending = AaveLendingConnector(self.config)
        self.pipeline = SwapDepositPipeline(self.config, self.account, self.uniswap, self.lending)

        logger.info(f"All services initialized for account {self.account.address}")

    async def cleanup(self):
        """Cleanup all services"""
        logger.info("Cleaning up services...")

        if self.client:
            await self.client.disconnect()

        logger.info("Cleanup completed")
