"""
Shared fixtures
"""
import pytest

from swaplend.config.constants import DEFAULT_WORKFLOW
from swaplend.config.settings import Settings
from swaplend.connectors.dex.uniswap import UniswapV3Connector
from swaplend.connectors.lending.aave import AaveLendingConnector
from swaplend.core.account import WalletAccount
from swaplend.workers.pipeline import SwapDepositPipeline

from fakes import TEST_PRIVATE_KEY, FakeChainClient


@pytest.fixture
def workflow():
    return DEFAULT_WORKFLOW


@pytest.fixture
def chain(workflow):
    client = FakeChainClient()
    client.add_pool(workflow.token_in.address, workflow.token_out.address, workflow.fee_tier)
    client.swap_output = 4_321_987_654_321_000_123
    return client


@pytest.fixture
def account(chain, workflow):
    return WalletAccount(chain, TEST_PRIVATE_KEY, explorer_tx_url=workflow.explorer_tx_url)


@pytest.fixture
def uniswap(chain, workflow):
    return UniswapV3Connector(chain, workflow)


@pytest.fixture
def lending(workflow):
    return AaveLendingConnector(workflow)


@pytest.fixture
def pipeline(workflow, account, uniswap, lending):
    return SwapDepositPipeline(workflow, account, uniswap, lending)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        RPC_URL="https://rpc.sepolia.example",
        PRIVATE_KEY=TEST_PRIVATE_KEY,
        LOG_DIR=None,
    )
