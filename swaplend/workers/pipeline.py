"""
Swap-then-deposit pipeline

Runs the fixed workflow as a state machine:

    APPROVE_INPUT -> RESOLVE_POOL -> BUILD_SWAP -> EXECUTE_SWAP
        -> READ_BALANCE -> APPROVE_OUTPUT -> DEPOSIT -> DONE

Any stage may move the run to FAILED. Stages run one at a time because each
needs the confirmed result of the previous one. A failure halts the run and
is re-raised to the caller. Nothing is retried and nothing is rolled back:
transactions confirmed before the failing stage stay on chain, and their
receipts stay on the PipelineRun.

Confirmation waits have no timeout unless RECEIPT_TIMEOUT is configured, so
a transaction that never gets mined stalls the run indefinitely.
"""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

from swaplend.connectors.dex.uniswap import UniswapV3Connector, build_swap_request
from swaplend.connectors.erc20 import approve_token, get_token_balance
from swaplend.connectors.lending.aave import AaveLendingConnector
from swaplend.core.account import WalletAccount
from swaplend.core.data_models import (
    PipelineRun,
    PipelineStage,
    PoolHandle,
    SwapRequest,
    WorkflowConfig,
)
from swaplend.core.exceptions import ApprovalFailed, SwapFailed
from swaplend.utils.helpers import HumanAmount, get_utc_now, new_run_id, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class _RunContext:
    """Values handed from one stage to the next within a single run"""
    requested_amount: HumanAmount
    pool: Optional[PoolHandle] = None
    request: Optional[SwapRequest] = None


StageHandler = Callable[[PipelineRun, _RunContext], Awaitable[None]]


class SwapDepositPipeline:
    """Swap the input token for the output token, then lend the output"""

    STAGES: Tuple[PipelineStage, ...] = (
        PipelineStage.APPROVE_INPUT,
        PipelineStage.RESOLVE_POOL,
        PipelineStage.BUILD_SWAP,
        PipelineStage.EXECUTE_SWAP,
        PipelineStage.READ_BALANCE,
        PipelineStage.APPROVE_OUTPUT,
        PipelineStage.DEPOSIT,
    )

    def __init__(
        self,
        config: WorkflowConfig,
        account: WalletAccount,
        uniswap: UniswapV3Connector,
        lending: AaveLendingConnector
    ):
        self.config = config
        self.account = account
        self.uniswap = uniswap
        self.lending = lending
        self._handlers: Dict[PipelineStage, StageHandler] = {
            PipelineStage.APPROVE_INPUT: self._approve_input,
            PipelineStage.RESOLVE_POOL: self._resolve_pool,
            PipelineStage.BUILD_SWAP: self._build_swap,
            PipelineStage.EXECUTE_SWAP: self._execute_swap,
            PipelineStage.READ_BALANCE: self._read_balance,
            PipelineStage.APPROVE_OUTPUT: self._approve_output,
            PipelineStage.DEPOSIT: self._deposit,
        }

    async def run(self, amount: HumanAmount) -> PipelineRun:
        """
        Run the full workflow for ``amount`` of the input token

        ``amount`` is human-readable (1 means one whole token). It is parsed
        in APPROVE_INPUT, so a malformed amount fails that stage with
        ApprovalFailed. Returns the finished run in stage DONE. On failure the
        stage's own exception is raised after the run is marked FAILED.
        """
        run = PipelineRun(run_id=new_run_id(), started_at=get_utc_now())
        context = _RunContext(requested_amount=amount)
        logger.info(
            f"Run {run.run_id}: swapping {amount} {self.config.token_in.symbol} "
            f"for {self.config.token_out.symbol}, then depositing",
            extra={"run_id": run.run_id}
        )

        for stage in self.STAGES:
            run.stage = stage
            logger.info(f"Run {run.run_id}: {stage.value}", extra={"run_id": run.run_id, "stage": stage.value})
            try:
                await self._handlers[stage](run, context)
            except Exception as e:
                self._fail(run, stage, e)
                raise

        run.stage = PipelineStage.DONE
        run.finished_at = get_utc_now()
        logger.info(f"Run {run.run_id}: done", extra={"run_id": run.run_id, "stage": run.stage.value})
        return run

    def _fail(self, run: PipelineRun, stage: PipelineStage, error: Exception) -> None:
        run.failed_stage = stage
        run.stage = PipelineStage.FAILED
        run.error = str(error)
        run.error_code = getattr(error, "code", None) or type(error).__name__
        run.finished_at = get_utc_now()
        logger.error(
            f"Run {run.run_id}: halted at {stage.value}: {error}",
            extra={"run_id": run.run_id, "stage": stage.value}
        )
        if run.receipts:
            logger.warning(
                f"Run {run.run_id}: transactions already confirmed remain on chain: "
                f"{', '.join(run.committed_tx_hashes)}",
                extra={"run_id": run.run_id}
            )

    async def _approve_input(self, run: PipelineRun, context: _RunContext) -> None:
        try:
            run.amount = to_decimal(context.requested_amount)
        except ValueError as e:
            raise ApprovalFailed(f"Invalid amount: {e}", cause=e) from e
        run.receipts[PipelineStage.APPROVE_INPUT] = await approve_token(
            self.account,
            self.config.token_in,
            self.config.router_address,
            run.amount,
        )

    async def _resolve_pool(self, run: PipelineRun, context: _RunContext) -> None:
        token_in, token_out = self.config.token_in, self.config.token_out
        info = await self.uniswap.resolve_pool(token_in, token_out, self.config.fee_tier)
        context.pool = self.uniswap.verify_pool(info, token_in, token_out, self.config.fee_tier)

    async def _build_swap(self, run: PipelineRun, context: _RunContext) -> None:
        try:
            run.amount_in = self.config.token_in.to_base_units(run.amount)
            context.request = build_swap_request(
                self.config, context.pool, self.account.address, run.amount_in
            )
        except ValueError as e:
            raise SwapFailed(f"Invalid swap parameters: {e}", cause=e) from e

    async def _execute_swap(self, run: PipelineRun, context: _RunContext) -> None:
        run.receipts[PipelineStage.EXECUTE_SWAP] = await self.uniswap.execute_swap(
            context.request, self.account
        )

    async def _read_balance(self, run: PipelineRun, context: _RunContext) -> None:
        run.output_balance = await get_token_balance(
            self.account.client, self.config.token_out, self.account.address
        )

    async def _approve_output(self, run: PipelineRun, context: _RunContext) -> None:
        token_out = self.config.token_out
        run.receipts[PipelineStage.APPROVE_OUTPUT] = await approve_token(
            self.account,
            token_out,
            self.config.lending_pool_address,
            token_out.from_base_units(run.output_balance),
        )

    async def _deposit(self, run: PipelineRun, context: _RunContext) -> None:
        run.receipts[PipelineStage.DEPOSIT] = await self.lending.deposit(
            self.account, self.config.token_out, run.output_balance
        )
