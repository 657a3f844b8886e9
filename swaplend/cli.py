"""
Command line entry point: swap an amount of the input token and lend the proceeds
"""
import argparse
import asyncio
import logging
from decimal import Decimal
from typing import List, Optional

from swaplend.config.logging_config import setup_logging
from swaplend.config.settings import Settings, get_settings
from swaplend.core.data_models import PipelineRun
from swaplend.core.exceptions import SwapLendException
from swaplend.core.service_manager import ServiceManager
from swaplend.utils.validators import parse_swap_amount

logger = logging.getLogger(__name__)


def _amount_arg(raw: str) -> Decimal:
    try:
        return parse_swap_amount(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swaplend",
        description="Swap the input token for the output token on Uniswap V3, then deposit the output into the lending pool",
    )
    parser.add_argument(
        "amount",
        nargs="?",
        type=_amount_arg,
        default=Decimal("1"),
        help="Amount of the input token to swap, in whole units (default: 1)",
    )
    return parser


async def run_pipeline(amount: Decimal, services: ServiceManager) -> PipelineRun:
    """Initialize services, run the pipeline once, always clean up"""
    try:
        await services.initialize()
        return await services.pipeline.run(amount)
    finally:
        await services.cleanup()


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    setup_logging(settings)

    services = ServiceManager(settings=settings)
    try:
        run = asyncio.run(run_pipeline(args.amount, services))
    except SwapLendException as e:
        logger.error(f"An error occurred: {type(e).__name__}: {e.message}")
        if e.cause is not None:
            logger.error(f"Caused by: {type(e.cause).__name__}: {e.cause}")
        logger.error("Transactions confirmed before the failure are not reverted")
        return 1

    token_out = services.config.token_out
    logger.info(f"Deposited {token_out.format(run.output_balance)} (run {run.run_id})")
    return 0
