"""
Risk Replay - Simulation Job

This offline job replays a journal export through a money-management
policy and writes the simulation result as JSON.

The run:
1. Load trade rows (and optional asset tick configs) from JSON
2. Validate the params, or build advanced params from a saved profile
3. Normalize trades and keep those inside the optional date range
4. Run the replay engine
5. Write the camelCase result (or a preview) to a file or stdout

Reliability Level: Offline Job
Decimal Integrity: JSON numbers are parsed as Decimal, never float
Traceability: Every run carries a correlation_id in its log lines

Usage:
    python -m jobs.run_risk_simulation --trades trades.json --params params.json
    python -m jobs.run_risk_simulation --trades trades.json --profile profile.json --balance 10000000
"""

import sys
import json
import uuid
import argparse
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.logic.date_keys import day_key
from app.logic.profile_adapter import build_advanced_params
from app.logic.simulation_engine import run_risk_simulation
from app.logic.simulation_errors import RiskSimulationError, RiskSimulationErrorCode
from app.logic.simulation_models import RiskSimulationParams, TradeForSimulation
from app.schemas.risk_profile import RiskProfileInput
from app.schemas.risk_simulation import DateRangeInput, validate_simulation_params
from services.simulation_config import (
    SimulationConfig,
    SimulationConfigurationError,
    get_simulation_config,
)
from services.trade_normalizer import AssetConfig, build_preview, normalize_trades

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

OPEN_DATE_FROM = "0001-01-01"
OPEN_DATE_TO = "9999-12-31"


# =============================================================================
# Input Loading
# =============================================================================

def load_json(path: str) -> Any:
    """Read a JSON file with fractional numbers as Decimal."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f, parse_float=Decimal)
    except (OSError, json.JSONDecodeError) as e:
        raise RiskSimulationError(
            error_code=RiskSimulationErrorCode.INPUT_LOAD_FAIL,
            message=f"Cannot load {path}: {e}",
        ) from e


def load_asset_configs(path: Optional[str]) -> Dict[str, AssetConfig]:
    if not path:
        return {}
    raw = load_json(path)
    return {symbol: AssetConfig.model_validate(config) for symbol, config in raw.items()}


def resolve_params(
    params_path: Optional[str],
    profile_path: Optional[str],
    balance_cents: Optional[int],
    correlation_id: str,
) -> RiskSimulationParams:
    """Params come from a params file, or from a profile plus a balance."""
    if params_path:
        return validate_simulation_params(load_json(params_path), correlation_id)
    if balance_cents is None or balance_cents <= 0:
        raise RiskSimulationError(
            error_code=RiskSimulationErrorCode.INVALID_PARAMS,
            message="--balance must be a positive number of cents when using --profile",
            correlation_id=correlation_id,
        )
    profile = RiskProfileInput.model_validate(load_json(profile_path)).to_domain()
    return build_advanced_params(profile, balance_cents)


def filter_by_date_range(
    trades: List[TradeForSimulation],
    date_range: Optional[DateRangeInput],
    tz_name: str,
) -> List[TradeForSimulation]:
    if date_range is None:
        return trades
    return [t for t in trades if date_range.contains(day_key(t.entry_date, tz_name))]


def write_output(payload: Any, output_path: Optional[str]) -> None:
    text = json.dumps(payload, indent=2)
    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info(f"[RSIM-JOB] Result written | path={output_path}")
    else:
        sys.stdout.write(text + "\n")


# =============================================================================
# Job
# =============================================================================

def run_job(args: argparse.Namespace, config: SimulationConfig) -> None:
    correlation_id = str(uuid.uuid4())
    tz_name = config.timezone

    date_range = None
    if args.date_from or args.date_to:
        # A missing bound leaves that side of the window open
        date_range = DateRangeInput(
            date_from=args.date_from or OPEN_DATE_FROM,
            date_to=args.date_to or OPEN_DATE_TO,
        )

    rows = load_json(args.trades)
    if not isinstance(rows, list):
        raise RiskSimulationError(
            error_code=RiskSimulationErrorCode.INPUT_LOAD_FAIL,
            message=f"{args.trades} must contain a JSON array of trades",
            correlation_id=correlation_id,
        )
    trades = normalize_trades(
        rows,
        load_asset_configs(args.assets),
        config.default_tick_size,
        config.default_tick_value_cents,
    )
    trades = filter_by_date_range(trades, date_range, tz_name)

    if args.preview:
        write_output(build_preview(trades, tz_name), args.output)
        return

    params = resolve_params(args.params, args.profile, args.balance, correlation_id)
    if not trades:
        logger.warning(
            f"[RSIM-JOB] No trades to simulate | correlation_id={correlation_id}"
        )

    result = run_risk_simulation(
        trades,
        params,
        settings=config.engine_settings(),
        correlation_id=correlation_id,
    )
    write_output(result.to_dict(), args.output)


# =============================================================================
# CLI Entry Point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay historical trades through a risk management policy"
    )
    parser.add_argument(
        "--trades",
        type=str,
        required=True,
        help="JSON array of journal trade records"
    )
    parser.add_argument(
        "--assets",
        type=str,
        default=None,
        help="JSON object mapping asset symbol to tick configuration"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--params",
        type=str,
        default=None,
        help="JSON simulation params (mode simple or advanced)"
    )
    source.add_argument(
        "--profile",
        type=str,
        default=None,
        help="JSON risk management profile to replay in advanced mode"
    )
    parser.add_argument(
        "--balance",
        type=int,
        default=None,
        help="Account balance in cents (required with --profile)"
    )
    parser.add_argument(
        "--date-from",
        type=str,
        default=None,
        help="First day to include (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--date-to",
        type=str,
        default=None,
        help="Last day to include (YYYY-MM-DD)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output path (default: stdout)"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Only summarize the trade set, do not simulate"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.preview and not (args.params or args.profile):
        parser.error("one of --params or --profile is required unless --preview is set")

    try:
        config = get_simulation_config()
        run_job(args, config)
    except RiskSimulationError as e:
        logger.error(f"[{e.error_code}] {e.message} | details={e.details}")
        return 1
    except ValidationError as e:
        logger.error(
            f"[{RiskSimulationErrorCode.INVALID_PARAMS}] Input validation failed | "
            f"errors={e.error_count()} | {e}"
        )
        return 1
    except SimulationConfigurationError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
