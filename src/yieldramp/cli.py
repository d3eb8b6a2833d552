"""Command line tools.

Usage:
    yieldramp widget-url [--wallet ADDRESS] [--use-case solana] [--param key=value ...]
    yieldramp validate --param key=value [--param ...]
    yieldramp status --address ADDRESS
    yieldramp config
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

import httpx
from dotenv import load_dotenv

from yieldramp.config import Settings, get_settings
from yieldramp.lulo.client import LuloClient
from yieldramp.lulo.countdown import get_withdraw_countdown
from yieldramp.onramp.parameters import UseCase, build_widget_parameters
from yieldramp.onramp.service import OnrampService
from yieldramp.onramp.utils import format_wallet_address
from yieldramp.onramp.validators import validate_parameters

logger = logging.getLogger(__name__)


def _parse_params(pairs: Optional[Sequence[str]]) -> dict[str, str]:
    params = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        params[key] = value
    return params


def cmd_widget_url(args: argparse.Namespace, settings: Settings) -> int:
    api_key = args.api_key or settings.moonpay_api_key
    custom = _parse_params(args.param)

    result = validate_parameters({**custom, "apiKey": api_key})
    if not result.is_valid:
        for error in result.errors:
            print(f"error: {error}", file=sys.stderr)
        return 1

    params = build_widget_parameters(
        api_key,
        parameters=custom,
        wallet_address=args.wallet,
        color_code=settings.brand_color,
        use_case=args.use_case,
    )

    service = OnrampService(api_key, environment=settings.moonpay_environment, default_parameters={})
    if not service.validate_config():
        print(f"error: unknown environment {settings.moonpay_environment!r}", file=sys.stderr)
        return 1

    print(service.get_widget_url(params))
    return 0


def cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    result = validate_parameters(_parse_params(args.param))
    if result.is_valid:
        print("OK")
        return 0
    for error in result.errors:
        print(f"error: {error}")
    return 1


async def _status(address: str, settings: Settings) -> int:
    client = LuloClient(settings.server_url, timeout=settings.http_timeout_seconds)

    try:
        apy = await client.get_apy()
        balance = await client.get_balance(address)
        pending = await client.get_pending_withdrawals(address)
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Status lookup failed against {settings.server_url}: {type(e).__name__}: {e}")
        print(f"error: yield backend unavailable ({e})", file=sys.stderr)
        return 1

    print(f"Wallet:   {format_wallet_address(address)}")
    if apy is not None:
        print(f"APY:      {apy.regular.current:.2f}% (protected {apy.protected.current:.2f}%)")
    if balance is not None:
        print(f"Balance:  ${balance.total_usd_value:.2f}")

    if not pending:
        print("No pending withdrawals.")
    for withdrawal in pending:
        countdown = get_withdraw_countdown(
            withdrawal, window=settings.withdrawal_maturation_seconds
        )
        state = "ready to complete" if countdown.is_ready else countdown.text
        print(f"  #{withdrawal.withdrawal_id}: ${withdrawal.amount:.2f} USDC - {state}")
    return 0


def cmd_status(args: argparse.Namespace, settings: Settings) -> int:
    return asyncio.run(_status(args.address, settings))


def cmd_config(args: argparse.Namespace, settings: Settings) -> int:
    print(json.dumps(settings.get_safe_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yieldramp", description="Onramp and yield tools")
    sub = parser.add_subparsers(dest="command", required=True)

    widget = sub.add_parser("widget-url", help="Print the onramp widget URL")
    widget.add_argument("--api-key", type=str, help="Override MOONPAY_API_KEY")
    widget.add_argument("--wallet", type=str, help="Wallet address to receive funds")
    widget.add_argument(
        "--use-case",
        choices=[u.value for u in UseCase],
        default=UseCase.SOLANA.value,
        help="Default parameter preset",
    )
    widget.add_argument("--param", action="append", help="Widget parameter as key=value")
    widget.set_defaults(func=cmd_widget_url)

    validate = sub.add_parser("validate", help="Validate widget parameters")
    validate.add_argument("--param", action="append", help="Widget parameter as key=value")
    validate.set_defaults(func=cmd_validate)

    status = sub.add_parser("status", help="Show yield balance and pending withdrawals")
    status.add_argument("--address", type=str, required=True, help="Wallet address")
    status.set_defaults(func=cmd_status)

    config = sub.add_parser("config", help="Show configuration with secrets redacted")
    config.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args, settings)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
