import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from .api import CheckoutOptions, checkout
from .config import Config
from .config import load_config as load_runtime_config
from .errors import CheckoutError, UnknownItemError
from .reporting import format_amount, make_summary_text

BASE_DIR = Path(__file__).resolve().parents[2]

EXIT_OK = 0
EXIT_UNKNOWN_ITEM = 1
EXIT_BAD_RULES = 2

logger = logging.getLogger(__name__)


def expand_codes(items: Sequence[str], split: bool) -> List[str]:
    """Turn CLI arguments into item codes; ``split`` reads ``ABCA`` as four scans."""

    codes: List[str] = []
    for item in items:
        text = item.strip()
        if not text:
            continue
        if split:
            codes.extend(ch for ch in text if not ch.isspace())
        else:
            codes.append(text)
    return codes


def run(runtime_config: Config, codes: Sequence[str], show_breakdown: bool = False) -> int:
    stage_counter = 0

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")

    def log_stage(message: str) -> None:
        nonlocal stage_counter
        stage_counter += 1
        logger.debug("[checkout:%02d] %s", stage_counter, message)

    log_stage(f"Loading prices from {runtime_config.prices_path}")
    options = CheckoutOptions(
        codes=list(codes),
        prices_path=runtime_config.prices_path,
        require_greedy_optimal=runtime_config.require_greedy_optimal,
        stop_on_unknown=runtime_config.stop_on_unknown,
    )

    log_stage(f"Scanning {len(codes)} item(s)")
    try:
        result = checkout(options)
    except UnknownItemError as exc:
        logger.error("Scan aborted: %s", exc)
        return EXIT_UNKNOWN_ITEM
    except CheckoutError as exc:
        logger.error("Unable to load prices: %s", exc)
        return EXIT_BAD_RULES

    if result.rejected:
        logger.warning("%d scan(s) rejected: %s", len(result.rejected), ", ".join(map(str, result.rejected)))

    log_stage("Pricing basket")
    if show_breakdown:
        print(make_summary_text(result.lines, result.total), end="")
    else:
        print(format_amount(result.total))
    return EXIT_OK


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan item codes and print the checkout total")
    parser.add_argument("items", nargs="*", help="Item codes to scan, in order")
    parser.add_argument("--prices", help="Rules file (.json, .csv or .xlsx)")
    parser.add_argument(
        "--split",
        action="store_true",
        help="Treat every character of each argument as one scan (e.g. ABCDABAA).",
    )
    parser.add_argument(
        "--allow-non-greedy",
        action="store_true",
        help="Accept tier tables whose largest-tier-first price is not the cheapest.",
    )
    parser.add_argument("--stop-on-unknown", action="store_true", help="Abort on the first unknown item")
    parser.add_argument("--breakdown", action="store_true", help="Print a per-item breakdown")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(BASE_DIR / ".env")
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    return run(runtime_cfg, expand_codes(args.items, args.split), show_breakdown=args.breakdown)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
