from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional


_BOOLEAN_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    base_dir: Path
    prices_path: Path
    require_greedy_optimal: bool = True
    stop_on_unknown: bool = False
    verbose: bool = False


def _to_path(value: object | None) -> Optional[Path]:
    text = "" if value is None else str(value).strip()
    return Path(text).expanduser().resolve() if text else None


def _flag(value: object | None) -> bool:
    if isinstance(value, bool):
        return value
    return value is not None and str(value).strip().lower() in _BOOLEAN_TRUE


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options.

    CLI options win over the environment; flags only ever switch behaviour on.
    """

    base_dir = Path(__file__).resolve().parents[2]
    default_prices = (base_dir / "data_sample" / "prices.json").resolve()

    prices_path = _to_path(env.get("CHECKOUT_PRICES")) or default_prices
    require_greedy_optimal = not _flag(env.get("CHECKOUT_ALLOW_NON_GREEDY"))
    stop_on_unknown = _flag(env.get("CHECKOUT_STOP_ON_UNKNOWN"))
    verbose = _flag(env.get("CHECKOUT_VERBOSE"))

    cli_ns = cli_args if cli_args is not None else SimpleNamespace()
    if getattr(cli_ns, "prices", None):
        prices_path = _to_path(cli_ns.prices) or prices_path
    if getattr(cli_ns, "allow_non_greedy", False):
        require_greedy_optimal = False
    if getattr(cli_ns, "stop_on_unknown", False):
        stop_on_unknown = True
    if getattr(cli_ns, "verbose", False):
        verbose = True

    return Config(
        base_dir=base_dir,
        prices_path=prices_path,
        require_greedy_optimal=require_greedy_optimal,
        stop_on_unknown=stop_on_unknown,
        verbose=verbose,
    )


__all__ = ["Config", "load_config"]
