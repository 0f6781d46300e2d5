"""
Market Ticker — headless bazaar-economy demo

Runs the default resource economy with noise switched on, completes the
cheapest contract every few seconds and prints the board as it evolves.

Run:
    uv run python main.py --seconds 60 --state bazaar.json
"""
from __future__ import annotations

import argparse
import logging

from bazaar_economy import Economy, EconomyConfig
from bazaar_store import JsonFileBackend, KeyValueStore

FRAME_MS = 100


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Market Ticker — bazaar-economy headless demo")
    p.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    p.add_argument("--seconds", type=int, default=30, help="Simulated seconds to run (default: 30)")
    p.add_argument("--complete-every", type=int, default=4,
                   help="Complete the cheapest contract every N seconds (default: 4)")
    p.add_argument("--noise-ms", type=int, default=1000, help="Noise interval in ms (default: 1000)")
    p.add_argument("--decay-ms", type=int, default=6000, help="Contract decay time in ms (default: 6000)")
    p.add_argument("--state", type=str, default=None, metavar="FILE",
                   help="Persist state to FILE and resume from it on the next run")
    p.add_argument("-v", "--verbose", action="store_true", help="Log economy events")
    return p.parse_args()


def print_board(economy: Economy, second: int) -> None:
    print(f"--- t={second:>3}s  target={economy.current_target_value:.1f} ---")
    for tier in economy.by_tier():
        cells = "  ".join(f"{r.icon} {r.label} {r.value:g} (min {r.minimum:g})" for r in tier.resources)
        print(f"  {tier.label:<12} {cells}")
    for view in economy.contract_views():
        c = view.contract
        bundle = ", ".join(f"{q}x {n}" for n, q in c.resources.items())
        marker = f"decaying {view.decay_progress:.0%}" if view.decaying else ""
        print(f"  #{c.id:<3} {c.label:<22} reward {c.reward:>4}  market {view.market_value:>5g}  [{bundle}] {marker}")


def main() -> None:
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    store = KeyValueStore(JsonFileBackend(args.state)) if args.state else None
    economy = Economy(
        config=EconomyConfig(
            seed=args.seed,
            noise_interval_ms=args.noise_ms,
            decay_time_ms=args.decay_ms,
        ),
        store=store,
    )
    if not economy.noise_active:
        economy.toggle_noise()

    for second in range(1, args.seconds + 1):
        for _ in range(1000 // FRAME_MS):
            economy.advance(FRAME_MS)
        if args.complete_every and second % args.complete_every == 0 and economy.contracts:
            cheapest = min(economy.contracts, key=lambda c: economy.market_value(c.id) or 0)
            economy.complete_contract(cheapest.id)
        print_board(economy, second)


if __name__ == "__main__":
    main()
