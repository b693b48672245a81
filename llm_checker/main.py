"""CLI entry point for the LLM checker."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from llm_checker.checker import Checker
from llm_checker.config import EXPORT_DIR, PROVIDER, VALIDATION_DELAY
from llm_checker.exporters.json_export import export_all
from llm_checker.records import Status
from llm_checker.sources.huggingface import HuggingFaceProvider
from llm_checker.sources.synthetic import SyntheticProvider
from llm_checker.views import (
    SIZE_TIERS,
    VRAM_TIERS,
    filter_models,
    models_page,
    render_dashboard,
    render_logs,
    render_models,
)

logger = logging.getLogger(__name__)

PROVIDERS = {
    "huggingface": HuggingFaceProvider,
    "synthetic": SyntheticProvider,
}


def build_provider(name: str):
    """Instantiate a discovery provider by name."""
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider '{name}', expected one of {sorted(PROVIDERS)}")
    return PROVIDERS[name]()


async def run_cycles(checker: Checker, cycles: int, interval: float) -> None:
    """Run *cycles* discovery cycles back to back, *interval* seconds apart."""
    for i in range(1, cycles + 1):
        logger.info("=== Cycle %d/%d ===", i, cycles)
        await checker.run_cycle()
        if i < cycles:
            await asyncio.sleep(interval)


def render(checker: Checker, args: argparse.Namespace) -> str:
    if args.view == "logs":
        return render_logs(list(checker.sink))

    visible = filter_models(
        checker.models,
        search=args.search,
        license=args.license,
        vram=args.vram,
        size=args.size,
    )
    if args.view == "models":
        return render_models(visible, total=len(checker.models))
    if args.view == "api":
        return json.dumps(models_page(visible, page=args.page, limit=args.limit), indent=2)
    return render_dashboard(checker.stats, checker.models)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="LLM Checker: discover new models on Hugging Face")
    parser.add_argument(
        "--provider",
        choices=sorted(PROVIDERS),
        default=PROVIDER,
        help=f"Discovery source (default: {PROVIDER})",
    )
    parser.add_argument("--cycles", type=int, default=1, help="Number of poll cycles to run")
    parser.add_argument("--interval", type=float, default=0.0, help="Seconds between cycles")
    parser.add_argument(
        "--delay",
        type=float,
        default=VALIDATION_DELAY,
        help="Per-model validation pause in seconds",
    )
    parser.add_argument(
        "--view",
        choices=["dashboard", "models", "logs", "api"],
        default="dashboard",
    )
    parser.add_argument("--search", default="", help="Filter models by name or provider")
    parser.add_argument("--license", default="all", help="Filter models by license")
    parser.add_argument("--vram", choices=["all", *VRAM_TIERS], default="all")
    parser.add_argument("--size", choices=["all", *SIZE_TIERS], default="all")
    parser.add_argument("--page", type=int, default=1, help="Page for --view api")
    parser.add_argument("--limit", type=int, default=10, help="Page size for --view api")
    parser.add_argument(
        "--export",
        nargs="?",
        const=str(EXPORT_DIR),
        default=None,
        metavar="DIR",
        help=f"Write models/stats/logs JSON (default dir: {EXPORT_DIR})",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    checker = Checker(build_provider(args.provider), delay=args.delay)
    asyncio.run(run_cycles(checker, max(args.cycles, 1), args.interval))

    print(render(checker, args))

    if args.export is not None:
        paths = export_all(checker.models, checker.stats, list(checker.sink), Path(args.export))
        for name, path in paths.items():
            logger.info("Exported %s -> %s", name, path)

    if checker.stats.status == Status.ERROR:
        sys.exit(1)


if __name__ == "__main__":
    main()
