from __future__ import annotations

import argparse
from dataclasses import replace
from typing import Sequence

from semspace.layout import (
    LayoutConfig,
    LayoutSettings,
    SemanticSpaceLayout,
    load_config,
    load_vectors,
    log_layout,
    save_layout,
    visualize_layout,
)
from semspace.logging import LOGGER


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Semantic space layout of sparse vectors")
    parser.add_argument("input", help="JSON lines file, one sparse vector per line")
    parser.add_argument("--output", type=str, default=None, help="where to write the layout JSON")
    parser.add_argument("--config", type=str, default=None, help="JSON file with layout options")
    parser.add_argument("--k", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--threshold", type=float, default=None)
    parser.add_argument("--neighbors", type=int, default=None)
    parser.add_argument("--width", type=float, default=None)
    parser.add_argument("--height", type=float, default=None)
    parser.add_argument("--margin", type=float, default=0.0)
    parser.add_argument("--quiet", action="store_true", help="no console log lines")
    parser.add_argument("--no-rerun", action="store_true", help="do not record to rerun")
    parser.add_argument("--visualize", action="store_true", help="open a rerun viewer with the result")
    return parser


def _config_from_args(args: argparse.Namespace) -> LayoutConfig:
    config = load_config(args.config) if args.config else LayoutConfig()
    overrides = {
        "k": args.k,
        "seed": args.seed,
        "similarity_threshold": args.threshold,
        "neighborhood_size": args.neighbors,
    }
    return replace(config, **{key: value for key, value in overrides.items() if value is not None})


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    LOGGER.configure(console=not args.quiet, use_rerun=not args.no_rerun)

    config = _config_from_args(args)
    records = load_vectors(args.input)
    if not records:
        parser.error(f"no vectors in {args.input}")
    labels = [record.label for record in records]
    settings = None
    if args.width is not None or args.height is not None:
        settings = LayoutSettings(
            width=args.width if args.width is not None else 1.0,
            height=args.height if args.height is not None else 1.0,
            margin=args.margin,
        )

    layout = SemanticSpaceLayout([record.vector for record in records], config)
    result = layout.compute_layout()
    if settings is not None:
        result = result.adjusted(settings)
    if args.output:
        save_layout(args.output, result, labels)
    if args.visualize:
        visualize_layout(result, labels=labels)
    elif not args.no_rerun:
        log_layout(result, labels=labels)
    print(f"points={len(result)} landmarks={len(result.landmarks)} isolated={len(result.isolated)}")
    return 0
