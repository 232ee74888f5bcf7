#!/usr/bin/env python3
"""
Random Indexing Demo - Context-Dependent Term Similarity
========================================================

Extends distributional term vectors to 2D distributional arrays
(co-occurrence x context), which enables analysis of context dependence.

1. Allocate one distributional array per term
2. Encode random (term, co-occurrence, context, weight) observations
3. Find the term most similar to term 0, averaging over everything
4. Find the context in which that pair is most similar

Usage:
    rindex-demo
    rindex-demo --terms 256 --samples 100000
    rindex-demo --config rindex.yaml
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from tqdm import tqdm

from .config import DimensionConfig, EngineConfig, build_engine, load_config
from .coords import AVERAGE
from .diagnostics import capacity_report, log_capacity
from .errors import RandomIndexError, ZeroNormError
from .rng import RandomSource

logger = logging.getLogger("rindex")


def default_config() -> EngineConfig:
    """Co-occurrence x context layout, 64k elements per term."""
    return EngineConfig(
        dimensions=[
            DimensionConfig(data_range=2048, index_count=8, range=10000),
            DimensionConfig(data_range=32, index_count=4, range=1000),
        ],
    )


def run_demo(
    config: EngineConfig,
    n_terms: int = 1024,
    n_samples: int = 1_000_000,
    max_weight: int = 10,
    sample_seed: int = 0x2345,
    progress: bool = True,
) -> dict:
    """
    Run the term-similarity experiment.

    Returns:
        Dict with the most similar term, its averaged cos(alpha), and the
        best context with its cos(alpha)
    """
    if len(config.dimensions) != 2:
        raise ValueError("Demo needs exactly two dimensions (co-occurrence, context)")
    if n_terms < 2:
        raise ValueError("Demo needs at least two terms")

    ri = build_engine(config)
    terms = ri.allocate(count=n_terms)
    print(
        f"Created {n_terms} distributional arrays of size "
        f"{ri.datarange(0)}x{ri.datarange(1)}"
    )

    n_cooc, n_ctx = ri.range(0), ri.range(1)
    rnd = RandomSource(sample_seed)

    print(f"Encoding {n_samples} random co-occurrence weights...")
    for _ in tqdm(range(n_samples), desc="Encode", disable=not progress):
        i = rnd.next_uniform_u32(n_terms)        # Random term
        j = rnd.next_uniform_u32(n_cooc)         # Random co-occurrence
        k = rnd.next_uniform_u32(n_ctx)          # Random context
        w = rnd.next_uniform_u32(max_weight + 1) # Random weight
        ri.encode(terms[i], (j, k), w)

    log_capacity(capacity_report(ri, data=terms))

    # Averaging over all random indices implies averaging over
    # co-occurrences and contexts
    both = (AVERAGE, AVERAGE)
    cmax, lmax = -1.0, 0
    for t in range(1, n_terms):
        c = ri.cosa(terms[0], both, terms[t], both, zero_norm=-1.0)
        if c > cmax:
            cmax, lmax = c, t
    print(f"Term 0 is most similar to term {lmax} with cos(alpha) {cmax}")

    print("Maximizing the context-specific cos(alpha) for these terms...")
    ccmax, lcmax = -1.0, 0
    for ctx in range(n_ctx):
        try:
            c = ri.cosa(terms[0], (AVERAGE, ctx), terms[lmax], (AVERAGE, ctx))
        except ZeroNormError:
            continue
        if c > ccmax:
            ccmax, lcmax = c, ctx
    print(
        f"Term 0 is most similar to term {lmax} in context {lcmax} "
        f"with cos(alpha) {ccmax}"
    )

    return {
        "term": lmax,
        "cosa": cmax,
        "context": lcmax,
        "context_cosa": ccmax,
        "saturation": ri.saturation(),
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Random indexing demo: context-dependent term similarity",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Path to YAML engine config")
    parser.add_argument("--terms", type=int, default=1024, help="Number of terms")
    parser.add_argument("--samples", type=int, default=1_000_000, help="Observations to encode")
    parser.add_argument("--max-weight", type=int, default=10, help="Largest random weight")
    parser.add_argument("--seed", type=int, default=0x2345, help="Seed for sampled observations")
    parser.add_argument("--no-progress", action="store_true", help="Hide progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = load_config(args.config) if args.config else default_config()
        run_demo(
            config,
            n_terms=args.terms,
            n_samples=args.samples,
            max_weight=args.max_weight,
            sample_seed=args.seed,
            progress=not args.no_progress,
        )
    except (RandomIndexError, ValueError) as e:
        logger.error(f"Demo failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
