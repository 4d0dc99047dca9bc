#!/usr/bin/env python3
import argparse
import logging
import time
from typing import List, Optional

import numpy as np

from network import (
    LECTURE_ADJACENCY,
    SAMPLE_ADJACENCY,
    InvalidConfiguration,
    Network,
    from_adjacency,
    generate_random,
    make_rng,
)
from pagerank import (
    DEFAULT_DAMPING,
    DEFAULT_EPSILON,
    DEFAULT_MAX_ITERS,
    DanglingGraphError,
    RankedResult,
    compute_ranking,
)
from search import search
from stats import link_degrees, stats_block


def setup_logging() -> logging.Logger:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    return logging.getLogger("analysis")


def format_matrix(mat: np.ndarray, decimals: int = 2) -> str:
    return "\n".join(" ".join(f"{v:.{decimals}f}" for v in row) for row in mat)


def build_network(args: argparse.Namespace, log: logging.Logger) -> Network:
    if args.lecture:
        log.info("Using the 4-page lecture network")
        return from_adjacency(LECTURE_ADJACENCY)
    if args.sample:
        log.info("Using the 8-page sample network")
        return from_adjacency(SAMPLE_ADJACENCY)

    log.info(f"Generating random network: pages={args.pages}, links={args.links}, seed={args.seed}")
    return generate_random(args.pages, args.links, make_rng(args.seed))


def print_ranking(network: Network, result: RankedResult, top: int) -> None:
    print("\n=== Pages sorted by PageRank ===")
    for i, (index, score) in enumerate(result.top(top), start=1):
        page = network.pages[index]
        print(f"{i}. page {page.id}  PR={score:.10f}  keywords={','.join(page.keywords)}")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="PageRank over a small link network.")
    parser.add_argument("--pages", type=int, default=30, help="Number of pages in a random network.")
    parser.add_argument("--links", type=int, default=80, help="Number of directed links in a random network.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random generator (replayable runs).")
    parser.add_argument("--lecture", action="store_true", help="Use the 4-page lecture network instead of a random one.")
    parser.add_argument("--sample", action="store_true", help="Use the 8-page sample network instead of a random one.")
    parser.add_argument("--damping", type=float, default=DEFAULT_DAMPING, help="Teleportation weight m in [0, 1).")
    parser.add_argument("--epsilon", type=float, default=DEFAULT_EPSILON, help="Convergence threshold per entry.")
    parser.add_argument("--max_iters", type=int, default=DEFAULT_MAX_ITERS, help="Iteration cap.")
    parser.add_argument(
        "--allow_dangling",
        action="store_true",
        help="Rank networks with pages that have no inbound links (scores will not sum to 1).",
    )
    parser.add_argument("--search", default=None, help="Keyword substring to search in rank order.")
    parser.add_argument("--show_matrices", action="store_true", help="Print adjacency and hyperlink matrices.")
    parser.add_argument("--top", type=int, default=10, help="How many ranked pages to print.")
    parser.add_argument(
        "--log_every",
        type=int,
        default=10,
        help="Log solver progress after every N iterations (0 disables).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    log = setup_logging()
    args = parse_args(argv)

    log.info(
        f"Args: pages={args.pages}, links={args.links}, seed={args.seed}, damping={args.damping}, "
        f"epsilon={args.epsilon}, max_iters={args.max_iters}, allow_dangling={args.allow_dangling}"
    )

    t0 = time.time()
    try:
        network = build_network(args, log)
        t1 = time.time()
        result = compute_ranking(
            network,
            damping_factor=args.damping,
            epsilon=args.epsilon,
            max_iterations=args.max_iters,
            allow_dangling=args.allow_dangling,
            log_every_iters=args.log_every,
        )
    except DanglingGraphError as e:
        log.error(f"{e}. Re-run with --allow_dangling to accept an unnormalised result.")
        return 2
    except InvalidConfiguration as e:
        log.error(f"Invalid configuration: {e}")
        return 2
    t2 = time.time()

    out_degree, in_degree = link_degrees(result.adjacency)
    print("\n=== Outgoing Links Stats ===")
    print(stats_block(out_degree))

    print("\n=== Incoming Links Stats ===")
    print(stats_block(in_degree))

    if args.show_matrices:
        print("\n=== Adjacency matrix ===")
        print(format_matrix(result.adjacency, decimals=0))
        print("\n=== Hyperlink matrix H ===")
        print(format_matrix(result.hyperlink))

    print_ranking(network, result, args.top)
    if not result.converged:
        print(f"\nWarning: no convergence within {args.max_iters} iterations; showing the last vector.")

    if args.search is not None:
        print(f"\n=== Search result for {args.search!r} ===")
        try:
            hits = search(result, network.pages, args.search)
        except ValueError as e:
            log.error(f"Search failed: {e}")
            return 2
        if not hits:
            print("-  -")
        for hit in hits:
            print(f"{hit.page_id}  {hit.keyword}")

    print("\n=== Timing ===")
    print(f"Build time:    {t1 - t0:.4f} sec")
    print(f"PageRank time: {t2 - t1:.4f} sec (iters={result.iterations})")
    print(f"Total time:    {t2 - t0:.4f} sec")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
