from dataclasses import dataclass
from typing import List, NamedTuple, Tuple
import logging
import time

import numpy as np

from network import InvalidConfiguration, Network, build_adjacency, dangling_pages


log = logging.getLogger("pagerank")

DEFAULT_DAMPING = 0.15
DEFAULT_EPSILON = 0.001
DEFAULT_MAX_ITERS = 50


class DanglingGraphError(ValueError):
    """Some page has no inbound link, so the damped matrix is not column-stochastic."""

    def __init__(self, dangling: List[int]):
        self.dangling = dangling
        super().__init__(f"network has dangling pages (no inbound links): {dangling}")


class IterationOutcome(NamedTuple):
    rank_vector: np.ndarray
    iterations: int
    converged: bool


@dataclass(frozen=True, eq=False)
class RankedResult:
    """Output of one ranking run, plus the intermediate matrices for display."""

    ranking: List[Tuple[int, float]]
    iterations: int
    converged: bool
    adjacency: np.ndarray
    hyperlink: np.ndarray
    damped: np.ndarray
    rank_vector: np.ndarray

    def top(self, n: int) -> List[Tuple[int, float]]:
        return self.ranking[:n]


def validate_solver_config(damping_factor: float, epsilon: float, max_iterations: int) -> None:
    if not 0.0 <= damping_factor < 1.0:
        raise InvalidConfiguration(f"damping_factor must be in [0, 1), got {damping_factor}")
    if not epsilon > 0.0:
        raise InvalidConfiguration(f"epsilon must be > 0, got {epsilon}")
    if max_iterations < 1:
        raise InvalidConfiguration(f"max_iterations must be >= 1, got {max_iterations}")


def build_hyperlink_matrix(adjacency: np.ndarray) -> np.ndarray:
    """
    Column-normalise the adjacency matrix:

      H[i, j] = adj[i, j] / sum_r adj[r, j]   (i != j, column sum > 0)
      H[i, j] = 0                             otherwise

    Dangling (all-zero) columns stay zero; their mass is not redistributed.
    """
    adj = np.asarray(adjacency, dtype=float)
    col_sums = adj.sum(axis=0)

    hyper = np.divide(adj, col_sums, out=np.zeros_like(adj), where=col_sums > 0)
    np.fill_diagonal(hyper, 0.0)
    return hyper


def blend_damping(hyperlink: np.ndarray, damping_factor: float = DEFAULT_DAMPING) -> np.ndarray:
    """M = (1 - m) * H + m * S, with S = 1/N in every entry."""
    if not 0.0 <= damping_factor < 1.0:
        raise InvalidConfiguration(f"damping_factor must be in [0, 1), got {damping_factor}")

    n = hyperlink.shape[0]
    teleport = np.full((n, n), 1.0 / n)
    return hyperlink * (1.0 - damping_factor) + teleport * damping_factor


def power_iterate(
    damped: np.ndarray,
    max_iterations: int = DEFAULT_MAX_ITERS,
    epsilon: float = DEFAULT_EPSILON,
    log_every_iters: int = 10,   # 0 disables progress logs
) -> IterationOutcome:
    """
    Power method from the uniform vector r0 = 1/N:

      r_k = M @ r_{k-1}

    Stop at the first k >= 2 where every |r_k[i] - r_{k-1}[i]| <= epsilon.
    If max_iterations is reached first, the last vector is returned with
    converged=False.
    """
    if max_iterations < 1:
        raise InvalidConfiguration(f"max_iterations must be >= 1, got {max_iterations}")
    if not epsilon > 0.0:
        raise InvalidConfiguration(f"epsilon must be > 0, got {epsilon}")

    n = damped.shape[0]
    rank = np.full(n, 1.0 / n)
    prev = None

    t0 = time.time()

    for it in range(1, max_iterations + 1):
        rank = damped @ rank

        # No previous vector on the first step, so it can never converge there.
        delta = float("inf") if prev is None else float(np.max(np.abs(rank - prev)))

        if log_every_iters and (it == 1 or it % log_every_iters == 0):
            elapsed = time.time() - t0
            log.info(f"[pagerank] iter={it:3d} delta={delta:.6f} sumPR={rank.sum():.6f} elapsed={elapsed:.3f}s")

        if delta <= epsilon:
            if abs(rank.sum() - 1.0) > 1e-3:
                log.warning("sum(PR) is not ~1.0; the damped matrix is not column-stochastic.")
            return IterationOutcome(rank, it, True)

        prev = rank

    log.warning(f"PageRank did not converge within {max_iterations} iterations (epsilon={epsilon})")
    return IterationOutcome(rank, max_iterations, False)


def sort_ranks(rank_vector: np.ndarray) -> List[Tuple[int, float]]:
    """(index, score) pairs by descending score; equal scores keep index order."""
    scores = [float(v) for v in rank_vector]
    order = sorted(range(len(scores)), key=lambda i: -scores[i])
    return [(i, scores[i]) for i in order]


def compute_ranking(
    network: Network,
    damping_factor: float = DEFAULT_DAMPING,
    epsilon: float = DEFAULT_EPSILON,
    max_iterations: int = DEFAULT_MAX_ITERS,
    allow_dangling: bool = False,
    log_every_iters: int = 10,
) -> RankedResult:
    """
    Full pipeline: adjacency -> hyperlink -> damped -> power iteration -> sort.

    Networks with dangling pages are rejected with DanglingGraphError unless
    ``allow_dangling`` is set, in which case the unnormalised result is returned.
    """
    validate_solver_config(damping_factor, epsilon, max_iterations)

    adjacency = build_adjacency(network)
    dangling = dangling_pages(adjacency)
    if dangling:
        if not allow_dangling:
            raise DanglingGraphError(dangling)
        log.warning(f"Ranking a network with {len(dangling)} dangling page(s); scores will not sum to 1")

    hyperlink = build_hyperlink_matrix(adjacency)
    damped = blend_damping(hyperlink, damping_factor)

    t0 = time.time()
    outcome = power_iterate(damped, max_iterations, epsilon, log_every_iters=log_every_iters)
    log.info(
        f"Finished PageRank for {network.page_count} pages in {time.time() - t0:.3f}s "
        f"(iters={outcome.iterations}, converged={outcome.converged})"
    )

    return RankedResult(
        ranking=sort_ranks(outcome.rank_vector),
        iterations=outcome.iterations,
        converged=outcome.converged,
        adjacency=adjacency,
        hyperlink=hyperlink,
        damped=damped,
        rank_vector=outcome.rank_vector,
    )
