from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Set, Tuple
import logging

import numpy as np


log = logging.getLogger("network")

KEYWORDS: Tuple[str, ...] = (
    "dog", "cat", "horse", "chicken", "fish", "bear", "bird",
    "shark", "snake", "pig", "lion", "turkey", "wolf", "spider",
)

# Lecture example (4 pages) and the 8-page sample network.
LECTURE_ADJACENCY: List[List[int]] = [
    [0, 0, 1, 1],
    [1, 0, 0, 0],
    [1, 1, 0, 1],
    [1, 1, 0, 0],
]

SAMPLE_ADJACENCY: List[List[int]] = [
    [0, 1, 0, 0, 1, 0, 0, 0],
    [0, 0, 1, 0, 1, 0, 0, 0],
    [0, 0, 0, 1, 0, 0, 0, 1],
    [1, 0, 1, 0, 0, 0, 0, 1],
    [0, 0, 0, 0, 0, 1, 0, 0],
    [0, 0, 1, 0, 1, 0, 1, 0],
    [0, 0, 0, 0, 0, 0, 0, 1],
    [0, 0, 0, 1, 0, 0, 1, 0],
]


class InvalidConfiguration(ValueError):
    """Page/link counts, solver settings or a supplied network are out of range."""


@dataclass(frozen=True)
class Page:
    """One node of the link graph: 1-based id, outgoing link ids and keywords."""

    id: int
    links: Tuple[int, ...] = ()
    keywords: Tuple[str, ...] = ()

    @property
    def index(self) -> int:
        return self.id - 1


@dataclass(frozen=True)
class Network:
    """Fixed snapshot of pages; ``pages[i].id == i + 1``."""

    pages: Tuple[Page, ...]
    link_count: int

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @classmethod
    def from_pages(cls, pages: Sequence[Page]) -> "Network":
        """
        Wrap externally built pages, checking ids and link targets.
        The link count is the number of edges actually present.
        """
        pages = tuple(pages)
        n = len(pages)
        if n < 1:
            raise InvalidConfiguration("a network needs at least one page")

        edges = 0
        for i, page in enumerate(pages):
            if page.id != i + 1:
                raise InvalidConfiguration(f"page at position {i} has id {page.id}, expected {i + 1}")
            if len(set(page.links)) != len(page.links):
                raise InvalidConfiguration(f"page {page.id} has duplicate links")
            check_keywords(page.id, page.keywords)
            if len(set(page.keywords)) != len(page.keywords):
                raise InvalidConfiguration(f"page {page.id} has duplicate keywords")
            for target in page.links:
                if not 1 <= target <= n:
                    raise InvalidConfiguration(f"page {page.id} links to unknown page {target}")
                if target == page.id:
                    raise InvalidConfiguration(f"page {page.id} links to itself")
            edges += len(page.links)

        return cls(pages=pages, link_count=edges)


def check_keywords(page_id: int, words: Any) -> None:
    """A page's keywords must be a sequence of strings, not a bare string."""
    if isinstance(words, str) or not isinstance(words, (list, tuple)):
        raise InvalidConfiguration(f"keywords for page {page_id} must be a list of strings, got {words!r}")
    for word in words:
        if not isinstance(word, str):
            raise InvalidConfiguration(f"keyword {word!r} on page {page_id} is not a string")


def max_links(page_count: int) -> int:
    """Number of distinct non-self directed edges between ``page_count`` pages."""
    return page_count * (page_count - 1)


def validate_counts(page_count: int, link_count: int) -> None:
    if page_count < 1:
        raise InvalidConfiguration(f"page_count must be >= 1, got {page_count}")
    if not 0 <= link_count <= max_links(page_count):
        raise InvalidConfiguration(
            f"link_count must be in [0, {max_links(page_count)}] for {page_count} pages, got {link_count}"
        )


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


def generate_random(
    page_count: int,
    link_count: int,
    rng: np.random.Generator,
    vocabulary: Sequence[str] = KEYWORDS,
) -> Network:
    """
    Random network by rejection sampling:

      links:    uniform origin index + uniform target id, redrawn on a
                self link or an edge the origin already has
      keywords: 1..3 per page, uniform from ``vocabulary``, redrawn on a
                repeat within the same page

    All randomness comes from ``rng`` so a seeded generator replays the run.
    """
    validate_counts(page_count, link_count)
    if not vocabulary:
        raise InvalidConfiguration("keyword vocabulary is empty")

    links: List[List[int]] = [[] for _ in range(page_count)]
    linked: List[Set[int]] = [set() for _ in range(page_count)]
    added = 0
    while added < link_count:
        origin = int(rng.integers(page_count))
        target = int(rng.integers(page_count)) + 1
        if target == origin + 1 or target in linked[origin]:
            continue
        links[origin].append(target)
        linked[origin].add(target)
        added += 1

    keywords: List[List[str]] = [[] for _ in range(page_count)]
    for words in keywords:
        wanted = min(int(rng.integers(1, 4)), len(vocabulary))
        while len(words) < wanted:
            word = vocabulary[int(rng.integers(len(vocabulary)))]
            if word not in words:
                words.append(word)

    pages = tuple(
        Page(id=i + 1, links=tuple(links[i]), keywords=tuple(keywords[i]))
        for i in range(page_count)
    )
    log.info(f"Generated network: pages={page_count} links={link_count}")
    return Network(pages=pages, link_count=link_count)


def from_adjacency(
    matrix: Sequence[Sequence[int]],
    keywords: Optional[Sequence[Sequence[str]]] = None,
) -> Network:
    """Network from a square 0/1 matrix where ``matrix[i][j] == 1`` means page i+1 links to page j+1."""
    try:
        raw = np.asarray(matrix)
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"adjacency matrix is not numeric: {e}") from e

    # No dtype on the conversion above: 0.5 or 1.9 must be rejected, not truncated.
    if raw.dtype.kind not in "biuf":
        raise InvalidConfiguration(f"adjacency matrix is not numeric (dtype {raw.dtype})")
    if raw.ndim != 2 or raw.shape[0] != raw.shape[1] or raw.shape[0] < 1:
        raise InvalidConfiguration(f"adjacency matrix must be square and non-empty, got shape {raw.shape}")
    if not np.isin(raw, (0, 1)).all():
        raise InvalidConfiguration("adjacency matrix may only contain 0 and 1")
    adj = raw.astype(int)
    if np.diagonal(adj).any():
        raise InvalidConfiguration("adjacency matrix has a self link on the diagonal")

    n = adj.shape[0]
    if keywords is not None:
        if isinstance(keywords, str) or not isinstance(keywords, (list, tuple)):
            raise InvalidConfiguration(f"keywords must be a list with one entry per page, got {keywords!r}")
        if len(keywords) != n:
            raise InvalidConfiguration(f"expected keywords for {n} pages, got {len(keywords)}")

    pages = []
    for i in range(n):
        targets = tuple(int(j) + 1 for j in np.flatnonzero(adj[i]))
        words: Tuple[str, ...] = ()
        if keywords is not None:
            check_keywords(i + 1, keywords[i])
            words = tuple(keywords[i])
        pages.append(Page(id=i + 1, links=targets, keywords=words))
    return Network.from_pages(pages)


def build_adjacency(network: Network) -> np.ndarray:
    n = network.page_count
    adj = np.zeros((n, n), dtype=int)
    for page in network.pages:
        for link in page.links:
            adj[page.index, link - 1] = 1
    return adj


def dangling_pages(adjacency: np.ndarray) -> List[int]:
    """Ids of pages whose adjacency column is all zero (no inbound links)."""
    col_sums = np.asarray(adjacency).sum(axis=0)
    return [int(j) + 1 for j in np.flatnonzero(col_sums == 0)]


def validate_no_dangling(adjacency: np.ndarray) -> bool:
    return not dangling_pages(adjacency)
