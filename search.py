from typing import List, NamedTuple, Sequence

from network import Page
from pagerank import RankedResult


class SearchHit(NamedTuple):
    page_id: int
    keyword: str


def search(ranked_result: RankedResult, pages: Sequence[Page], query: str) -> List[SearchHit]:
    """
    Case-insensitive substring search over page keywords.

    Pages are visited in ranking order (highest PR first) and keywords in
    declaration order, so a page appears once per matching keyword.
    """
    needle = query.strip().lower()
    if not needle:
        raise ValueError("search query is empty")

    hits: List[SearchHit] = []
    for index, _score in ranked_result.ranking:
        page = pages[index]
        for keyword in page.keywords:
            if needle in keyword.lower():
                hits.append(SearchHit(page.id, keyword))
    return hits
