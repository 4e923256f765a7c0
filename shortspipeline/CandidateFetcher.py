import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Sequence

import httpx

from .errors import FetchError
from .models import CandidateSegment, Keyword
from .StockFootage import parse_candidate

logger = logging.getLogger(__name__)


def fetch_candidates_for_keyword(keyword: Keyword, search: Any, config: Dict[str, Any]) -> List[CandidateSegment]:
    """
    Queries the search capability for one keyword and keeps usable results.

    Args:
        keyword (Keyword): The keyword to search for.
        search: Object exposing `search(query, per_page) -> list of raw results`.
        config (Dict[str, Any]): Run configuration ('SEARCH_RESULTS_PER_KEYWORD',
                                 'REQUIRED_QUALITY_TIER').

    Returns:
        List[CandidateSegment]: At most K candidates, in search-result order, each
                                with at least one rendition of the required tier.

    Raises:
        FetchError: If the query itself fails.
    """
    top_k: int = int(config["SEARCH_RESULTS_PER_KEYWORD"])
    required_tier: str = config["REQUIRED_QUALITY_TIER"]

    try:
        raw_results = search.search(keyword.term, per_page=top_k)
        if not isinstance(raw_results, list):
            raise TypeError(f"search returned {type(raw_results).__name__}, not a list")
    except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise FetchError(f"Search for '{keyword.term}' failed: {e}", keyword=keyword) from e

    candidates: List[CandidateSegment] = []
    seen_ids = set()
    for raw in raw_results[:top_k]:
        try:
            candidate = parse_candidate(raw, keyword)
            repeated = candidate.id in seen_ids
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping malformed result for '{keyword.term}': {e}")
            continue
        if repeated:
            # Downloads are named by keyword position and id, so a repeat would share a file
            logger.debug(f"Skipping repeated result {candidate.id} for '{keyword.term}'.")
            continue
        seen_ids.add(candidate.id)
        if not candidate.has_quality(required_tier):
            logger.debug(f"Discarding candidate {candidate.id} for '{keyword.term}': no '{required_tier}' rendition.")
            continue
        candidates.append(candidate)
    return candidates


def fetch_candidates(keywords: Sequence[Keyword], search: Any, config: Dict[str, Any]) -> Dict[Keyword, List[CandidateSegment]]:
    """
    Fetches candidates for every keyword concurrently.

    A keyword whose query fails is logged and maps to an empty list; the rest
    of the batch is unaffected.

    Args:
        keywords (Sequence[Keyword]): Keywords in script order.
        search: The search capability (see `fetch_candidates_for_keyword`).
        config (Dict[str, Any]): Run configuration.

    Returns:
        Dict[Keyword, List[CandidateSegment]]: One entry per keyword, in keyword order.
    """
    logger.info(f"🔎 Fetching stock footage candidates for {len(keywords)} keywords...")
    results: Dict[Keyword, List[CandidateSegment]] = {}
    if not keywords:
        return results

    max_workers = min(int(config["MAX_CONCURRENT_REQUESTS"]), len(keywords))
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {keyword: executor.submit(fetch_candidates_for_keyword, keyword, search, config) for keyword in keywords}
        for keyword in keywords:
            try:
                results[keyword] = futures[keyword].result()
            except FetchError as e:
                logger.error(f"❌ {e}")
                results[keyword] = []

    total = sum(len(c) for c in results.values())
    empty = [k.term for k, c in results.items() if not c]
    logger.info(f"✅ Fetched {total} candidates with a '{config['REQUIRED_QUALITY_TIER']}' rendition.")
    if empty:
        logger.warning(f"No usable candidates for: {', '.join(empty)}")
    return results
