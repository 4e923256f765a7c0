import logging
from typing import List

from .models import Keyword

logger = logging.getLogger(__name__)


def parse_keywords(text: str) -> List[Keyword]:
    """
    Turns the script writer's keyword artifact into an ordered keyword list.

    One keyword per line. Surrounding whitespace is stripped and blank lines are
    dropped; the position of each kept line is its relevance order.

    Args:
        text (str): Raw contents of the keyword file.

    Returns:
        List[Keyword]: Keywords in script order, positions 0..n-1.
    """
    terms = [line.strip() for line in text.splitlines()]
    keywords = [Keyword(term=term, position=i) for i, term in enumerate(t for t in terms if t)]
    logger.debug(f"Parsed {len(keywords)} keywords from {len(terms)} lines.")
    return keywords


def load_keywords(keywords_path: str) -> List[Keyword]:
    """Reads and parses a UTF-8 keyword file."""
    with open(keywords_path, 'r', encoding='utf-8') as f:
        keywords = parse_keywords(f.read())
    logger.info(f"🔑 Loaded {len(keywords)} keywords from {keywords_path}")
    return keywords
