"""
Item segmentation: one customer message -> one phrase per product.
"""

import logging
import re
from typing import Optional

from pedido_bot.core.errors import OracleError
from pedido_bot.core.text import tokenize
from pedido_bot.integrations.llm.oracle import OrderOracle

logger = logging.getLogger(__name__)


# Conjunctions must be whole words so "yogur" or "leche" are never split
DELIMITER_PATTERN = re.compile(r"\s+(?:y|e|and|&)\s+|[,;\n]+", re.IGNORECASE)


def split_by_delimiters(text: str) -> list[str]:
    """
    Split on conjunctions, commas, semicolons and line breaks.

    >>> split_by_delimiters("5 cajas de cerveza y 3 gaseosas")
    ['5 cajas de cerveza', '3 gaseosas']
    """
    if not text:
        return []
    return [part.strip() for part in DELIMITER_PATTERN.split(text) if part and part.strip()]


def _only_source_words(segments: list[str], source: str) -> bool:
    """True when no segment contains a word absent from the source text."""
    source_words = set(tokenize(source))
    return all(set(tokenize(segment)) <= source_words for segment in segments)


class ItemSegmenter:
    """Splits messages with either fixed delimiters or the oracle."""

    def __init__(self, oracle: Optional[OrderOracle] = None, strategy: str = "delimiter"):
        if strategy not in ("delimiter", "oracle"):
            raise ValueError(f"Unknown segmentation strategy: {strategy}")
        self.oracle = oracle
        self.strategy = strategy

    async def segment(self, text: str) -> list[str]:
        """Ordered item phrases; empty list for blank input."""
        text = (text or "").strip()
        if not text:
            return []

        if self.strategy == "oracle" and self.oracle is not None:
            return await self._segment_with_oracle(text)
        return split_by_delimiters(text)

    async def _segment_with_oracle(self, text: str) -> list[str]:
        try:
            segments = await self.oracle.split_items(text)
        except OracleError as e:
            logger.warning(f"Oracle split failed, using whole message: {e}")
            return [text]

        segments = [s.strip() for s in segments if s and s.strip()]
        if not segments:
            logger.warning("Oracle split returned no segments, using whole message")
            return [text]

        if not _only_source_words(segments, text):
            logger.warning(f"Oracle split invented content {segments!r}, using whole message")
            return [text]

        return segments
