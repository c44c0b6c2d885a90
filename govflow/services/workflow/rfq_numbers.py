"""RFQ number normalization and best-effort resolution."""

import logging
import re
from collections.abc import Iterable
from typing import Any, Optional

from govflow.models.rfq_document import RfqDocument

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUES = {"N/A", "NA", "NONE", "UNKNOWN", "NULL"}
MIN_LENGTH = 3
MAX_LENGTH = 100

_EDGE_JUNK = re.compile(r"^[^A-Za-z0-9]+|[^A-Za-z0-9]+$")
_WHITESPACE = re.compile(r"\s+")
_VALID_SHAPE = re.compile(r"^[A-Z0-9][A-Z0-9\-_/. ]*[A-Z0-9]$")
_NON_DIGITS = re.compile(r"\D+")


def normalize_rfq_number(value: Any) -> Optional[str]:
    """
    Normalize an RFQ number as printed on a document.

    Returns None for anything that does not look like an RFQ number:
    non-strings, blanks, placeholders such as "N/A", values without a digit,
    and values shorter than 3 or longer than 100 characters.

    Example:
        >>> normalize_rfq_number("  spe4a6-25-q-0123. ")
        'SPE4A6-25-Q-0123'
    """
    if not isinstance(value, str):
        return None

    cleaned = _EDGE_JUNK.sub("", value.strip())
    cleaned = _WHITESPACE.sub(" ", cleaned).upper()

    if not cleaned or cleaned in PLACEHOLDER_VALUES:
        return None
    if len(cleaned) < MIN_LENGTH or len(cleaned) > MAX_LENGTH:
        return None
    if not any(ch.isdigit() for ch in cleaned):
        return None
    if not _VALID_SHAPE.match(cleaned):
        return None
    return cleaned


def numeric_suffix(value: Optional[str]) -> str:
    """All digits of a value, in order ("" when there are none)."""
    if not value:
        return ""
    return _NON_DIGITS.sub("", value)


class RfqNumberResolver:
    """
    Resolve free-form RFQ numbers to RFQ documents.

    Exact match on the normalized number wins. Failing that, the first RFQ
    (lowest id) whose digits end with the candidate's digits is used, which
    covers a PO quoting "36208263" for an RFQ filed as "821 - 36208263".
    Two RFQs sharing a numeric suffix cannot be told apart; the lowest id is
    taken.
    """

    def __init__(self, documents: Iterable[RfqDocument]):
        self._exact: dict[str, RfqDocument] = {}
        self._by_digits: list[tuple[str, RfqDocument]] = []

        for document in sorted(documents, key=lambda d: d.id):
            normalized = normalize_rfq_number(document.rfq_number)
            if normalized is None:
                continue
            self._exact.setdefault(normalized, document)
            digits = numeric_suffix(normalized)
            if digits:
                self._by_digits.append((digits, document))

    def __len__(self) -> int:
        return len(self._exact)

    def resolve(self, rfq_number: Any) -> Optional[RfqDocument]:
        """
        Find the RFQ document a number refers to.

        Args:
            rfq_number: Number as found on a PO or in extracted data

        Returns:
            Matching RFQ document, or None
        """
        normalized = normalize_rfq_number(rfq_number)
        if normalized is None:
            return None

        exact = self._exact.get(normalized)
        if exact is not None:
            return exact

        digits = numeric_suffix(normalized)
        if not digits:
            return None

        candidates = [doc for doc_digits, doc in self._by_digits if doc_digits.endswith(digits)]
        if not candidates:
            return None
        if len(candidates) > 1:
            logger.debug(
                "Ambiguous RFQ number %s matches %d documents, using id %s",
                normalized,
                len(candidates),
                candidates[0].id,
            )
        return candidates[0]
