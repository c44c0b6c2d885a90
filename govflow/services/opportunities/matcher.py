"""Score external solicitations against the internal NSN catalog."""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# NAICS codes relevant to chemicals and industrial products
RELEVANT_NAICS = ["424690", "325998", "324191", "325199", "325180"]

# Product keywords searched on SAM.gov, each bound to the FSC it implies
PRODUCT_KEYWORDS = [
    ("chemical", "6810"),
    ("solvent", "6810"),
    ("acid", "6810"),
    ("reagent", "6810"),
    ("alcohol", "6810"),
    ("grease", "9150"),
    ("lubricant", "9150"),
    ("oil lubricating", "9150"),
]

FSC_NAMES = {
    "6810": "Chemicals",
    "9150": "Oils & Greases",
    "6850": "Chemical Specialties",
    "8010": "Paints/Varnishes",
    "9160": "Misc Wax/Oils",
}

NSN_BASE_SCORE = 70
NSN_EXTRA_PER_MATCH = 5
NSN_EXTRA_CAP = 20
FSC_SCORE = 25
KEYWORD_SCORE = 10
NAICS_SCORE = 5
SET_ASIDE_SCORE = 3
MAX_SCORE = 100

_NO_SET_ASIDE = {"", "NONE"}
_UNITS = r"GALLON|GAL|GL|EACH|EA|LB|CASE|CS|BOX|BX|DRUM|DR|PT|QT|OZ|KG|ML|L"
_QUANTITY_PATTERN = re.compile(rf"\b(\d+)\s*({_UNITS})\b", re.IGNORECASE)
_NSN_QTY_PATTERN = re.compile(
    r"NSN[:\s]*(\d{4}-\d{2}-\d{3}-\d{4})[\s\S]*?(?:QTY|Quantity)[:\s]*(\d+)\s*(\w+)?",
    re.IGNORECASE,
)
_NON_ALNUM = re.compile(r"[^A-Z0-9]")


@dataclass
class CatalogIndex:
    """Catalog NSNs in every textual form they are searched under."""

    nsns: list[str] = field(default_factory=list)
    fsc_codes: list[str] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> "CatalogIndex":
        """
        Build from (nsn, fsc) pairs.

        NSNs are kept in canonical dashed form; FSC codes are deduplicated in
        first-seen order.
        """
        nsns: list[str] = []
        fsc_codes: list[str] = []
        for nsn, fsc in pairs:
            canonical = canonical_nsn(nsn)
            if canonical and canonical not in nsns:
                nsns.append(canonical)
            code = (fsc or (canonical[:4] if canonical else "")).strip()
            if code and code not in fsc_codes:
                fsc_codes.append(code)
        return cls(nsns=nsns, fsc_codes=fsc_codes)

    def __len__(self) -> int:
        return len(self.nsns)


@dataclass
class MatchSignals:
    """Raw signals found for one solicitation."""

    matched_nsns: list[str] = field(default_factory=list)
    matched_fsc: Optional[str] = None
    title_keyword: Optional[str] = None
    naics_code: Optional[str] = None
    set_aside: bool = False

    @property
    def naics_match(self) -> bool:
        return self.naics_code in RELEVANT_NAICS

    @property
    def scored_fsc(self) -> bool:
        return self.matched_fsc in FSC_NAMES


class OpportunityMatch(BaseModel):
    """Matcher output for one solicitation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    relevance_score: int = Field(ge=0, le=MAX_SCORE)
    matched_keyword: Optional[str] = None
    matched_fsc: Optional[str] = None
    matched_nsns: Optional[list[str]] = None


def canonical_nsn(value: Any) -> Optional[str]:
    """Dashed XXXX-XX-XXX-XXXX form of a 13-digit NSN, or None."""
    if not isinstance(value, str):
        return None
    digits = re.sub(r"\D", "", value)
    if len(digits) != 13:
        return None
    return f"{digits[:4]}-{digits[4:6]}-{digits[6:9]}-{digits[9:]}"


def _nsn_forms(nsn: str) -> tuple[str, str, str]:
    return nsn, nsn.replace("-", ""), nsn.replace("-", " ")


def find_matching_nsns(text: Optional[str], catalog: CatalogIndex) -> list[str]:
    """
    Catalog NSNs mentioned in the text, in catalog order.

    Dashed and dash-stripped forms are searched in the uppercased text; the
    space-separated form is searched after every non-alphanumeric character is
    turned into a space.
    """
    if not text:
        return []

    text_upper = text.upper()
    text_normalized = _NON_ALNUM.sub(" ", text_upper)

    matches = []
    for nsn in catalog.nsns:
        dashed, bare, spaced = _nsn_forms(nsn)
        if dashed in text_upper or bare in text_upper or spaced in text_normalized:
            matches.append(nsn)
    return matches


def _strip_nsn_mentions(text: str, nsns: list[str]) -> str:
    for nsn in nsns:
        for form in _nsn_forms(nsn):
            text = re.sub(re.escape(form), " ", text, flags=re.IGNORECASE)
    return text


def find_matching_fsc(text: Optional[str], fsc_codes: Iterable[str]) -> Optional[str]:
    """First catalog FSC code cited in the text ("FSC 6810", "FSC: 6810", "FSC-6810", "6810-")."""
    if not text:
        return None
    for fsc in fsc_codes:
        patterns = (f"FSC {fsc}", f"FSC: {fsc}", f"FSC-{fsc}", f"{fsc}-")
        if any(pattern in text for pattern in patterns):
            return fsc
    return None


def find_title_keyword(title: Optional[str], keyword: Optional[str] = None) -> Optional[str]:
    """
    Product keyword appearing in the title, case-insensitive.

    With ``keyword`` only that keyword is tested; otherwise the first of
    ``PRODUCT_KEYWORDS`` found wins.
    """
    if not title:
        return None
    title_lower = title.lower()
    candidates = [keyword] if keyword else [kw for kw, _ in PRODUCT_KEYWORDS]
    for candidate in candidates:
        if candidate and candidate.lower() in title_lower:
            return candidate
    return None


def has_set_aside(set_aside_type: Optional[str]) -> bool:
    return bool(set_aside_type) and set_aside_type.strip().upper() not in _NO_SET_ASIDE


def calculate_relevance(signals: MatchSignals) -> int:
    """
    Additive relevance score clamped to 100.

    NSN match: 70 plus 5 per matched NSN, bonus capped at 20. FSC: 25, only
    for the product categories in ``FSC_NAMES``.
    Title keyword: 10. Relevant NAICS: 5. Small-business set-aside: 3.
    """
    score = 0
    if signals.matched_nsns:
        score += NSN_BASE_SCORE
        score += min(NSN_EXTRA_PER_MATCH * len(signals.matched_nsns), NSN_EXTRA_CAP)
    if signals.scored_fsc:
        score += FSC_SCORE
    if signals.title_keyword:
        score += KEYWORD_SCORE
    if signals.naics_match:
        score += NAICS_SCORE
    if signals.set_aside:
        score += SET_ASIDE_SCORE
    return max(0, min(score, MAX_SCORE))


def collect_signals(
    opportunity: Any,
    catalog: CatalogIndex,
    full_description: Optional[str] = None,
    search_fsc: Optional[str] = None,
    search_keyword: Optional[str] = None,
) -> MatchSignals:
    """
    Gather every signal for one solicitation.

    ``search_fsc`` and ``search_keyword`` carry the discovery search that found
    the solicitation; an FSC search counts as FSC evidence on its own. FSC
    text patterns are only looked for outside the matched NSNs so a single
    catalog NSN is not counted twice.
    """
    title = getattr(opportunity, "title", None) or ""
    description = getattr(opportunity, "description", None) or ""
    text = " ".join(part for part in (full_description or "", title, description) if part)

    matched_nsns = find_matching_nsns(text, catalog)
    matched_fsc = search_fsc or find_matching_fsc(
        _strip_nsn_mentions(text, matched_nsns), catalog.fsc_codes
    )

    return MatchSignals(
        matched_nsns=matched_nsns,
        matched_fsc=matched_fsc,
        title_keyword=find_title_keyword(title, search_keyword),
        naics_code=getattr(opportunity, "naics_code", None),
        set_aside=has_set_aside(getattr(opportunity, "set_aside_type", None)),
    )


def display_match_source(signals: MatchSignals, search_source: Optional[str] = None) -> Optional[str]:
    """Label shown in the UI: "NSN:<first>" wins over the search source."""
    if signals.matched_nsns:
        return f"NSN:{signals.matched_nsns[0]}"
    if search_source:
        return search_source
    if signals.matched_fsc:
        return f"FSC:{signals.matched_fsc}"
    if signals.title_keyword:
        return f"Keyword:{signals.title_keyword}"
    if signals.naics_match:
        return f"NAICS:{signals.naics_code}"
    return None


def match_opportunity(
    opportunity: Any,
    catalog: CatalogIndex,
    full_description: Optional[str] = None,
    search_source: Optional[str] = None,
    search_fsc: Optional[str] = None,
    search_keyword: Optional[str] = None,
) -> OpportunityMatch:
    """
    Score one solicitation.

    Args:
        opportunity: Anything exposing ``title``, ``description``,
            ``naics_code`` and ``set_aside_type``
        catalog: Catalog index
        full_description: Long description, when fetched
        search_source: Discovery label such as "FSC:6810" or "Keyword:grease"
        search_fsc: FSC code the discovery search was for
        search_keyword: Keyword the discovery search was for

    Returns:
        Score and match provenance
    """
    signals = collect_signals(
        opportunity,
        catalog,
        full_description=full_description,
        search_fsc=search_fsc,
        search_keyword=search_keyword,
    )
    return OpportunityMatch(
        relevance_score=calculate_relevance(signals),
        matched_keyword=display_match_source(signals, search_source),
        matched_fsc=signals.matched_fsc,
        matched_nsns=signals.matched_nsns or None,
    )


def parse_quantity_from_title(title: Optional[str]) -> Optional[tuple[int, str]]:
    """First "<number> <unit>" in a title, e.g. ``(10, "GL")`` for "10 GL SOLVENT"."""
    if not title:
        return None
    match = _QUANTITY_PATTERN.search(title)
    if not match:
        return None
    return int(match.group(1)), match.group(2).upper()


def parse_line_items_from_text(text: Optional[str]) -> list[dict[str, Any]]:
    """
    Naive line items from a long description.

    "NSN: <nsn> ... QTY: <n> <unit>" blocks are preferred; without any, the
    first "<number> <unit>" becomes a single item.
    """
    if not text:
        return []

    items = []
    for match in _NSN_QTY_PATTERN.finditer(text):
        items.append(
            {
                "lineNumber": str(len(items) + 1),
                "description": "",
                "quantity": int(match.group(2)),
                "unit": (match.group(3) or "EA").upper(),
                "nsn": match.group(1),
            }
        )

    if not items:
        simple = _QUANTITY_PATTERN.search(text)
        if simple:
            items.append(
                {
                    "lineNumber": "1",
                    "description": text[:100],
                    "quantity": int(simple.group(1)),
                    "unit": simple.group(2).upper(),
                    "nsn": "",
                }
            )
    return items
