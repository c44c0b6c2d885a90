"""Unit tests for catalog matching and relevance scoring."""

from types import SimpleNamespace

import pytest

from govflow.services.opportunities.matcher import (
    CatalogIndex,
    MatchSignals,
    calculate_relevance,
    canonical_nsn,
    find_matching_fsc,
    find_matching_nsns,
    find_title_keyword,
    match_opportunity,
    parse_line_items_from_text,
    parse_quantity_from_title,
)

pytestmark = pytest.mark.unit

ACETONE = "6810-00-286-5435"


def solicitation(title="Office furniture", description=None, naics_code=None, set_aside_type=None):
    return SimpleNamespace(
        title=title,
        description=description,
        naics_code=naics_code,
        set_aside_type=set_aside_type,
    )


@pytest.fixture
def catalog():
    return CatalogIndex.from_pairs(
        [
            (ACETONE, "6810"),
            ("6810-01-111-2222", "6810"),
            ("6810-01-333-4444", "6810"),
            ("9150-00-555-6666", "9150"),
            ("9150-00-777-8888", "9150"),
        ]
    )


class TestCatalogIndex:
    def test_canonicalizes_and_dedupes(self):
        index = CatalogIndex.from_pairs([("6810002865435", ""), (ACETONE, "6810"), ("bad", "1234")])
        assert index.nsns == [ACETONE]
        assert index.fsc_codes == ["6810", "1234"]
        assert len(index) == 1

    def test_canonical_nsn(self):
        assert canonical_nsn("6810 00 286 5435") == ACETONE
        assert canonical_nsn("681000286543") is None
        assert canonical_nsn(None) is None


class TestNsnMatching:
    @pytest.mark.parametrize(
        "text",
        [
            "Supply acetone, NSN 6810-00-286-5435, qty 10",
            "Item 0001: 6810002865435 ACETONE TECHNICAL",
            "nsn: 6810 00 286 5435 in 1 gallon cans",
            "NSN/6810-00-286-5435/",
        ],
    )
    def test_format_insensitive(self, catalog, text):
        assert find_matching_nsns(text, catalog) == [ACETONE]

    def test_no_text(self, catalog):
        assert find_matching_nsns(None, catalog) == []
        assert find_matching_nsns("", catalog) == []

    def test_matches_in_catalog_order(self, catalog):
        text = "9150-00-555-6666 and 6810-00-286-5435"
        assert find_matching_nsns(text, catalog) == [ACETONE, "9150-00-555-6666"]


class TestSignals:
    def test_fsc_patterns(self):
        assert find_matching_fsc("Supplies under FSC 6810", ["9150", "6810"]) == "6810"
        assert find_matching_fsc("FSC: 9150 greases", ["6810", "9150"]) == "9150"
        assert find_matching_fsc("FSC-6850", ["6850"]) == "6850"
        assert find_matching_fsc("6810 units", ["6810"]) is None

    def test_title_keyword(self):
        assert find_title_keyword("GREASE, AIRCRAFT") == "grease"
        assert find_title_keyword("Lubricant, general purpose") == "lubricant"
        assert find_title_keyword("Office chairs") is None
        assert find_title_keyword("Solvent cleaning kit", keyword="acid") is None
        assert find_title_keyword("Acid, hydrochloric", keyword="acid") == "acid"


class TestRelevance:
    def test_zero_signals_score_zero(self, catalog):
        match = match_opportunity(solicitation(), catalog)
        assert match.relevance_score == 0
        assert match.matched_keyword is None
        assert match.matched_fsc is None
        assert match.matched_nsns is None

    def test_single_nsn_scores_75(self, catalog):
        match = match_opportunity(solicitation(description=f"Provide NSN {ACETONE}"), catalog)

        assert match.relevance_score == 75
        assert match.matched_nsns == [ACETONE]
        assert match.matched_fsc is None
        assert match.matched_keyword == f"NSN:{ACETONE}"

    def test_score_is_monotonic_in_nsn_count_and_capped(self, catalog):
        scores = []
        for count in range(1, len(catalog.nsns) + 1):
            text = " ".join(catalog.nsns[:count])
            scores.append(match_opportunity(solicitation(description=text), catalog).relevance_score)

        assert scores == sorted(scores)
        assert scores[:4] == [75, 80, 85, 90]
        assert all(score <= 100 for score in scores)

    def test_every_signal_clamps_to_100(self, catalog):
        opportunity = solicitation(
            title="Grease and solvent",
            description=" ".join(catalog.nsns) + " FSC 6810",
            naics_code="325998",
            set_aside_type="SBA",
        )
        assert match_opportunity(opportunity, catalog).relevance_score == 100

    @pytest.mark.parametrize(
        "signals,expected",
        [
            (MatchSignals(matched_fsc="6810"), 25),
            (MatchSignals(matched_fsc="1234"), 0),
            (MatchSignals(title_keyword="grease"), 10),
            (MatchSignals(naics_code="424690"), 5),
            (MatchSignals(naics_code="111111"), 0),
            (MatchSignals(set_aside=True), 3),
            (MatchSignals(matched_fsc="6810", title_keyword="acid", naics_code="325180", set_aside=True), 43),
        ],
    )
    def test_additive_weights(self, signals, expected):
        assert calculate_relevance(signals) == expected

    def test_set_aside_none_is_ignored(self, catalog):
        assert match_opportunity(solicitation(set_aside_type="NONE"), catalog).relevance_score == 0

    def test_fsc_search_counts_as_fsc_evidence(self, catalog):
        match = match_opportunity(
            solicitation(title="Industrial supplies"),
            catalog,
            search_source="FSC:6810",
            search_fsc="6810",
        )
        assert match.relevance_score == 25
        assert match.matched_fsc == "6810"
        assert match.matched_keyword == "FSC:6810"

    def test_keyword_search_scores_its_keyword(self, catalog):
        match = match_opportunity(
            solicitation(title="GREASE, AIRCRAFT"),
            catalog,
            search_source="Keyword:grease",
            search_fsc="9150",
            search_keyword="grease",
        )
        assert match.relevance_score == 35
        assert match.matched_keyword == "Keyword:grease"

    def test_nsn_label_wins_over_search_source(self, catalog):
        match = match_opportunity(
            solicitation(description=ACETONE),
            catalog,
            search_source="Keyword:acid",
        )
        assert match.matched_keyword == f"NSN:{ACETONE}"

    def test_wire_form_uses_camel_case(self, catalog):
        match = match_opportunity(solicitation(description=ACETONE), catalog)
        assert match.model_dump(by_alias=True) == {
            "relevanceScore": 75,
            "matchedKeyword": f"NSN:{ACETONE}",
            "matchedFsc": None,
            "matchedNsns": [ACETONE],
        }

    def test_empty_catalog_still_scores_other_signals(self):
        match = match_opportunity(
            solicitation(title="Solvent", description=ACETONE, naics_code="325998"),
            CatalogIndex(),
        )
        assert match.matched_nsns is None
        assert match.relevance_score == 15


class TestQuantityParsing:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("10 GL SOLVENT", (10, "GL")),
            ("ACETONE 5 gallon", (5, "GALLON")),
            ("12 EA of acetone", (12, "EA")),
            ("Grease 4 lb tubs", (4, "LB")),
            ("SOLVENT FY2024 LOT", None),
            ("Office chairs", None),
            (None, None),
        ],
    )
    def test_parse_quantity_from_title(self, title, expected):
        assert parse_quantity_from_title(title) == expected

    def test_line_items_from_nsn_blocks(self):
        text = (
            "Line 1 NSN: 6810-00-286-5435 Acetone QTY: 10 GL "
            "Line 2 NSN: 9150-00-555-6666 Grease Quantity: 4"
        )
        items = parse_line_items_from_text(text)

        assert [item["nsn"] for item in items] == [ACETONE, "9150-00-555-6666"]
        assert items[0]["quantity"] == 10
        assert items[0]["unit"] == "GL"
        assert items[1]["lineNumber"] == "2"
        assert items[1]["quantity"] == 4

    def test_line_item_fallback(self):
        items = parse_line_items_from_text("Deliver 25 EA of wipes")
        assert items == [
            {
                "lineNumber": "1",
                "description": "Deliver 25 EA of wipes",
                "quantity": 25,
                "unit": "EA",
                "nsn": "",
            }
        ]

    def test_no_text(self):
        assert parse_line_items_from_text(None) == []
