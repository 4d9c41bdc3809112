from domain.schemas import TaxonomyFormat
from domain.taxonomy.parser import (
    TokenOccurrence,
    find_malformed_tokens,
    join_levels,
    parse_tokens,
    placeholder,
    split_template,
)


def test_parse_tokens_keeps_order_positions_and_duplicates() -> None:
    structure = "[CA_Name:open]_[TC_Publisher:code]|[CA_Name:utm]"
    tokens = parse_tokens(structure)

    assert [(t.name, t.format) for t in tokens] == [
        ("CA_Name", TaxonomyFormat.OPEN),
        ("TC_Publisher", TaxonomyFormat.CODE),
        ("CA_Name", TaxonomyFormat.UTM),
    ]
    assert tokens[0].start == 0
    assert structure[tokens[1].start : tokens[1].end] == "[TC_Publisher:code]"


def test_parse_tokens_is_stateless_between_calls() -> None:
    structure = "[A:code]-[B:display_fr]"
    assert parse_tokens(structure) == parse_tokens(structure)
    assert parse_tokens("") == []


def test_unknown_format_and_nested_colon_are_literal() -> None:
    assert parse_tokens("[A:bogus] [a:b:code] [:code] [A]") == []


def test_split_template_preserves_text() -> None:
    template = "pre_[A:code]_mid[B:custom_utm]"
    segments = split_template(template)

    assert segments[0] == "pre_"
    assert isinstance(segments[1], TokenOccurrence)
    assert "".join(s if isinstance(s, str) else s.raw for s in segments) == template


def test_placeholder_and_join_levels() -> None:
    assert placeholder("PL_Audience", TaxonomyFormat.DISPLAY_EN) == "[PL_Audience:display_en]"
    assert join_levels(["a", "", "b"]) == "a|b"


def test_find_malformed_tokens_reports_near_misses_only() -> None:
    template = "[PL_Name] [X:bogus] [A:code] [some text]"
    assert find_malformed_tokens(template) == ["[PL_Name]", "[X:bogus]"]
