import pytest

from domain.schemas import FieldSource
from domain.taxonomy.classifier import SourceRules, classify_variable
from domain.taxonomy.loader import parse_source_rules


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("CA_Name", FieldSource.CAMPAIGN),
        ("CA_Year", FieldSource.CAMPAIGN),
        ("TC_Publisher", FieldSource.TACTIQUE),
        ("PL_Audience", FieldSource.PLACEMENT),
        ("CR_Version", FieldSource.CREATIF),
        ("Free_Text", FieldSource.MANUAL),
        ("CA_Unlisted", FieldSource.MANUAL),
    ],
)
def test_default_rules(name: str, expected: FieldSource) -> None:
    assert classify_variable(name) is expected


def test_campaign_list_wins_over_tactique_list() -> None:
    rules = SourceRules(campaign=["Shared"], tactique=["Shared", "TC_Only"])
    assert rules.classify("Shared") is FieldSource.CAMPAIGN
    assert rules.classify("TC_Only") is FieldSource.TACTIQUE


def test_parse_source_rules_keeps_defaults_for_absent_keys() -> None:
    rules = parse_source_rules({"campaign": ["CA_Custom"], "creatif_prefixes": ["CRE_"]})

    assert rules.classify("CA_Custom") is FieldSource.CAMPAIGN
    assert rules.classify("CA_Name") is FieldSource.MANUAL
    assert rules.classify("TC_Publisher") is FieldSource.TACTIQUE
    assert rules.classify("CRE_Size") is FieldSource.CREATIF
    assert rules.classify("CR_Size") is FieldSource.MANUAL


def test_parse_source_rules_rejects_non_list() -> None:
    with pytest.raises(ValueError, match="campaign must be a list"):
        parse_source_rules({"campaign": "CA_Name"})
