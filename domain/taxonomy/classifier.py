"""Variable source classification."""

from functools import cached_property

from pydantic import BaseModel, Field

from domain.schemas import FieldSource

DEFAULT_CAMPAIGN_FIELDS = [
    "CA_Campaign_Identifier",
    "CA_Name",
    "CA_Division",
    "CA_Quarter",
    "CA_Year",
    "CA_Custom_Dim_1",
    "CA_Custom_Dim_2",
    "CA_Custom_Dim_3",
    "CA_Billing_ID",
    "CA_PO",
    "CA_Budget",
    "CA_Currency",
    "CA_Start_Date",
    "CA_End_Date",
]

DEFAULT_TACTIQUE_FIELDS = [
    "TC_Publisher",
    "TC_Objective",
    "TC_LOB",
    "TC_Media_Type",
    "TC_Buying_Method",
    "TC_Custom_Dim_1",
    "TC_Custom_Dim_2",
    "TC_Custom_Dim_3",
    "TC_Inventory",
    "TC_Market",
    "TC_Language",
    "TC_Media_Objective",
    "TC_Kpi",
    "TC_Unit_Type",
    "TC_Budget",
    "TC_Currency",
    "TC_Billing_ID",
    "TC_PO",
    "TC_Start_Date",
    "TC_End_Date",
    "TC_Format",
    "TC_Placement",
]


class SourceRules(BaseModel):
    """Static configuration mapping variable names to their data source."""

    campaign: list[str] = Field(default_factory=lambda: list(DEFAULT_CAMPAIGN_FIELDS))
    tactique: list[str] = Field(default_factory=lambda: list(DEFAULT_TACTIQUE_FIELDS))
    placement_prefixes: list[str] = Field(default_factory=lambda: ["PL_"])
    creatif_prefixes: list[str] = Field(default_factory=lambda: ["CR_"])

    @cached_property
    def _explicit_lookup(self) -> dict[str, FieldSource]:
        """Explicit name table; campaign entries win over tactique ones."""
        lookup = {name: FieldSource.TACTIQUE for name in self.tactique}
        lookup.update({name: FieldSource.CAMPAIGN for name in self.campaign})
        return lookup

    def classify(self, name: str) -> FieldSource:
        """
        Return the source category of a variable, decided by its name alone.

        Examples:
            >>> rules = SourceRules()
            >>> rules.classify("CA_Year")
            <FieldSource.CAMPAIGN: 'campaign'>
            >>> rules.classify("CR_Offer")
            <FieldSource.CREATIF: 'creatif'>
            >>> rules.classify("Anything_Else")
            <FieldSource.MANUAL: 'manual'>
        """
        explicit = self._explicit_lookup.get(name)
        if explicit is not None:
            return explicit
        if any(name.startswith(p) for p in self.placement_prefixes):
            return FieldSource.PLACEMENT
        if any(name.startswith(p) for p in self.creatif_prefixes):
            return FieldSource.CREATIF
        return FieldSource.MANUAL


DEFAULT_SOURCE_RULES = SourceRules()


def classify_variable(name: str, rules: SourceRules = DEFAULT_SOURCE_RULES) -> FieldSource:
    return rules.classify(name)
