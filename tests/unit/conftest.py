import pytest

from domain.schemas import ResolutionContext
from infrastructure.store.memory import MemoryStore

CLIENT = "acme"


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore(
        taxonomies={
            CLIENT: {
                "tags-v1": {
                    "display_name": "Tags",
                    "NA_Name_Level_1_Title": "Campaign",
                    "NA_Name_Level_1": "[CA_Name:open]_[TC_Publisher:code]",
                    "NA_Name_Level_2": "[PL_Audience:code]-[TC_Publisher:display_fr]",
                    "NA_Name_Level_5": "[CR_Version:open]",
                },
                "platform-v1": {
                    "NA_Name_Level_1": "src=[TC_Publisher:custom_utm]",
                    "NA_Name_Level_2": "[PL_Audience:display_en]",
                },
                "mo-v1": {
                    "NA_Name_Level_1": "[CA_Campaign_Identifier:open]",
                },
            }
        },
        references={
            "pubGoogle01": {"SH_Code": "GOOG", "SH_Display_Name_FR": "Google", "SH_Default_UTM": "google"},
            "audYoung001": {"SH_Code": "Y1824", "SH_Display_Name_FR": "Jeunes", "SH_Display_Name_EN": "Young"},
        },
        overrides={CLIENT: [{"CC_Shortcode_ID": "pubGoogle01", "CC_Custom_UTM": "google_ads"}]},
        options={CLIENT: {"PL_Audience": ["audYoung001"]}},
    )


@pytest.fixture
def context() -> ResolutionContext:
    return ResolutionContext(
        campaign_record={"CA_Name": "Spring Sale", "CA_Campaign_Identifier": "CMP-001"},
        tactique_record={"TC_Publisher": "pubGoogle01"},
    )
