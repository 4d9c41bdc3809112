import asyncio

from domain.schemas import ReferenceEntity
from infrastructure.store.memory import MemoryStore


def test_reference_dicts_may_carry_their_own_id() -> None:
    store = MemoryStore(
        references={
            "pubGoogle01": {"id": "stale", "SH_Code": "GOOG"},
            "pubMeta0001": {"SH_Code": "META"},
        }
    )

    google = asyncio.run(store.get_reference("pubGoogle01"))
    assert google == ReferenceEntity(id="pubGoogle01", code="GOOG", display_name_fr="GOOG")
    assert asyncio.run(store.get_reference("pubMeta0001")).id == "pubMeta0001"
    assert store.reference_calls == ["pubGoogle01", "pubMeta0001"]
