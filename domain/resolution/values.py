"""Raw variable values, before format projection."""

from dataclasses import dataclass

from domain.schemas import FieldSource


@dataclass(frozen=True)
class RawValue:
    """A variable's value as found in the resolution context."""

    text: str
    source: FieldSource
    reference_id: str | None = None
    open_text: str | None = None
    from_overlay: bool = False

    @property
    def lookup_id(self) -> str:
        return self.reference_id or self.text
