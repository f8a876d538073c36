"""
Catalog reference data.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class CatalogProduct:
    """Product as listed in the catalog. Read-only to the order pipeline."""
    sku: str
    name: str
    short_name: str
    search_terms: tuple[str, ...] = ()
    units: tuple[str, ...] = ()
    unit_codes: dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    facility_code: Optional[str] = None

    def unit_code_for(self, unit: str) -> str:
        """External unit code for a unit, falling back to the unit itself."""
        return self.unit_codes.get(unit, unit)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "sku": self.sku,
            "name": self.name,
            "short_name": self.short_name,
            "search_terms": list(self.search_terms),
            "units": list(self.units),
            "unit_codes": dict(self.unit_codes),
            "facility_code": self.facility_code,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogProduct":
        """Restore from dictionary produced by to_dict()."""
        return cls(
            sku=str(data["sku"]),
            name=data["name"],
            short_name=data.get("short_name") or "",
            search_terms=tuple(data.get("search_terms") or ()),
            units=tuple(data.get("units") or ()),
            unit_codes=dict(data.get("unit_codes") or {}),
            facility_code=data.get("facility_code"),
        )
