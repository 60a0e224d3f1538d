from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path


@dataclass(slots=True)
class Material:
    code: str
    label: str
    description: str
    price_multiplier: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "label": self.label,
            "description": self.description,
            "price_multiplier": str(self.price_multiplier),
        }


DEFAULT_MATERIALS: tuple[Material, ...] = (
    Material("pla", "PLA", "Biodegradable, easy to print", Decimal("1.0")),
    Material("abs", "ABS", "Strong and durable", Decimal("1.2")),
    Material("petg", "PETG", "Chemical resistant", Decimal("1.5")),
    Material("resin", "Resin", "High detail finish", Decimal("2.0")),
    Material("metal", "Metal", "Industrial strength", Decimal("5.0")),
)


def default_materials() -> dict[str, Material]:
    return {item.code: item for item in DEFAULT_MATERIALS}


def find_material(materials: dict[str, Material], name: str) -> Material | None:
    """Look a material up by code or label, ignoring case."""
    key = name.strip().lower()
    if key in materials:
        return materials[key]
    for item in materials.values():
        if item.label.lower() == key:
            return item
    return None


def load_materials(path: str) -> dict[str, Material]:
    source = Path(path)
    if not source.exists():
        return default_materials()
    payload = json.loads(source.read_text(encoding="utf-8"))
    result: dict[str, Material] = {}
    for raw in payload:
        item = Material(
            code=raw["code"].strip().lower(),
            label=raw.get("label", raw["code"].upper()),
            description=raw.get("description", ""),
            price_multiplier=Decimal(str(raw.get("price_multiplier", "1.0"))),
        )
        result[item.code] = item
    return result
