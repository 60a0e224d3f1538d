from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from printbridge.enums import PrintQuality
from printbridge.materials import Material, find_material
from printbridge.models import Estimate, FileDescriptor, Specification


BASE_COST = Decimal("25")
BASE_TIMELINE_DAYS = Decimal("2")
FILE_COMPLEXITY_STEP = Decimal("0.3")

QUALITY_MULTIPLIERS: dict[str, Decimal] = {
    PrintQuality.DRAFT.value: Decimal("0.8"),
    PrintQuality.STANDARD.value: Decimal("1.0"),
    PrintQuality.HIGH.value: Decimal("1.5"),
}


def _round(value: Decimal) -> Decimal:
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def file_complexity(files: list[FileDescriptor]) -> Decimal:
    if not files:
        return Decimal("1")
    return Decimal(len(files)) * FILE_COMPLEXITY_STEP + 1


def estimate_request(
    specification: Specification,
    files: list[FileDescriptor],
    materials: dict[str, Material],
) -> Estimate:
    """Rough customer-facing price and lead time, before any provider quotes.

    cost = base x material x quality x quantity x complexity, where every
    attached file adds 0.3 to the complexity factor. Unknown materials and
    qualities count as 1.0.
    """
    material = find_material(materials, specification.material)
    material_multiplier = material.price_multiplier if material else Decimal("1")
    quality_multiplier = QUALITY_MULTIPLIERS.get(specification.quality, Decimal("1"))
    complexity = file_complexity(files)

    cost = _round(
        BASE_COST * material_multiplier * quality_multiplier * Decimal(specification.quantity) * complexity
    )
    timeline = max(1, int(_round(BASE_TIMELINE_DAYS * quality_multiplier * complexity)))
    return Estimate(cost=cost, timeline_days=timeline)
