from __future__ import annotations

from decimal import Decimal

from printbridge.materials import default_materials
from printbridge.models import FileDescriptor, Specification
from printbridge.services.estimator import estimate_request, file_complexity


def _files(count: int) -> list[FileDescriptor]:
    return [FileDescriptor(name=f"part{i}.stl", size=100, mime_type="model/stl") for i in range(count)]


def test_standard_pla_single_file() -> None:
    spec = Specification(material="pla", quality="standard", quantity=1)
    estimate = estimate_request(spec, _files(1), default_materials())
    # 25 x 1.0 x 1.0 x 1 x 1.3
    assert estimate.cost == Decimal("33")
    assert estimate.timeline_days == 3


def test_high_quality_resin_scales_cost_and_time() -> None:
    spec = Specification(material="Resin", quality="high", quantity=3)
    estimate = estimate_request(spec, _files(2), default_materials())
    # 25 x 2.0 x 1.5 x 3 x 1.6 = 360, timeline 2 x 1.5 x 1.6 = 4.8
    assert estimate.cost == Decimal("360")
    assert estimate.timeline_days == 5


def test_draft_without_files_keeps_minimum_timeline() -> None:
    spec = Specification(material="abs", quality="draft", quantity=1)
    estimate = estimate_request(spec, [], default_materials())
    # 25 x 1.2 x 0.8 = 24, timeline 2 x 0.8 = 1.6
    assert estimate.cost == Decimal("24")
    assert estimate.timeline_days == 2


def test_unknown_material_counts_as_base_price() -> None:
    spec = Specification(material="wood", quality="standard", quantity=1)
    estimate = estimate_request(spec, [], default_materials())
    assert estimate.cost == Decimal("25")


def test_file_complexity() -> None:
    assert file_complexity([]) == Decimal("1")
    assert file_complexity(_files(3)) == Decimal("1.9")
