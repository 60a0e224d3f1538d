from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from printbridge.enums import PrintQuality
from printbridge.materials import Material, find_material
from printbridge.models import FileDescriptor, Specification


DEFAULT_ALLOWED_EXTENSIONS = (".stl", ".obj")


@dataclass(slots=True)
class SubmissionValidationResult:
    is_valid: bool
    field: str | None = None
    error_code: str | None = None
    error_text: str | None = None


def _invalid(field: str, code: str, text: str) -> SubmissionValidationResult:
    return SubmissionValidationResult(is_valid=False, field=field, error_code=code, error_text=text)


def validate_file(
    descriptor: FileDescriptor,
    allowed_extensions: tuple[str, ...] | list[str],
    max_size_bytes: int,
    *,
    index: int = 0,
) -> SubmissionValidationResult:
    field = f"files[{index}]"
    name = descriptor.name.strip()
    if not name:
        return _invalid(field, "empty_name", "File name is empty.")

    # names come from browsers and may carry a client path
    suffix = PurePosixPath(name.replace("\\", "/")).suffix.lower()
    allowed = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in allowed_extensions}
    if allowed and suffix not in allowed:
        joined = ", ".join(sorted(allowed))
        return _invalid(field, "extension", f"Expected one of: {joined}")

    if descriptor.size <= 0:
        return _invalid(field, "size", "File is empty.")
    if max_size_bytes > 0 and descriptor.size > max_size_bytes:
        return _invalid(field, "too_large", f"File exceeds {max_size_bytes} bytes.")

    if not descriptor.mime_type.strip():
        return _invalid(field, "mime_type", "Mime type is missing.")

    return SubmissionValidationResult(is_valid=True)


def validate_files(
    files: list[FileDescriptor],
    allowed_extensions: tuple[str, ...] | list[str],
    max_size_bytes: int,
) -> SubmissionValidationResult:
    if not files:
        return _invalid("files", "empty", "At least one model file is required.")
    for index, descriptor in enumerate(files):
        result = validate_file(descriptor, allowed_extensions, max_size_bytes, index=index)
        if not result.is_valid:
            return result
    return SubmissionValidationResult(is_valid=True)


def validate_specification(
    specification: Specification,
    materials: dict[str, Material],
) -> SubmissionValidationResult:
    if not specification.material.strip():
        return _invalid("specification.material", "empty", "Material is required.")
    if materials and find_material(materials, specification.material) is None:
        return _invalid("specification.material", "unknown", f"Unknown material: {specification.material}")

    if specification.quality not in {item.value for item in PrintQuality}:
        return _invalid("specification.quality", "unknown", "Quality must be draft, standard or high.")

    if isinstance(specification.quantity, bool) or not isinstance(specification.quantity, int):
        return _invalid("specification.quantity", "type", "Quantity must be an integer.")
    if specification.quantity < 1:
        return _invalid("specification.quantity", "range", "Quantity must be at least 1.")

    return SubmissionValidationResult(is_valid=True)
