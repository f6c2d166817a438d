from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import ValidationError
from .lib.pkg import PackageManager
from .package_list import PackageList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    valid: PackageList
    invalid: PackageList


def package_exists(manager: PackageManager, name: str) -> bool:
    # Exact-name index hit first; the candidate query also covers names the
    # search misses (e.g. virtual packages with a single provider).
    if manager.query_exists(name):
        return True
    return manager.query_candidate(name) is not None


def validate(packages: PackageList, manager: PackageManager) -> ValidationResult:
    """Split packages into names the index can resolve and unknown ones. Read-only."""

    logger.info("Validating %d packages...", len(packages))
    valid = []
    invalid = []
    for entry in packages:
        (valid if package_exists(manager, entry.name) else invalid).append(entry)
    return ValidationResult(valid=PackageList(tuple(valid)), invalid=PackageList(tuple(invalid)))


def apply_missing_policy(result: ValidationResult, *, ignore_missing: bool = False) -> PackageList:
    if result.invalid:
        logger.warning("Invalid/unknown packages: %s", " ".join(result.invalid.names))
        if not ignore_missing:
            raise ValidationError(result.invalid.names)
        logger.info("Skipping invalid: %s", " ".join(result.invalid.names))
    return result.valid
