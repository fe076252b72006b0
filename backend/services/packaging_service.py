"""
Packaging Service — wrapping rules per package kind.

Each package kind has:
  - a weight ceiling in kilograms (exclusive, None = unlimited)
  - a wrapping cost added to the declared order cost
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from domain.enums import PackageKind
from domain.errors import InvalidPackageError, WeightExceededError


@dataclass(frozen=True)
class PackagePolicy:
    kind: PackageKind
    weight_ceiling: Optional[Decimal]
    cost: int

    def validate_weight(self, weight: Decimal) -> None:
        """Raise WeightExceededError when ``weight`` reaches the ceiling."""
        if self.weight_ceiling is not None and weight >= self.weight_ceiling:
            raise WeightExceededError(self.kind.value, weight, self.weight_ceiling)


PACKAGE_POLICIES = {
    PackageKind.BAG: PackagePolicy(PackageKind.BAG, weight_ceiling=Decimal("10"), cost=5),
    PackageKind.BOX: PackagePolicy(PackageKind.BOX, weight_ceiling=Decimal("30"), cost=20),
    PackageKind.WRAP: PackagePolicy(PackageKind.WRAP, weight_ceiling=None, cost=1),
}


def resolve(kind) -> PackagePolicy:
    """
    Look up the packaging policy for a package kind.

    Accepts a PackageKind or its string value (case-insensitive).
    Raises InvalidPackageError for unknown kinds.
    """
    try:
        package_kind = PackageKind(kind.strip().lower() if isinstance(kind, str) else kind)
    except (ValueError, AttributeError):
        raise InvalidPackageError(kind)
    return PACKAGE_POLICIES[package_kind]
