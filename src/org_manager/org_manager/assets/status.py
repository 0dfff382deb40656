from __future__ import annotations

from typing import Optional

from ..core.constants import ASSET_CODE_PADDING, ASSET_CODE_PREFIX
from ..core.enums import HOLD_STATUSES, AssetStatus
from ..core.exceptions import ValidationError


def derive_asset_status(quantity: int, quantity_assigned: int, override: Optional[AssetStatus] = None) -> AssetStatus:
    """Single source of truth for an asset's status.

    A manual hold (Under Repair / Damaged / Retired) wins. Otherwise the asset
    is Assigned while any unit is out and Available when none are; partial
    and full allocation both read Assigned.
    """
    if quantity_assigned < 0 or quantity_assigned > quantity:
        raise ValidationError(
            f"Assigned quantity {quantity_assigned} is outside 0..{quantity}"
        )
    if override is not None:
        if override not in HOLD_STATUSES:
            raise ValidationError(f"{override.value} is derived from quantities and cannot be forced")
        return override
    return AssetStatus.ASSIGNED if quantity_assigned > 0 else AssetStatus.AVAILABLE


def hold_of(status: AssetStatus) -> Optional[AssetStatus]:
    """The manual hold carried by a stored status, if any."""
    return status if status in HOLD_STATUSES else None


def format_asset_code(sequence: int) -> str:
    return f"{ASSET_CODE_PREFIX}{int(sequence):0{ASSET_CODE_PADDING}d}"
