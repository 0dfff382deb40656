from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AssetCategory, AssetStatus
from .model import Asset, AssetAssignment, AssetDraft, AssetWrite, AssignmentClosing, NewAssignment


class AssetRepository(Protocol):
    # Asset records
    def get(self, asset_id: int) -> Optional[Asset]:
        raise NotImplementedError

    def list_assets(
        self,
        *,
        status: Optional[AssetStatus] = None,
        category: Optional[AssetCategory] = None,
        search: Optional[str] = None,
        limit: Optional[int] = 500,
    ) -> Sequence[Asset]:
        """Active assets only, newest first. `search` matches code or name."""

        raise NotImplementedError

    def create(self, draft: AssetDraft, *, created_by: int) -> int:
        """Insert and stamp the generated asset code in the same transaction."""

        raise NotImplementedError

    def create_many(self, drafts: Sequence[AssetDraft], *, created_by: int) -> Sequence[int]:
        """All-or-nothing insert of several assets."""

        raise NotImplementedError

    def update(self, asset_id: int, *, changes: dict, expected_version: int, modified_by: int) -> bool:
        """Apply column changes if the version is unchanged; bumps the version."""

        raise NotImplementedError

    def soft_delete(self, asset_id: int, *, modified_by: int) -> bool:
        raise NotImplementedError

    # Assignment ledger
    def get_assignment(self, assignment_id: int) -> Optional[AssetAssignment]:
        raise NotImplementedError

    def assign(self, write: AssetWrite, assignment: NewAssignment) -> Optional[int]:
        """Apply the asset write and insert the Active assignment atomically.

        Returns the new assignment id, or None when the asset version moved.
        """

        raise NotImplementedError

    def close_assignment(self, write: AssetWrite, *, assignment_id: int, closing: AssignmentClosing) -> bool:
        """Close an Active assignment and apply the asset write atomically.

        False when the assignment is no longer Active or the asset version moved.
        """

        raise NotImplementedError

    def list_history(self, asset_id: int) -> Sequence[AssetAssignment]:
        """All assignments of an asset, newest first."""

        raise NotImplementedError

    def list_active_assignments(self, *, employee_id: Optional[int] = None) -> Sequence[AssetAssignment]:
        raise NotImplementedError
