from __future__ import annotations

from collections import Counter, defaultdict

from ..core.enums import AssetStatus
from ..employees.repository import EmployeeRepository
from .repository import AssetRepository

TOP_HOLDERS_LIMIT = 10


class AssetAnalyticsService:
    """Read-only aggregates over active assets and the assignment ledger."""

    def __init__(self, assets: AssetRepository, employees: EmployeeRepository):
        self._assets = assets
        self._employees = employees

    def stats(self) -> dict:
        assets = self._assets.list_assets(limit=None)
        by_status = Counter(a.status for a in assets)
        by_category = Counter(a.category.value for a in assets)

        return {
            "totalAssets": len(assets),
            "available": by_status[AssetStatus.AVAILABLE],
            "assigned": by_status[AssetStatus.ASSIGNED],
            "underRepair": by_status[AssetStatus.UNDER_REPAIR],
            "damaged": by_status[AssetStatus.DAMAGED],
            "retired": by_status[AssetStatus.RETIRED],
            "categoryBreakdown": [
                {"category": category, "count": count} for category, count in by_category.most_common()
            ],
            "statusBreakdown": [
                {"status": status.value, "count": count} for status, count in sorted(by_status.items(), key=lambda kv: kv[0].value)
            ],
        }

    def detailed(self) -> dict:
        assets = self._assets.list_assets(limit=None)
        active_ids = {a.asset_id for a in assets}

        categories: dict[str, dict] = {}
        for a in assets:
            row = categories.setdefault(
                a.category.value,
                {"category": a.category.value, "count": 0, "units": 0, "assigned": 0, "available": 0},
            )
            row["count"] += 1
            row["units"] += a.quantity
            row["assigned"] += a.quantity_assigned
            row["available"] += a.available

        total_units = sum(a.quantity for a in assets)
        assigned_units = sum(a.quantity_assigned for a in assets)
        utilization = round(assigned_units * 100.0 / total_units, 2) if total_units else 0.0

        per_employee: dict[int, int] = defaultdict(int)
        per_room: dict[str, int] = defaultdict(int)
        for assignment in self._assets.list_active_assignments():
            if assignment.asset_id not in active_ids:
                continue
            if assignment.employee_id is not None:
                per_employee[int(assignment.employee_id)] += assignment.quantity
            elif assignment.room:
                per_room[assignment.room] += assignment.quantity

        ranked = sorted(per_employee.items(), key=lambda kv: (-kv[1], kv[0]))[:TOP_HOLDERS_LIMIT]
        employees = self._employees.get_many(eid for eid, _ in ranked)
        top_holders = []
        for eid, units in ranked:
            e = employees.get(eid)
            top_holders.append(
                {
                    "employeeId": eid,
                    "name": e.name if e else None,
                    "employeeCode": e.employee_code if e else None,
                    "department": e.department if e else None,
                    "units": units,
                }
            )

        return {
            "totalAssets": len(assets),
            "totalUnits": total_units,
            "assignedUnits": assigned_units,
            "availableUnits": total_units - assigned_units,
            "utilizationRate": utilization,
            "categories": sorted(categories.values(), key=lambda r: (-r["units"], r["category"])),
            "conditionBreakdown": [
                {"condition": condition, "count": count}
                for condition, count in Counter(a.condition.value for a in assets).most_common()
            ],
            "topHolders": top_holders,
            "roomHoldings": [
                {"room": room, "units": units} for room, units in sorted(per_room.items(), key=lambda kv: (-kv[1], kv[0]))
            ],
        }
