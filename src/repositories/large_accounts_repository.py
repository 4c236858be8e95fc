from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from src.core.supabase import SupabaseClient
from src.models.large_accounts import LargeAccountRecord, LargeAccountStatus, ServiceRecord

ACCOUNT_COLUMNS = (
    "id,customer_id,account_type,tier,service_level,status,annual_revenue,"
    "contract_start_date,contract_end_date,account_manager"
)
SERVICE_RECORD_COLUMNS = "id,customer_id,service_date,service_type,parts_cost,labor_cost,payment_status"


class LargeAccountsRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_account(self, account_id: str) -> Optional[LargeAccountRecord]:
        rows, _ = self.client.select(
            table="large_accounts",
            select=ACCOUNT_COLUMNS,
            filters=[("id", f"eq.{account_id}")],
            limit=1,
        )
        if not rows:
            return None
        return LargeAccountRecord.model_validate(rows[0])

    def list_service_records(
        self,
        customer_id: str,
        limit: Optional[int] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[ServiceRecord]:
        """Service history for one customer, most recent first."""
        filters: List[Tuple[str, str]] = [("customer_id", f"eq.{customer_id}")]
        if start_date:
            filters.append(("service_date", f"gte.{start_date.isoformat()}"))
        if end_date:
            filters.append(("service_date", f"lte.{end_date.isoformat()}"))
        if limit is None:
            rows = self.client.select_all(
                table="service_records",
                select=SERVICE_RECORD_COLUMNS,
                filters=filters,
                order="service_date.desc",
            )
        else:
            rows, _ = self.client.select(
                table="service_records",
                select=SERVICE_RECORD_COLUMNS,
                filters=filters,
                limit=limit,
                order="service_date.desc",
            )
        return [ServiceRecord.model_validate(row) for row in rows]

    def count_accounts(self, status: Optional[LargeAccountStatus] = None) -> int:
        filters: List[Tuple[str, str]] = []
        if status is not None:
            filters.append(("status", f"eq.{status.value}"))
        return self.client.count("large_accounts", filters)
