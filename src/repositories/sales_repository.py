from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from src.core.supabase import SupabaseClient
from src.models.sales import SaleRecord, SalesScope

SALE_COLUMNS = "id,sales_date,net_amount,category,employee_id,customer_id,store_id,invoice_number"


class SalesRepository:
    """Reads ``sales_data`` rows.

    Every list method returns records ordered most-recent-first
    (``sales_date.desc``); the analytics ``recent_sales`` slice relies on it.
    """

    def __init__(self) -> None:
        self.client = SupabaseClient()

    def list_sale_records(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        scope: Optional[SalesScope] = None,
    ) -> List[SaleRecord]:
        filters = self._build_filters(start_date, end_date, scope)
        rows = self.client.select_all(
            table="sales_data",
            select=SALE_COLUMNS,
            filters=filters,
            order="sales_date.desc",
        )
        return [SaleRecord.model_validate(row) for row in rows]

    @staticmethod
    def _build_filters(
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        scope: Optional[SalesScope],
    ) -> List[Tuple[str, str]]:
        filters: List[Tuple[str, str]] = []
        if start_date:
            filters.append(("sales_date", f"gte.{start_date.isoformat()}"))
        if end_date:
            filters.append(("sales_date", f"lte.{end_date.isoformat()}"))
        if scope is not None:
            if scope.store_id:
                filters.append(("store_id", f"eq.{scope.store_id}"))
            elif scope.allowed_store_ids:
                filters.append(("store_id", f"in.({','.join(scope.allowed_store_ids)})"))
        return filters
