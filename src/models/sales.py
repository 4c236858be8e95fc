from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SaleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    sales_date: datetime
    net_amount: Decimal = Decimal("0")
    category: str
    employee_id: Optional[str] = None
    customer_id: Optional[str] = None
    store_id: Optional[str] = None
    invoice_number: Optional[str] = None


class SalesScope(BaseModel):
    """Tenant/store scope a caller may aggregate over.

    ``allowed_store_ids`` of ``None`` means unrestricted; an empty list means
    the caller may see no stores at all.
    """

    model_config = ConfigDict(frozen=True)

    store_id: Optional[str] = None
    allowed_store_ids: Optional[List[str]] = Field(default=None)

    @property
    def denies_all(self) -> bool:
        return self.store_id is None and self.allowed_store_ids is not None and not self.allowed_store_ids

    def cache_token(self) -> str:
        if self.store_id:
            return f"store:{self.store_id}"
        if self.allowed_store_ids is not None:
            return "stores:" + ",".join(sorted(self.allowed_store_ids))
        return "all"
