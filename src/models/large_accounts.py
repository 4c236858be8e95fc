from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class LargeAccountTier(str, Enum):
    PLATINUM = "PLATINUM"
    GOLD = "GOLD"
    SILVER = "SILVER"
    BRONZE = "BRONZE"


class ServiceLevel(str, Enum):
    PREMIUM = "PREMIUM"
    ENHANCED = "ENHANCED"
    STANDARD = "STANDARD"


class LargeAccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class LargeAccountType(str, Enum):
    FLEET = "FLEET"
    COMMERCIAL = "COMMERCIAL"
    GOVERNMENT = "GOVERNMENT"


class LargeAccountRecord(BaseModel):
    id: str
    customer_id: str
    account_type: LargeAccountType = LargeAccountType.COMMERCIAL
    tier: LargeAccountTier
    service_level: ServiceLevel = ServiceLevel.STANDARD
    status: LargeAccountStatus = LargeAccountStatus.ACTIVE
    annual_revenue: Optional[Decimal] = None
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    account_manager: Optional[str] = None


class ServiceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    customer_id: str
    service_date: datetime
    service_type: Optional[str] = None
    parts_cost: Optional[Decimal] = None
    labor_cost: Optional[Decimal] = None
    payment_status: Optional[str] = None

    @property
    def revenue(self) -> Decimal:
        return (self.parts_cost or Decimal("0")) + (self.labor_cost or Decimal("0"))
