from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field

from src.models.large_accounts import LargeAccountStatus, LargeAccountTier, LargeAccountType
from src.shared.base import BaseSchema


class NotificationType(str, Enum):
    CONTRACT_RENEWAL_DUE = "CONTRACT_RENEWAL_DUE"
    ACCOUNT_HEALTH_LOW = "ACCOUNT_HEALTH_LOW"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AccountHealthScore(BaseSchema):
    overall_score: int = Field(..., ge=0, le=100)
    revenue_health: float = Field(..., ge=0.0, le=100.0)
    service_health: float = Field(..., ge=0.0, le=100.0)
    payment_health: float = Field(..., ge=0.0, le=100.0)
    relationship_health: float = Field(..., ge=0.0, le=100.0)
    risk_factors: List[str]
    recommendations: List[str]


class AccountNotification(BaseSchema):
    type: NotificationType
    priority: NotificationPriority
    message: str
    action_required: bool = True
    due_date: Optional[date] = None


class AccountSummary(BaseSchema):
    id: str
    customer_id: str
    tier: LargeAccountTier
    account_type: LargeAccountType
    status: LargeAccountStatus


class RevenueMetrics(BaseSchema):
    total_revenue: Decimal
    average_transaction_value: Decimal
    revenue_growth_rate: float


class ServiceMetrics(BaseSchema):
    total_services: int
    average_service_value: Decimal


class TrendAnalysis(BaseSchema):
    period_start: date
    period_end: date
    trends: List[str]


class AccountPerformanceReport(BaseSchema):
    account_summary: AccountSummary
    revenue_metrics: RevenueMetrics
    service_metrics: ServiceMetrics
    trend_analysis: TrendAnalysis
    recommendations: List[str]


class PerformanceReportFilters(BaseSchema):
    start_date: date
    end_date: date


class LargeAccountStatistics(BaseSchema):
    total: int
    active: int
    inactive: int
