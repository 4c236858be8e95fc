from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from src.shared.base import BaseSchema


class InsightKind(str, Enum):
    OPPORTUNITY = "OPPORTUNITY"
    CONCERN = "CONCERN"
    ACHIEVEMENT = "ACHIEVEMENT"


class Impact(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Trend(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    STABLE = "STABLE"


class SalesTrendPoint(BaseSchema):
    period: str
    value: Decimal
    change: Decimal
    change_percent: float


class Insight(BaseSchema):
    kind: InsightKind
    title: str
    description: str
    impact: Impact
    actionable: bool


class PerformanceMetric(BaseSchema):
    name: str
    value: Decimal
    target: Optional[Decimal] = None
    unit: str
    trend: Trend
