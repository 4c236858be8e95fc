from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from src.models.large_accounts import LargeAccountRecord, LargeAccountTier, ServiceLevel, ServiceRecord
from src.schemas.large_accounts import AccountHealthScore
from src.shared.time import as_utc, now_utc

DEFAULT_REVENUE_HEALTH = 85.0
DEFAULT_SERVICE_HEALTH = 50.0
PAYMENT_HEALTH = 90.0
RELATIONSHIP_BASE = 70.0
SERVICE_DECAY_PER_MONTH = 10.0
DAYS_PER_MONTH = 30
RENEWAL_WINDOW_DAYS = 90

RISK_REVENUE_BELOW_TARGET = "Revenue below target"
RISK_LOW_SERVICE_FREQUENCY = "Low service frequency"
RISK_RENEWAL_APPROACHING = "Contract renewal approaching"

TIER_BONUS = {LargeAccountTier.PLATINUM: 20.0, LargeAccountTier.GOLD: 10.0}
SERVICE_LEVEL_BONUS = {ServiceLevel.PREMIUM: 10.0, ServiceLevel.ENHANCED: 5.0}


def _clamp(value: float) -> float:
    return min(100.0, max(0.0, value))


def total_service_revenue(service_records: Iterable[ServiceRecord]) -> Decimal:
    return sum((record.revenue for record in service_records), Decimal("0"))


def calculate_revenue_health(
    service_records: Sequence[ServiceRecord], target_revenue: Optional[Decimal]
) -> float:
    if not target_revenue:
        return DEFAULT_REVENUE_HEALTH
    ratio = total_service_revenue(service_records) / target_revenue
    return _clamp(float(ratio * 100))


def calculate_service_health(
    service_records: Sequence[ServiceRecord], now: Optional[datetime] = None
) -> float:
    """Decay ten points per month since the oldest supplied record.

    Records arrive most-recent-first, so the oldest is the last one.
    """
    if not service_records:
        return DEFAULT_SERVICE_HEALTH
    current_time = as_utc(now or now_utc())
    oldest = as_utc(service_records[-1].service_date)
    months_elapsed = (current_time - oldest).total_seconds() / timedelta(days=DAYS_PER_MONTH).total_seconds()
    return _clamp(100.0 - months_elapsed * SERVICE_DECAY_PER_MONTH)


def calculate_payment_health(service_records: Sequence[ServiceRecord]) -> float:
    # No payment ledger is wired in yet.
    _ = service_records
    return PAYMENT_HEALTH


def calculate_relationship_health(account: LargeAccountRecord) -> float:
    score = RELATIONSHIP_BASE
    score += TIER_BONUS.get(account.tier, 0.0)
    score += SERVICE_LEVEL_BONUS.get(account.service_level, 0.0)
    return min(100.0, score)


def renewal_approaching(account: LargeAccountRecord, today: date) -> bool:
    if account.contract_end_date is None:
        return False
    return account.contract_end_date <= today + timedelta(days=RENEWAL_WINDOW_DAYS)


def identify_risk_factors(
    account: LargeAccountRecord,
    revenue_health: float,
    service_health: float,
    today: date,
) -> List[str]:
    risks: List[str] = []
    if revenue_health < 70:
        risks.append(RISK_REVENUE_BELOW_TARGET)
    if service_health < 60:
        risks.append(RISK_LOW_SERVICE_FREQUENCY)
    if renewal_approaching(account, today):
        risks.append(RISK_RENEWAL_APPROACHING)
    return risks


def generate_recommendations(risk_factors: Sequence[str]) -> List[str]:
    recommendations: List[str] = []
    if RISK_REVENUE_BELOW_TARGET in risk_factors:
        recommendations.append("Schedule account review meeting")
        recommendations.append("Explore additional service opportunities")
    if RISK_RENEWAL_APPROACHING in risk_factors:
        recommendations.append("Initiate contract renewal discussions")
        recommendations.append("Prepare renewal proposal")
    return recommendations


def score_account(
    account: LargeAccountRecord,
    service_records: Sequence[ServiceRecord],
    now: Optional[datetime] = None,
) -> AccountHealthScore:
    current_time = as_utc(now or now_utc())
    revenue_health = calculate_revenue_health(service_records, account.annual_revenue)
    service_health = calculate_service_health(service_records, current_time)
    payment_health = calculate_payment_health(service_records)
    relationship_health = calculate_relationship_health(account)

    mean_score = (revenue_health + service_health + payment_health + relationship_health) / 4
    # Half-up, not banker's rounding.
    overall_score = int(math.floor(mean_score + 0.5))

    risk_factors = identify_risk_factors(account, revenue_health, service_health, current_time.date())
    return AccountHealthScore(
        overall_score=overall_score,
        revenue_health=revenue_health,
        service_health=service_health,
        payment_health=payment_health,
        relationship_health=relationship_health,
        risk_factors=risk_factors,
        recommendations=generate_recommendations(risk_factors),
    )


def calculate_growth_rate(chronological_records: Sequence[ServiceRecord]) -> float:
    if len(chronological_records) < 2:
        return 0.0
    midpoint = len(chronological_records) // 2
    first_half = total_service_revenue(chronological_records[:midpoint])
    second_half = total_service_revenue(chronological_records[midpoint:])
    if not first_half:
        return 0.0
    return float((second_half - first_half) / first_half * 100)


def analyze_revenue_trends(chronological_records: Sequence[ServiceRecord]) -> List[str]:
    if len(chronological_records) <= 3:
        return []
    older_avg = total_service_revenue(chronological_records[:3]) / 3
    recent_avg = total_service_revenue(chronological_records[-3:]) / 3
    if recent_avg > older_avg * Decimal("1.1"):
        return ["Revenue trending upward"]
    if recent_avg < older_avg * Decimal("0.9"):
        return ["Revenue trending downward"]
    return ["Revenue stable"]


def business_recommendations(
    account: LargeAccountRecord, service_records: Sequence[ServiceRecord]
) -> List[str]:
    recommendations: List[str] = []
    if account.tier == LargeAccountTier.SILVER and len(service_records) > 10:
        recommendations.append("Consider upgrading to Gold tier")
    if not service_records:
        recommendations.append("No recent activity - schedule follow-up")
    return recommendations
