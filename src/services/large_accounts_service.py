from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import List, Optional

from src.analytics.account_health import (
    analyze_revenue_trends,
    business_recommendations,
    calculate_growth_rate,
    score_account,
    total_service_revenue,
)
from src.analytics.account_notifications import derive_account_notifications
from src.core.errors import NotFoundError
from src.models.large_accounts import LargeAccountRecord, LargeAccountStatus
from src.repositories.large_accounts_repository import LargeAccountsRepository
from src.schemas.large_accounts import (
    AccountHealthScore,
    AccountNotification,
    AccountPerformanceReport,
    AccountSummary,
    LargeAccountStatistics,
    RevenueMetrics,
    ServiceMetrics,
    TrendAnalysis,
)
from src.shared.time import now_utc, validate_day_range

HEALTH_HISTORY_LIMIT = 12


class LargeAccountsService:
    def __init__(self, repository: LargeAccountsRepository, max_workers: int = 2) -> None:
        self.repository = repository
        self.max_workers = max(max_workers, 1)

    def calculate_health_score(
        self, account_id: str, now: Optional[datetime] = None
    ) -> AccountHealthScore:
        account = self._get_account(account_id)
        return self._score(account, now or now_utc())

    def get_account_notifications(
        self, account_id: str, now: Optional[datetime] = None
    ) -> List[AccountNotification]:
        current_time = now or now_utc()
        account = self._get_account(account_id)
        health = self._score(account, current_time)
        return derive_account_notifications(account, health, current_time.date())

    def generate_performance_report(
        self, account_id: str, start_date: date, end_date: date
    ) -> AccountPerformanceReport:
        validate_day_range(start_date, end_date)
        account = self._get_account(account_id)
        records = self.repository.list_service_records(
            account.customer_id,
            start_date=datetime.combine(start_date, time.min, tzinfo=timezone.utc),
            end_date=datetime.combine(end_date, time.max, tzinfo=timezone.utc),
        )
        chronological = list(reversed(records))

        total_revenue = total_service_revenue(chronological)
        total_services = len(chronological)
        average_value = total_revenue / total_services if total_services else Decimal("0")
        return AccountPerformanceReport(
            account_summary=AccountSummary(
                id=account.id,
                customer_id=account.customer_id,
                tier=account.tier,
                account_type=account.account_type,
                status=account.status,
            ),
            revenue_metrics=RevenueMetrics(
                total_revenue=total_revenue,
                average_transaction_value=average_value,
                revenue_growth_rate=calculate_growth_rate(chronological),
            ),
            service_metrics=ServiceMetrics(
                total_services=total_services,
                average_service_value=average_value,
            ),
            trend_analysis=TrendAnalysis(
                period_start=start_date,
                period_end=end_date,
                trends=analyze_revenue_trends(chronological),
            ),
            recommendations=business_recommendations(account, chronological),
        )

    def get_account_statistics(self) -> LargeAccountStatistics:
        # Both counts are independent reads against the record store.
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            total_future = executor.submit(self.repository.count_accounts)
            active_future = executor.submit(self.repository.count_accounts, LargeAccountStatus.ACTIVE)
            total = total_future.result()
            active = active_future.result()
        return LargeAccountStatistics(total=total, active=active, inactive=total - active)

    def _get_account(self, account_id: str) -> LargeAccountRecord:
        account = self.repository.get_account(account_id)
        if not account:
            raise NotFoundError("Large account not found")
        return account

    def _score(self, account: LargeAccountRecord, now: datetime) -> AccountHealthScore:
        records = self.repository.list_service_records(account.customer_id, limit=HEALTH_HISTORY_LIMIT)
        return score_account(account, records, now)
