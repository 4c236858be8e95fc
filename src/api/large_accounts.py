from __future__ import annotations

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_large_accounts_service
from src.schemas.large_accounts import (
    AccountHealthScore,
    AccountNotification,
    AccountPerformanceReport,
    LargeAccountStatistics,
    PerformanceReportFilters,
)
from src.services.large_accounts_service import LargeAccountsService
from src.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/large-accounts", tags=["large-accounts"])

SOURCE = "large_accounts,service_records"


def get_performance_report_filters(
    start_date: date = Query(...),
    end_date: date = Query(...),
) -> PerformanceReportFilters:
    return PerformanceReportFilters(start_date=start_date, end_date=end_date)


@router.get("/statistics")
def large_account_statistics(
    service: LargeAccountsService = Depends(get_large_accounts_service),
) -> ResponseEnvelope[LargeAccountStatistics]:
    data = service.get_account_statistics()
    return ResponseEnvelope(data=data, meta=build_meta("large_accounts", "now"))


@router.get("/{account_id}/health")
def account_health(
    account_id: str,
    service: LargeAccountsService = Depends(get_large_accounts_service),
) -> ResponseEnvelope[AccountHealthScore]:
    data = service.calculate_health_score(account_id)
    return ResponseEnvelope(data=data, meta=build_meta(SOURCE, "last_12_services"))


@router.get("/{account_id}/notifications")
def account_notifications(
    account_id: str,
    service: LargeAccountsService = Depends(get_large_accounts_service),
) -> ResponseEnvelope[List[AccountNotification]]:
    data = service.get_account_notifications(account_id)
    return ResponseEnvelope(data=data, meta=build_meta(SOURCE, "now"))


@router.get("/{account_id}/performance-report")
def account_performance_report(
    account_id: str,
    filters: PerformanceReportFilters = Depends(get_performance_report_filters),
    service: LargeAccountsService = Depends(get_large_accounts_service),
) -> ResponseEnvelope[AccountPerformanceReport]:
    data = service.generate_performance_report(account_id, filters.start_date, filters.end_date)
    return ResponseEnvelope(
        data=data,
        meta=build_meta(SOURCE, f"{filters.start_date.isoformat()}..{filters.end_date.isoformat()}"),
    )
