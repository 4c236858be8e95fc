from __future__ import annotations

from datetime import date
from typing import List, Optional

from src.analytics.account_health import RENEWAL_WINDOW_DAYS
from src.models.large_accounts import LargeAccountRecord
from src.schemas.large_accounts import (
    AccountHealthScore,
    AccountNotification,
    NotificationPriority,
    NotificationType,
)
from src.shared.time import now_utc

URGENT_RENEWAL_DAYS = 30
LOW_HEALTH_THRESHOLD = 70


def derive_account_notifications(
    account: LargeAccountRecord,
    health: AccountHealthScore,
    today: Optional[date] = None,
) -> List[AccountNotification]:
    current_day = today or now_utc().date()
    notifications: List[AccountNotification] = []

    if account.contract_end_date is not None:
        days_to_expiration = (account.contract_end_date - current_day).days
        if days_to_expiration <= RENEWAL_WINDOW_DAYS:
            notifications.append(
                AccountNotification(
                    type=NotificationType.CONTRACT_RENEWAL_DUE,
                    priority=(
                        NotificationPriority.HIGH
                        if days_to_expiration <= URGENT_RENEWAL_DAYS
                        else NotificationPriority.MEDIUM
                    ),
                    message=f"Contract expires in {days_to_expiration} days",
                    action_required=True,
                    due_date=account.contract_end_date,
                )
            )

    if health.overall_score < LOW_HEALTH_THRESHOLD:
        notifications.append(
            AccountNotification(
                type=NotificationType.ACCOUNT_HEALTH_LOW,
                priority=NotificationPriority.HIGH,
                message=f"Account health score is {health.overall_score}/100",
                action_required=True,
            )
        )
    return notifications
