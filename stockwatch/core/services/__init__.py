"""
Core business logic services.

Layer-pure services that depend only on:
- stockwatch/core/entities/*
- stockwatch/core/interfaces/*
- stockwatch/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockwatch.core.services.alert_engine import AlertEngine
from stockwatch.core.services.alert_sinks import (
    AlertNotification,
    AlertSink,
    LoggingAlertSink,
    RecentAlertsFeed,
)
from stockwatch.core.services.monitoring_loop import MonitoringHandle, MonitoringLoop
from stockwatch.core.services.reorder_planner import (
    REORDER_TARGET_MULTIPLIER,
    AutoReorderPlanner,
    ConfirmationBatch,
    ConfirmationResult,
    generate_po_number,
    suggested_quantity,
)

__all__ = [
    # Alerts
    "AlertEngine",
    "AlertNotification",
    "AlertSink",
    "LoggingAlertSink",
    "RecentAlertsFeed",
    # Monitoring
    "MonitoringHandle",
    "MonitoringLoop",
    # Reorder
    "REORDER_TARGET_MULTIPLIER",
    "AutoReorderPlanner",
    "ConfirmationBatch",
    "ConfirmationResult",
    "generate_po_number",
    "suggested_quantity",
]
