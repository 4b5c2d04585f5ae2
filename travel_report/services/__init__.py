"""Service layer package.

Exports high-level services consumed by the CLI and other callers.
"""

from .report_service import ReportServiceConfig, TravelReportService, generate_report

__all__ = ["ReportServiceConfig", "TravelReportService", "generate_report"]
