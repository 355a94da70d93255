"""Period summary package."""

from church_office.queries.summary import PeriodSummary, PeriodSummaryBuilder, SummaryError

__all__ = ["PeriodSummary", "PeriodSummaryBuilder", "SummaryError"]
