"""
Decides what the dashboard shows for a given state.

The result panel and the CLI renderer both consume a ``PanelView`` rather
than inspecting ``DashboardState`` themselves.
"""

from enum import Enum
from typing import Optional

from .schemas import AnalysisResult, ReliabilityReview, ResultKind, TargetKind, WireModel
from .state import DashboardState, PrimaryStatus, ReviewStatus


class PrimaryView(str, Enum):
    EMPTY = "EMPTY"
    LOADING = "LOADING"
    ERROR = "ERROR"
    RESULT = "RESULT"


class ReviewView(str, Enum):
    HIDDEN = "HIDDEN"
    OFFER = "OFFER"
    LOADING = "LOADING"
    ERROR = "ERROR"
    REVIEW = "REVIEW"


class PanelView(WireModel):
    language: str
    target: TargetKind
    primary: PrimaryView
    secondary: ReviewView
    subject: Optional[str] = None
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None
    review: Optional[ReliabilityReview] = None
    review_error: Optional[str] = None
    upload_error: Optional[str] = None
    can_submit: bool = True
    can_reset: bool = False
    can_export: bool = False


def _primary_view(state: DashboardState) -> PrimaryView:
    status = state.primary.status
    if status is PrimaryStatus.PENDING:
        return PrimaryView.LOADING
    if status is PrimaryStatus.FAILED:
        return PrimaryView.ERROR
    if status is PrimaryStatus.SETTLED and state.primary.result is not None:
        return PrimaryView.RESULT
    return PrimaryView.EMPTY


def _review_view(state: DashboardState, primary: PrimaryView) -> ReviewView:
    result = state.primary.result
    if primary is not PrimaryView.RESULT or result is None:
        return ReviewView.HIDDEN
    if result.kind == ResultKind.METADATA:
        return ReviewView.HIDDEN
    status = state.secondary.status
    if status is ReviewStatus.PENDING:
        return ReviewView.LOADING
    if status is ReviewStatus.FAILED:
        return ReviewView.ERROR
    if status is ReviewStatus.SETTLED:
        return ReviewView.REVIEW
    return ReviewView.OFFER


def describe_panel(state: DashboardState, language: str) -> PanelView:
    """Builds the view of the result panel for ``state``."""
    primary = _primary_view(state)
    loading = primary is PrimaryView.LOADING
    return PanelView(
        language=language,
        target=state.target,
        primary=primary,
        secondary=_review_view(state, primary),
        subject=state.primary.subject,
        result=state.primary.result if primary is PrimaryView.RESULT else None,
        error=state.primary.error if primary is PrimaryView.ERROR else None,
        review=state.secondary.review,
        review_error=state.secondary.error,
        upload_error=state.upload_error,
        can_submit=not loading,
        can_reset=primary in (PrimaryView.RESULT, PrimaryView.ERROR),
        can_export=primary is PrimaryView.RESULT,
    )
