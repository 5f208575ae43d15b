"""
Dashboard state machine.

The dashboard holds two stages. The primary stage produces the current
``AnalysisResult``; the secondary (reliability) stage critiques it. Both are
immutable values and change only through ``reduce``, which enforces:

* a new search, a new upload or a reset replaces the primary result and
  returns the reliability stage to ``UNSTARTED``;
* the reliability stage can start only from ``UNSTARTED`` against a settled,
  non-metadata result;
* every result-changing event takes a new ticket, and settle events carrying
  an older ticket are discarded, so only the most recently started call can
  land in the dashboard.
"""

import logging
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import assert_never

from .schemas import (
    AnalysisResult,
    MetadataRecord,
    MetadataResult,
    ReliabilityReview,
    ResultKind,
    TargetKind,
)

logger = logging.getLogger(__name__)


class PrimaryStatus(str, Enum):
    IDLE = "IDLE"
    PENDING = "PENDING"
    SETTLED = "SETTLED"
    FAILED = "FAILED"


class ReviewStatus(str, Enum):
    UNSTARTED = "UNSTARTED"
    PENDING = "PENDING"
    SETTLED = "SETTLED"
    FAILED = "FAILED"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class PrimaryStage(FrozenModel):
    status: PrimaryStatus = PrimaryStatus.IDLE
    ticket: int = 0
    subject: Optional[str] = None
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None


class ReviewStage(FrozenModel):
    status: ReviewStatus = ReviewStatus.UNSTARTED
    # Ticket of the primary result this review belongs to.
    ticket: int = 0
    review: Optional[ReliabilityReview] = None
    error: Optional[str] = None


class DashboardState(FrozenModel):
    target: TargetKind = TargetKind.DOMAIN
    primary: PrimaryStage = Field(default_factory=PrimaryStage)
    secondary: ReviewStage = Field(default_factory=ReviewStage)
    upload_error: Optional[str] = None


# --- Events ---


class TargetSelected(FrozenModel):
    target: TargetKind


class SearchStarted(FrozenModel):
    subject: str


class SearchSettled(FrozenModel):
    ticket: int
    result: AnalysisResult


class SearchFailed(FrozenModel):
    ticket: int
    message: str


class UploadSettled(FrozenModel):
    record: MetadataRecord


class UploadFailed(FrozenModel):
    message: str


class ReviewStarted(FrozenModel):
    pass


class ReviewSettled(FrozenModel):
    ticket: int
    review: ReliabilityReview


class ReviewFailed(FrozenModel):
    ticket: int
    message: str


class Reset(FrozenModel):
    pass


Event = Union[
    TargetSelected,
    SearchStarted,
    SearchSettled,
    SearchFailed,
    UploadSettled,
    UploadFailed,
    ReviewStarted,
    ReviewSettled,
    ReviewFailed,
    Reset,
]


def can_start_review(state: DashboardState) -> bool:
    """Whether the reliability pass may be started from this state."""
    result = state.primary.result
    return (
        state.primary.status is PrimaryStatus.SETTLED
        and result is not None
        and result.kind != ResultKind.METADATA
        and state.secondary.status is ReviewStatus.UNSTARTED
    )


def _replace_primary(state: DashboardState, primary: PrimaryStage) -> DashboardState:
    return state.model_copy(
        update={
            "primary": primary,
            "secondary": ReviewStage(ticket=primary.ticket),
            "upload_error": None,
        }
    )


def _is_stale(state: DashboardState, ticket: int) -> bool:
    return ticket != state.primary.ticket


def reduce(state: DashboardState, event: Event) -> DashboardState:
    """
    Applies one event to the dashboard state.

    Args:
        state (DashboardState): The current state.
        event (Event): What happened.

    Returns:
        DashboardState: The next state. Illegal or stale events return ``state``
        unchanged.
    """
    primary = state.primary
    secondary = state.secondary

    if isinstance(event, TargetSelected):
        return state.model_copy(update={"target": event.target})

    if isinstance(event, SearchStarted):
        return _replace_primary(
            state,
            PrimaryStage(
                status=PrimaryStatus.PENDING,
                ticket=primary.ticket + 1,
                subject=event.subject,
            ),
        )

    if isinstance(event, SearchSettled):
        if _is_stale(state, event.ticket) or primary.status is not PrimaryStatus.PENDING:
            logger.info("Discarding superseded search result (ticket %d).", event.ticket)
            return state
        return state.model_copy(
            update={
                "primary": primary.model_copy(
                    update={"status": PrimaryStatus.SETTLED, "result": event.result}
                )
            }
        )

    if isinstance(event, SearchFailed):
        if _is_stale(state, event.ticket) or primary.status is not PrimaryStatus.PENDING:
            logger.info("Discarding superseded search error (ticket %d).", event.ticket)
            return state
        return state.model_copy(
            update={
                "primary": primary.model_copy(
                    update={
                        "status": PrimaryStatus.FAILED,
                        "result": None,
                        "error": event.message,
                    }
                )
            }
        )

    if isinstance(event, UploadSettled):
        return _replace_primary(
            state,
            PrimaryStage(
                status=PrimaryStatus.SETTLED,
                ticket=primary.ticket + 1,
                subject=event.record.file_name,
                result=MetadataResult(data=event.record),
            ),
        )

    if isinstance(event, UploadFailed):
        # The previous result, if any, stays on screen.
        return state.model_copy(update={"upload_error": event.message})

    if isinstance(event, ReviewStarted):
        if not can_start_review(state):
            logger.warning(
                "Reliability analysis is not available (primary=%s, reliability=%s).",
                primary.status.value,
                secondary.status.value,
            )
            return state
        return state.model_copy(
            update={
                "secondary": ReviewStage(
                    status=ReviewStatus.PENDING, ticket=primary.ticket
                )
            }
        )

    if isinstance(event, ReviewSettled):
        if _is_stale(state, event.ticket) or secondary.status is not ReviewStatus.PENDING:
            logger.info("Discarding reliability review for a replaced result.")
            return state
        return state.model_copy(
            update={
                "secondary": secondary.model_copy(
                    update={"status": ReviewStatus.SETTLED, "review": event.review}
                )
            }
        )

    if isinstance(event, ReviewFailed):
        if _is_stale(state, event.ticket) or secondary.status is not ReviewStatus.PENDING:
            logger.info("Discarding reliability error for a replaced result.")
            return state
        return state.model_copy(
            update={
                "secondary": secondary.model_copy(
                    update={
                        "status": ReviewStatus.FAILED,
                        "review": None,
                        "error": event.message,
                    }
                )
            }
        )

    if isinstance(event, Reset):
        return _replace_primary(state, PrimaryStage(ticket=primary.ticket + 1))

    assert_never(event)
