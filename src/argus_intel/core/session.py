"""
The analysis session behind one dashboard.

``AnalysisSession`` selects the producer for the active target kind, awaits
it, and feeds the outcome to the state machine. Every failure of a producer,
of the reliability pass or of an upload ends up as a message in the matching
error slot; nothing raised by the generation service escapes a session call.
"""

import logging
import threading
from datetime import date
from typing import Any, Dict, Optional

from .config_loader import CONFIG
from .exceptions import GenerationError, InvalidSubjectError, MetadataDecodeError
from .gemini_client import ContentGenerator, GeminiClient
from .localization import Localizer
from .metadata import analyze_image_upload
from .producers import PRODUCERS, fetch_reliability_review
from .schemas import TargetKind
from .state import (
    DashboardState,
    Event,
    Reset,
    ReviewFailed,
    ReviewSettled,
    ReviewStarted,
    SearchFailed,
    SearchSettled,
    SearchStarted,
    TargetSelected,
    UploadFailed,
    UploadSettled,
    can_start_review,
    reduce,
)
from .views import PanelView, describe_panel

logger = logging.getLogger(__name__)


class AnalysisSession:
    """Holds the dashboard state and runs analyses against it."""

    def __init__(
        self,
        generator: Optional[ContentGenerator] = None,
        localizer: Optional[Localizer] = None,
        target: Optional[TargetKind] = None,
    ):
        self._generator = generator
        self.localizer = localizer if localizer is not None else Localizer()
        self._state = DashboardState(target=target or CONFIG.dashboard.default_target)
        self._lock = threading.Lock()

    @property
    def generator(self) -> ContentGenerator:
        if self._generator is None:
            self._generator = GeminiClient()
        return self._generator

    @property
    def state(self) -> DashboardState:
        return self._state

    def dispatch(self, event: Event) -> DashboardState:
        """Applies ``event`` and returns the new state."""
        with self._lock:
            self._state = reduce(self._state, event)
            return self._state

    def view(self) -> PanelView:
        return describe_panel(self._state, self.localizer.language)

    def select_target(self, target: TargetKind) -> DashboardState:
        """Changes the active target kind. The current result is left in place."""
        return self.dispatch(TargetSelected(target=target))

    async def search(
        self, subject: str, target: Optional[TargetKind] = None
    ) -> DashboardState:
        """
        Runs the primary analysis for ``subject``.

        Args:
            subject (str): A domain, IP address or email address.
            target (Optional[TargetKind]): Switches the active kind first, if given.

        Returns:
            DashboardState: The state after the call settled.

        Raises:
            InvalidSubjectError: If ``subject`` is blank. No call is made.
        """
        if not subject or not subject.strip():
            raise InvalidSubjectError(self.localizer.text("errors.blankSubject"))
        if target is not None:
            self.select_target(target)

        kind = self._state.target
        producer = PRODUCERS[kind]
        ticket = self.dispatch(SearchStarted(subject=subject)).primary.ticket
        logger.info(
            "Starting %s analysis for '%s' (ticket %d).", kind.value, subject, ticket
        )
        try:
            result = await producer(self.generator, subject)
        except GenerationError as e:
            return self.dispatch(SearchFailed(ticket=ticket, message=str(e)))
        logger.info("%s analysis for '%s' complete.", kind.value, subject)
        return self.dispatch(SearchSettled(ticket=ticket, result=result))

    def upload(self, file_name: str, data: bytes) -> DashboardState:
        """
        Analyzes an uploaded image, whatever the active target kind.

        A file that cannot be decoded leaves the current result untouched and
        sets the upload error.
        """
        try:
            record = analyze_image_upload(file_name, data)
        except MetadataDecodeError as e:
            return self.dispatch(UploadFailed(message=str(e)))
        return self.dispatch(UploadSettled(record=record))

    def can_run_reliability(self) -> bool:
        return can_start_review(self._state)

    async def run_reliability(self) -> DashboardState:
        """
        Runs the reliability pass on the current result.

        Does nothing unless the current result is settled, is not image
        metadata and has not been reviewed yet.
        """
        with self._lock:
            if not can_start_review(self._state):
                logger.warning("Reliability analysis requested but not available.")
                return self._state
            self._state = reduce(self._state, ReviewStarted())
            ticket = self._state.secondary.ticket
            result = self._state.primary.result

        try:
            review = await fetch_reliability_review(self.generator, result)
        except GenerationError as e:
            return self.dispatch(ReviewFailed(ticket=ticket, message=str(e)))
        return self.dispatch(ReviewSettled(ticket=ticket, review=review))

    def new_search(self) -> DashboardState:
        """Clears the result, the review and any error."""
        return self.dispatch(Reset())

    def set_language(self, language: str) -> None:
        self.localizer.set_language(language)

    def export_panel(self) -> Dict[str, Any]:
        """The current panel as a JSON-ready document."""
        return self.view().model_dump(mode="json", by_alias=True)

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        return f"argus_report_{(today or date.today()).isoformat()}.json"
