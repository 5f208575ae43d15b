import unittest

from pydantic import ValidationError

from argus_intel.core.schemas import (
    MetadataRecord,
    ReliabilityReview,
    TargetKind,
    WhoisRecord,
    WhoisResult,
)
from argus_intel.core.state import (
    DashboardState,
    PrimaryStatus,
    Reset,
    ReviewFailed,
    ReviewSettled,
    ReviewStarted,
    ReviewStatus,
    SearchFailed,
    SearchSettled,
    SearchStarted,
    TargetSelected,
    UploadFailed,
    UploadSettled,
    can_start_review,
    reduce,
)


def _whois(domain: str) -> WhoisResult:
    return WhoisResult(
        data=WhoisRecord(
            domain_name=domain,
            registrar="IANA",
            creation_date="1995-08-14",
            expiry_date="2025-08-13",
            updated_date="2024-08-14",
            name_servers=["a.iana-servers.net"],
        )
    )


REVIEW = ReliabilityReview.model_validate(
    {"reliability": "Medium", "summary": "Mostly consistent.", "findings": []}
)
RECORD = MetadataRecord(file_name="photo.png", file_size="1.00 KB")


def _run(*events, state=None):
    state = state or DashboardState()
    for event in events:
        state = reduce(state, event)
    return state


class TestReduce(unittest.TestCase):
    """Test cases for the dashboard state machine."""

    def test_initial_state(self):
        state = DashboardState()
        self.assertIs(state.primary.status, PrimaryStatus.IDLE)
        self.assertIs(state.secondary.status, ReviewStatus.UNSTARTED)
        self.assertIs(state.target, TargetKind.DOMAIN)
        self.assertFalse(can_start_review(state))

    def test_search_lifecycle(self):
        state = _run(SearchStarted(subject="example.com"))
        self.assertIs(state.primary.status, PrimaryStatus.PENDING)
        self.assertEqual(state.primary.ticket, 1)
        self.assertEqual(state.primary.subject, "example.com")

        state = reduce(state, SearchSettled(ticket=1, result=_whois("example.com")))
        self.assertIs(state.primary.status, PrimaryStatus.SETTLED)
        self.assertEqual(state.primary.result.data.domain_name, "example.com")
        self.assertTrue(can_start_review(state))

    def test_search_failure(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchFailed(ticket=1, message="Failed to fetch WHOIS data."),
        )
        self.assertIs(state.primary.status, PrimaryStatus.FAILED)
        self.assertIsNone(state.primary.result)
        self.assertEqual(state.primary.error, "Failed to fetch WHOIS data.")
        self.assertFalse(can_start_review(state))

    def test_last_started_search_wins(self):
        state = _run(SearchStarted(subject="first.com"), SearchStarted(subject="second.com"))
        state = reduce(state, SearchSettled(ticket=2, result=_whois("second.com")))
        state = reduce(state, SearchSettled(ticket=1, result=_whois("first.com")))
        self.assertEqual(state.primary.result.data.domain_name, "second.com")

        state = reduce(state, SearchFailed(ticket=1, message="late failure"))
        self.assertIs(state.primary.status, PrimaryStatus.SETTLED)

    def test_stale_result_does_not_settle_pending_search(self):
        state = _run(SearchStarted(subject="first.com"), SearchStarted(subject="second.com"))
        state = reduce(state, SearchSettled(ticket=1, result=_whois("first.com")))
        self.assertIs(state.primary.status, PrimaryStatus.PENDING)
        self.assertEqual(state.primary.subject, "second.com")

    def test_review_lifecycle(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            ReviewStarted(),
        )
        self.assertIs(state.secondary.status, ReviewStatus.PENDING)
        self.assertFalse(can_start_review(state))

        settled = reduce(state, ReviewSettled(ticket=1, review=REVIEW))
        self.assertIs(settled.secondary.status, ReviewStatus.SETTLED)
        self.assertEqual(settled.secondary.review, REVIEW)

        failed = reduce(state, ReviewFailed(ticket=1, message="nope"))
        self.assertIs(failed.secondary.status, ReviewStatus.FAILED)
        self.assertEqual(failed.secondary.error, "nope")

    def test_review_cannot_start_twice(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            ReviewStarted(),
            ReviewSettled(ticket=1, review=REVIEW),
        )
        self.assertIs(reduce(state, ReviewStarted()), state)

    def test_new_search_resets_review(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            ReviewStarted(),
            ReviewSettled(ticket=1, review=REVIEW),
            SearchStarted(subject="other.com"),
        )
        self.assertIs(state.secondary.status, ReviewStatus.UNSTARTED)
        self.assertIsNone(state.secondary.review)

    def test_review_for_replaced_result_is_discarded(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            ReviewStarted(),
            SearchStarted(subject="other.com"),
        )
        after = reduce(state, ReviewSettled(ticket=1, review=REVIEW))
        self.assertIs(after, state)
        self.assertIs(after.secondary.status, ReviewStatus.UNSTARTED)

    def test_upload_replaces_result_and_blocks_review(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            ReviewStarted(),
            UploadSettled(record=RECORD),
        )
        self.assertIs(state.primary.status, PrimaryStatus.SETTLED)
        self.assertEqual(state.primary.result.kind, "METADATA")
        self.assertEqual(state.primary.subject, "photo.png")
        self.assertIs(state.secondary.status, ReviewStatus.UNSTARTED)
        self.assertFalse(can_start_review(state))
        self.assertIs(reduce(state, ReviewStarted()), state)

    def test_upload_supersedes_pending_search(self):
        state = _run(SearchStarted(subject="example.com"), UploadSettled(record=RECORD))
        state = reduce(state, SearchSettled(ticket=1, result=_whois("example.com")))
        self.assertEqual(state.primary.result.kind, "METADATA")

    def test_upload_failure_keeps_previous_result(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            UploadFailed(message="Could not process image: bad header"),
        )
        self.assertIs(state.primary.status, PrimaryStatus.SETTLED)
        self.assertEqual(state.primary.result.data.domain_name, "example.com")
        self.assertEqual(state.upload_error, "Could not process image: bad header")

        state = reduce(state, SearchStarted(subject="other.com"))
        self.assertIsNone(state.upload_error)

    def test_reset(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            ReviewStarted(),
            Reset(),
        )
        self.assertIs(state.primary.status, PrimaryStatus.IDLE)
        self.assertIsNone(state.primary.result)
        self.assertIsNone(state.primary.subject)
        self.assertIs(state.secondary.status, ReviewStatus.UNSTARTED)

        late = reduce(state, ReviewSettled(ticket=1, review=REVIEW))
        self.assertIs(late, state)

    def test_target_selection_keeps_result(self):
        state = _run(
            SearchStarted(subject="example.com"),
            SearchSettled(ticket=1, result=_whois("example.com")),
            TargetSelected(target=TargetKind.EMAIL),
        )
        self.assertIs(state.target, TargetKind.EMAIL)
        self.assertEqual(state.primary.result.data.domain_name, "example.com")

    def test_state_is_immutable(self):
        state = DashboardState()
        with self.assertRaises(ValidationError):
            state.target = TargetKind.IP
        reduce(state, SearchStarted(subject="example.com"))
        self.assertIs(state.primary.status, PrimaryStatus.IDLE)


if __name__ == "__main__":
    unittest.main()
