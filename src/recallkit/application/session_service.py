"""Study session bookkeeping: open a session, count answers, finalize once."""

import logging
from collections.abc import Sequence
from datetime import datetime

from recallkit.domain.constants import RECENT_SESSION_WINDOW
from recallkit.domain.errors import SessionNotFoundError
from recallkit.domain.models import StudySession
from recallkit.domain.ports import StorageRepository

from .card_service import generate_id
from .progress import accuracy_percent
from .utils.dates import utc_now

logger = logging.getLogger(__name__)


class SessionService:
    """
    Tracks one study session at a time.

    The session record is appended at ``start`` and written again exactly
    once at ``finish``; answers in between are only counted in memory.
    """

    def __init__(self, repo: StorageRepository):
        self._repo = repo
        self.session: StudySession | None = None
        self.cards_studied = 0
        self.correct_answers = 0

    @property
    def active(self) -> bool:
        return self.session is not None

    def start(self, now: datetime | None = None) -> StudySession:
        self.session = StudySession(id=generate_id(), start_time=now or utc_now())
        self.cards_studied = 0
        self.correct_answers = 0
        self._repo.append_session(self.session)
        logger.debug(f"Started session {self.session.id}")
        return self.session

    def record_answer(self, correct: bool) -> None:
        if self.session is None:
            raise RuntimeError("No active study session")
        self.cards_studied += 1
        if correct:
            self.correct_answers += 1

    def finish(self, now: datetime | None = None) -> StudySession:
        """
        Close the active session and persist its totals.

        Raises:
            RuntimeError: No session was started.
            SessionNotFoundError: The stored session disappeared.
        """
        if self.session is None:
            raise RuntimeError("No active study session")

        now = now or utc_now()
        total_time = (now - self.session.start_time).total_seconds()
        average = total_time / self.cards_studied if self.cards_studied > 0 else 0.0

        updated = self._repo.update_session(
            self.session.id,
            {
                "end_time": now,
                "cards_studied": self.cards_studied,
                "correct_answers": self.correct_answers,
                "total_time": total_time,
                "average_response_time": average,
            },
        )
        if updated is None:
            raise SessionNotFoundError(self.session.id)

        logger.info(
            f"Session {updated.id} finished: {updated.correct_answers}/{updated.cards_studied} "
            f"correct in {total_time:.0f}s"
        )
        self.session = None
        return updated


def recent_performance(
    sessions: Sequence[StudySession], count: int = RECENT_SESSION_WINDOW
) -> float:
    """Percent of correct answers over the last ``count`` sessions."""
    recent = list(sessions)[-count:]
    studied = sum(s.cards_studied for s in recent)
    correct = sum(s.correct_answers for s in recent)
    return accuracy_percent(correct, studied)
