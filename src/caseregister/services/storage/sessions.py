"""
Case session store.

``SessionStore`` keeps the list of named cases, the active-case pointer,
the editable working transcript and the flat transcription history.
Every mutation immediately writes the case list, the active id and the
history back to ``LocalStorage`` under the same keys as browser ``localStorage``:
``caseSessions``, ``activeCaseId`` and ``transcriptionHistory``.
Cases are never deleted here.
"""

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from caseregister.core.exceptions import CaseNotFoundError
from caseregister.core.models import CaseSession, TranscriptSegment
from caseregister.services.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

HISTORY_KEY = "transcriptionHistory"
CASES_KEY = "caseSessions"
ACTIVE_CASE_KEY = "activeCaseId"

SEGMENT_SEPARATOR = "\n\n"
BACKUP_SUFFIX = ".unreadable"

_HISTORY = TypeAdapter(list[str])


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _join(transcript: str, text: str) -> str:
    return f"{transcript}{SEGMENT_SEPARATOR}{text}" if transcript else text


class SessionStore:
    """Case records and working transcript persisted through ``LocalStorage``.

    Args:
        storage: Backing key/value store. State is restored from it on
            construction.
        clock: Returns the current time; injectable for tests.
    """

    def __init__(
        self,
        storage: LocalStorage,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._cases: list[CaseSession] = []
        self._unreadable_cases: list = []
        self._history: list[str] = []
        self._active_case_id: str | None = None
        self._transcript = ""
        self._restore()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _restore(self) -> None:
        raw_history = self._storage.get_item(HISTORY_KEY)
        if raw_history:
            try:
                self._history = _HISTORY.validate_json(raw_history)
            except PydanticValidationError as exc:
                logger.warning("Unreadable %s: %s", HISTORY_KEY, exc)
                self._back_up(HISTORY_KEY, raw_history)

        raw_cases = self._storage.get_item(CASES_KEY)
        if raw_cases:
            self._restore_cases(raw_cases)

        raw_active = self._storage.get_item(ACTIVE_CASE_KEY)
        if raw_active:
            try:
                active_id = json.loads(raw_active)
            except json.JSONDecodeError:
                active_id = raw_active  # stored unquoted by older clients
            case = self.get_case(active_id) if isinstance(active_id, str) else None
            if case is not None:
                self._active_case_id = case.id
                self._transcript = case.transcript

        logger.debug(
            "Restored %d case(s), %d history entries, active=%s",
            len(self._cases),
            len(self._history),
            self._active_case_id,
        )

    def _restore_cases(self, raw: str) -> None:
        """Load case records one by one.

        Records that fail validation are kept verbatim and written back
        on every persist. A value that is not a JSON list at all is copied
        to a backup key first.
        """
        try:
            records = json.loads(raw)
        except json.JSONDecodeError:
            records = None
        if not isinstance(records, list):
            logger.warning("Unreadable %s", CASES_KEY)
            self._back_up(CASES_KEY, raw)
            return

        for record in records:
            try:
                self._cases.append(CaseSession.model_validate(record))
            except PydanticValidationError as exc:
                logger.warning("Keeping unreadable case record as stored: %s", exc)
                self._unreadable_cases.append(record)

    def _back_up(self, key: str, raw: str) -> None:
        backup_key = f"{key}{BACKUP_SUFFIX}"
        logger.warning("Copied unreadable %s to %s", key, backup_key)
        self._storage.set_item(backup_key, raw)

    def _persist(self) -> None:
        cases = [c.model_dump(mode="json", by_alias=True) for c in self._cases]
        cases.extend(self._unreadable_cases)
        items = {
            CASES_KEY: json.dumps(cases, ensure_ascii=False),
            HISTORY_KEY: json.dumps(self._history, ensure_ascii=False),
        }
        if self._active_case_id is not None:
            items[ACTIVE_CASE_KEY] = json.dumps(self._active_case_id)
        self._storage.set_items(items)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def cases(self) -> list[CaseSession]:
        return list(self._cases)

    @property
    def history(self) -> list[str]:
        return list(self._history)

    @property
    def transcript(self) -> str:
        """The working transcript buffer shown in the editor."""
        return self._transcript

    @property
    def active_case_id(self) -> str | None:
        return self._active_case_id

    @property
    def active_case(self) -> CaseSession | None:
        if self._active_case_id is None:
            return None
        return self.get_case(self._active_case_id)

    def get_case(self, case_id: str) -> CaseSession | None:
        for case in self._cases:
            if case.id == case_id:
                return case
        return None

    def _require_case(self, case_id: str) -> CaseSession:
        case = self.get_case(case_id)
        if case is None:
            raise CaseNotFoundError(case_id)
        return case

    # ------------------------------------------------------------------
    # Cases
    # ------------------------------------------------------------------

    def _new_case_id(self, now: datetime) -> str:
        millis = int(now.timestamp() * 1000)
        while self.get_case(f"case-{millis}") is not None:
            millis += 1
        return f"case-{millis}"

    def create_case(self, title: str | None = None) -> CaseSession:
        """Create an empty case, make it active and clear the working buffer."""
        now = self._clock()
        case = CaseSession(
            id=self._new_case_id(now),
            title=title or f"Case {now:%Y-%m-%d}",
            created_at=now,
            last_updated=now,
        )
        self._cases.append(case)
        self._active_case_id = case.id
        self._transcript = ""
        self._persist()
        logger.info("New case created: %s (%s)", case.title, case.id)
        return case

    def load_case(self, case_id: str) -> CaseSession:
        """Make *case_id* active and restore its transcript into the buffer.

        Raises:
            CaseNotFoundError: If no case has this ID.
        """
        case = self._require_case(case_id)
        self._active_case_id = case.id
        self._transcript = case.transcript
        self._persist()
        logger.info("Loaded case: %s", case.title)
        return case

    def rename_case(self, case_id: str, title: str) -> CaseSession:
        """Change a case title.

        Raises:
            ValueError: If *title* is blank.
            CaseNotFoundError: If no case has this ID.
        """
        title = title.strip()
        if not title:
            raise ValueError("Case title must not be empty")
        case = self._require_case(case_id)
        case.title = title
        case.last_updated = self._clock()
        self._persist()
        logger.info("Case %s renamed to: %s", case.id, title)
        return case

    # ------------------------------------------------------------------
    # Transcript
    # ------------------------------------------------------------------

    def append_transcript(self, text: str) -> CaseSession | None:
        """Append a newly recognized transcription.

        The working buffer and the active case transcript (if any) each
        grow by *text*; the case also gains exactly one segment.

        Returns:
            The updated active case, or None when no case is active.

        Raises:
            ValueError: If *text* is blank.
        """
        if not text.strip():
            raise ValueError("Cannot append an empty transcription")
        now = self._clock()
        self._transcript = _join(self._transcript, text)
        self._history.append(text)

        case = self.active_case
        if case is not None:
            case.transcript = _join(case.transcript, text)
            case.segments.append(TranscriptSegment(text=text, timestamp=now))
            case.last_updated = now
        self._persist()
        return case

    def set_transcript(self, text: str) -> None:
        """Replace the working buffer with user-edited text.

        Non-empty edits are mirrored into the active case.
        """
        self._transcript = text
        case = self.active_case
        if case is not None and text and case.transcript != text:
            case.transcript = text
            case.last_updated = self._clock()
            self._persist()

    def clear_transcript(self) -> None:
        """Empty the working buffer. The active case keeps its transcript."""
        self._transcript = ""
