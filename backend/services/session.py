"""
Analysis sessions.

An AnalysisSession is the explicit context for one project's dataset step:
it owns the current AnalysisResult and the in-flight ethical-analysis call.
A new upload replaces the previous result and cancels any ethical call still
running for the old file; a superseded call never lands in the new result.
"""
import asyncio
import uuid
from collections import OrderedDict
from typing import Optional, Tuple

from loguru import logger

from config import AnalysisPolicy, settings
from exceptions import EthicalServiceUnavailableError
from models.ethics import AnalysisResult, EthicalAnalysis
from models.statistics import DatasetStatistics, FileInfo
from services.analyzer import analyze_dataset_async
from services.data_formats import DatasetFile, detect_format, validate_upload
from services.ethics_service import EthicalAnalysisClient
from services.suitability import ai_assisted_checks, statistics_only_checks


UNAVAILABLE_NOTE = "AI ethical analysis was unavailable for this dataset"
NO_PROJECT_NOTE = "No project identifier given; ethical analysis skipped"
SUPERSEDED_NOTE = "Superseded by a newer upload; ethical analysis discarded"


class AnalysisSession:
    """Current analysis state for one project"""

    def __init__(
        self,
        project_id: Optional[str] = None,
        ethics_client: Optional[EthicalAnalysisClient] = None,
        policy: Optional[AnalysisPolicy] = None,
        session_id: Optional[str] = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.project_id = project_id
        self.ethics_client = ethics_client
        self.policy = policy or settings.ANALYSIS
        self.result: Optional[AnalysisResult] = None
        self._generation = 0
        self._ethics_task: Optional[asyncio.Task] = None

    @property
    def ethics_in_flight(self) -> bool:
        return self._ethics_task is not None and not self._ethics_task.done()

    def cancel(self) -> None:
        """Abandon whatever is running; its outcome will be discarded"""
        self._generation += 1
        if self.ethics_in_flight:
            logger.info(f"Session {self.session_id}: cancelling in-flight ethical analysis")
            self._ethics_task.cancel()
        self._ethics_task = None

    def clear(self) -> None:
        self.cancel()
        self.result = None

    async def analyze_upload(self, file: DatasetFile) -> AnalysisResult:
        """
        Analyze a new upload, replacing the previous result.

        Raises the engine's typed errors (unsupported format, too large,
        parse/empty). An unavailable ethical service is not an error: the
        result falls back to statistics-only suitability checks.
        """
        self.cancel()
        self.result = None
        generation = self._generation

        detection = detect_format(file.filename)
        size_warning = validate_upload(file, self.policy)
        statistics = await analyze_dataset_async(file, self.policy, validated=True)

        base = dict(
            file_info=FileInfo(name=file.filename, size=file.size),
            format_detection=detection,
            statistics=statistics,
            size_warning=size_warning,
        )

        if generation != self._generation:
            return self._superseded(base)

        analysis, note = await self._request_ethics(statistics, generation)

        if generation != self._generation:
            return self._superseded(base)

        result = AnalysisResult(
            **base,
            ethical_analysis=analysis,
            suitability_checks=(
                ai_assisted_checks(statistics, analysis) if analysis
                else statistics_only_checks(statistics)
            ),
            statistics_only=analysis is None,
            note=note,
        )
        self.result = result
        return result

    async def retry_ethical_analysis(self) -> Optional[AnalysisResult]:
        """Re-run only the ethical call; a failed retry leaves the result as it was"""
        if self.result is None:
            return None

        generation = self._generation
        current = self.result
        analysis, _ = await self._request_ethics(current.statistics, generation)

        if analysis is None or generation != self._generation:
            return self.result

        self.result = current.model_copy(update={
            "ethical_analysis": analysis,
            "suitability_checks": ai_assisted_checks(current.statistics, analysis),
            "statistics_only": False,
            "note": None,
        })
        return self.result

    async def _request_ethics(
        self,
        statistics: DatasetStatistics,
        generation: int,
    ) -> Tuple[Optional[EthicalAnalysis], Optional[str]]:
        if self.ethics_client is None:
            return None, UNAVAILABLE_NOTE
        if not self.project_id:
            return None, NO_PROJECT_NOTE

        task = asyncio.create_task(self.ethics_client.analyze_ethics(statistics, self.project_id))
        self._ethics_task = task
        try:
            return await task, None
        except EthicalServiceUnavailableError as e:
            logger.warning(f"AI ethical analysis unavailable: {e.message}")
            return None, UNAVAILABLE_NOTE
        except asyncio.CancelledError:
            if generation != self._generation:
                return None, SUPERSEDED_NOTE
            raise
        finally:
            if self._ethics_task is task:
                self._ethics_task = None

    def _superseded(self, base: dict) -> AnalysisResult:
        logger.info(f"Session {self.session_id}: discarding result for superseded upload")
        return AnalysisResult(
            **base,
            suitability_checks=statistics_only_checks(base["statistics"]),
            statistics_only=True,
            superseded=True,
            note=SUPERSEDED_NOTE,
        )


class SessionRegistry:
    """
    Sessions keyed by id, held by the API layer (never by the engine).

    Bounded: once more than max_sessions are held, the least recently used
    one is cleared and dropped.
    """

    def __init__(
        self,
        ethics_client: Optional[EthicalAnalysisClient] = None,
        max_sessions: Optional[int] = None,
        policy: Optional[AnalysisPolicy] = None,
    ):
        self.ethics_client = ethics_client
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self.policy = policy or settings.ANALYSIS
        self._sessions: "OrderedDict[str, AnalysisSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[AnalysisSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def policy_for(self, session_id: Optional[str] = None) -> AnalysisPolicy:
        """Policy an upload into this session would be checked against"""
        session = self._sessions.get(session_id) if session_id else None
        return session.policy if session is not None else self.policy

    def get_or_create(self, session_id: Optional[str] = None, project_id: Optional[str] = None) -> AnalysisSession:
        session = self.get(session_id) if session_id else None
        if session is None:
            session = AnalysisSession(
                project_id=project_id,
                ethics_client=self.ethics_client,
                policy=self.policy,
                session_id=session_id,
            )
            self._sessions[session.session_id] = session
            self._evict()
        elif project_id:
            session.project_id = project_id
        return session

    def remove(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.clear()
        return True

    def clear(self) -> None:
        for session_id in list(self._sessions):
            self.remove(session_id)

    def _evict(self) -> None:
        while len(self._sessions) > self.max_sessions:
            session_id, session = self._sessions.popitem(last=False)
            session.clear()
            logger.info(f"Evicted least recently used analysis session {session_id}")
