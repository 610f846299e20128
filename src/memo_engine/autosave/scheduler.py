"""Debounced autosave with a single in-flight commit."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Literal, Optional

from memo_engine.config import EditorSettings
from memo_engine.draft import Draft, Memo, SaveAttempt, SaveError, content_changed
from memo_engine.runtime import telemetry

from .timer import TimerState

BaselineAccessor = Callable[[], Optional[Memo]]
CurrentAccessor = Callable[[Memo], Draft]
ChangeCheck = Callable[[Draft, Memo], bool]
CommitFn = Callable[[Draft, Memo], Awaitable[Optional[Memo]]]


@dataclass(frozen=True, slots=True)
class AutosaveStatus:
    pending_ticks: int
    is_saving: bool
    last_error: Optional[SaveError]
    has_pending: bool


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    status: Literal["saved", "failed", "skipped"]
    snapshot: Optional[Draft] = None
    result: Optional[Memo] = None
    error: Optional[SaveError] = None


class AutosaveScheduler:
    """Decides when the editor draft is committed to the store.

    The scheduler owns no timer of its own. The host calls
    :meth:`process_timers` from its timer primitive; deadlines are compared
    against ``clock`` so tests can drive time explicitly.
    """

    def __init__(
        self,
        *,
        get_baseline: BaselineAccessor,
        get_current: CurrentAccessor,
        commit: CommitFn,
        check_change: ChangeCheck = content_changed,
        settings: Optional[EditorSettings] = None,
        enabled: Optional[bool] = None,
        clock: Callable[[], float] = time.monotonic,
        on_saved: Optional[Callable[[Optional[Memo]], None]] = None,
        on_error: Optional[Callable[[SaveError], None]] = None,
        logger_name: str | None = "memo_engine.autosave",
    ) -> None:
        self.settings = settings or EditorSettings()
        self.enabled = self.settings.autosave_enabled if enabled is None else enabled
        self._get_baseline = get_baseline
        self._get_current = get_current
        self._commit_fn = commit
        self._check_change = check_change
        self._clock = clock
        self._on_saved = on_saved
        self._on_error = on_error
        self._logger_name = logger_name

        self._timer = TimerState()
        self._deadline: Optional[float] = None
        self._pending: Optional[Draft] = None
        self._in_flight: Optional[SaveAttempt] = None
        self._last_error: Optional[SaveError] = None
        self._timer_handles = 0

    @property
    def pending_ticks(self) -> int:
        return self._timer.elapsed_ticks

    @property
    def is_saving(self) -> bool:
        return self._in_flight is not None

    @property
    def last_error(self) -> Optional[SaveError]:
        return self._last_error

    @property
    def in_flight(self) -> Optional[SaveAttempt]:
        return self._in_flight

    @property
    def timer_state(self) -> TimerState:
        return replace(self._timer)

    @property
    def has_pending(self) -> bool:
        return self._deadline is not None

    def status(self) -> AutosaveStatus:
        return AutosaveStatus(
            pending_ticks=self.pending_ticks,
            is_saving=self.is_saving,
            last_error=self._last_error,
            has_pending=self.has_pending,
        )

    def request_save(self) -> None:
        """Note that the draft may have changed and (re)start the quiet period."""

        if not self.enabled:
            return
        baseline = self._get_baseline()
        if baseline is None:
            return
        current = self._get_current(baseline)
        if not self._check_change(current, baseline):
            telemetry.record_event(
                "autosave.unchanged", level="debug", logger_name=self._logger_name
            )
            return

        now = self._clock()
        self._pending = current
        self._timer.elapsed_ticks = max(1, self._timer.elapsed_ticks)
        if not self._timer.running:
            self._start_ticks(now)
        self._deadline = now + self.settings.debounce_seconds

    def _start_ticks(self, now: float) -> None:
        self._timer_handles += 1
        self._timer.start(
            self._timer_handles, now=now, interval=self.settings.tick_seconds
        )

    def flush(self) -> None:
        """Drop the scheduled save; the caller performs its own save next."""

        discarded = self._deadline is not None
        self._deadline = None
        self._pending = None
        self._timer.reset()
        if discarded:
            telemetry.record_event(
                "autosave.flush", level="debug", logger_name=self._logger_name
            )

    async def retry(self) -> SaveOutcome:
        """Commit the current draft now, skipping the window and change check."""

        baseline = self._get_baseline()
        if baseline is None:
            telemetry.record_event(
                "autosave.retry_skipped",
                level="warning",
                data={"reason": "no_baseline"},
                logger_name=self._logger_name,
            )
            return SaveOutcome(status="skipped")
        if self._in_flight is not None:
            # The scheduled snapshot still goes out after the running commit.
            return SaveOutcome(status="skipped")
        self._deadline = None
        self._pending = None
        return await self._submit(self._get_current(baseline), baseline)

    async def process_timers(self) -> Optional[SaveOutcome]:
        """Advance ticks and submit the pending snapshot once the window closes."""

        now = self._clock()
        self._timer.advance(now, self.settings.tick_seconds)

        if self._deadline is None or self._deadline > now:
            return None
        self._deadline = None

        if self.is_saving:
            # Keep the snapshot for the cycle after the in-flight commit.
            self._deadline = now + self.settings.debounce_seconds
            telemetry.record_event(
                "autosave.fire_deferred", level="debug", logger_name=self._logger_name
            )
            return None

        snapshot, self._pending = self._pending, None
        baseline = self._get_baseline()
        if snapshot is None or baseline is None:
            return None
        return await self._submit(snapshot, baseline)

    async def _submit(self, snapshot: Draft, baseline: Memo) -> SaveOutcome:
        if self._in_flight is not None:
            return SaveOutcome(status="skipped", snapshot=snapshot)

        self._in_flight = SaveAttempt(value=snapshot, started_at=self._clock())
        self._timer.stop()
        with telemetry.span(
            "autosave::commit",
            logger_name=self._logger_name,
            component="autosave",
            metadata={"memo_id": baseline.id, "length": len(snapshot.content)},
        ) as handle:
            try:
                result = await self._commit_fn(snapshot, baseline)
            except Exception as exc:
                error = SaveError.wrap(exc, snapshot=snapshot)
                self._last_error = error
                handle.fail(str(error))
                outcome = SaveOutcome(status="failed", snapshot=snapshot, error=error)
            else:
                self._last_error = None
                handle.add_metadata("status", "saved")
                outcome = SaveOutcome(status="saved", snapshot=snapshot, result=result)
            finally:
                self._in_flight = None
                self._timer.reset()
                if self._deadline is not None:
                    # A request arrived mid-commit; its save is still queued.
                    self._timer.elapsed_ticks = 1
                    self._start_ticks(self._clock())

        telemetry.record_event(
            f"autosave.{outcome.status}",
            level="error" if outcome.error else "info",
            data={"memo_id": baseline.id},
            logger_name=self._logger_name,
        )
        if outcome.error is not None:
            if self._on_error is not None:
                self._on_error(outcome.error)
        elif self._on_saved is not None:
            self._on_saved(outcome.result)
        return outcome


__all__ = ["AutosaveScheduler", "AutosaveStatus", "SaveOutcome"]
