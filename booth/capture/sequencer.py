"""Capture sequencer: countdown, then a burst of still frames.

One run is a capture session. Events are produced as an async stream:

    countdown(5) .. countdown(1), capturing(1), captured(1), pausing(1),
    capturing(2), captured(2), pausing(2), capturing(3), captured(3), done

``done`` is the only event that carries frame data, so a failure part-way
through delivers no frames at all. The sequencer never releases the source;
the view that owns the camera does that.
"""

import asyncio
import logging
from typing import AsyncIterator

from booth.capture.events import (
    ERROR_MESSAGES,
    CameraUnavailable,
    CaptureError,
    CaptureFailed,
    Frame,
    SequencerEvent,
)
from booth.capture.source import VideoSource
from booth.capture.state import (
    CaptureConfig,
    CaptureState,
    Capturing,
    CountingDown,
    Done,
    Failed,
    Idle,
    Pausing,
    next_state,
)
from booth.utils.image import encode_jpeg

logger = logging.getLogger(__name__)


async def _no_events() -> AsyncIterator[SequencerEvent]:
    return
    yield  # pragma: no cover


class CaptureRun:
    """Event stream of one capture session.

    Closing it, even before the first event, ends the session and frees the
    sequencer for a retake.
    """

    def __init__(
        self,
        sequencer: "CaptureSequencer",
        cancelled: asyncio.Event,
        events: AsyncIterator[SequencerEvent],
    ):
        self._sequencer = sequencer
        self._cancelled = cancelled
        self._events = events

    def __aiter__(self) -> "CaptureRun":
        return self

    async def __anext__(self) -> SequencerEvent:
        return await self._events.__anext__()

    async def aclose(self) -> None:
        self._sequencer._cancel_run(self._cancelled)
        await self._events.aclose()


class CaptureSequencer:
    def __init__(self, config: CaptureConfig | None = None):
        self.config = config or CaptureConfig.from_settings()
        self.state: CaptureState = Idle()
        self._is_capturing = False
        self._cancelled = asyncio.Event()

    @property
    def is_capturing(self) -> bool:
        return self._is_capturing

    def start(self, source: VideoSource) -> AsyncIterator[SequencerEvent]:
        """Begin a capture session.

        While a session is running this returns an empty stream: the call is
        ignored, not queued, and the running countdown is left alone.
        """
        if self._is_capturing:
            logger.debug("Capture already running, ignoring start")
            return _no_events()

        cancelled = asyncio.Event()
        self._cancelled = cancelled
        self._is_capturing = True
        self.state = Idle()
        return CaptureRun(self, cancelled, self._run(source, cancelled))

    def cancel(self) -> None:
        """Abandon the running session. A new one can start right away."""
        self._cancel_run(self._cancelled)

    def _cancel_run(self, cancelled: asyncio.Event) -> None:
        # A stale run must not touch the flag of a newer one
        if cancelled is not self._cancelled or not self._is_capturing:
            return
        logger.info("Capture session cancelled")
        cancelled.set()
        self._is_capturing = False
        self.state = Failed("cancelled")

    async def _run(self, source: VideoSource, cancelled: asyncio.Event) -> AsyncIterator[SequencerEvent]:
        cfg = self.config
        frames: list[Frame] = []
        try:
            acquired = await self._acquire(source, cancelled)
            if acquired is None:
                return
            if not acquired:
                yield self._fail(CameraUnavailable("Camera not ready"))
                return

            state = next_state(Idle(), cfg)
            while not isinstance(state, Done):
                if cancelled.is_set():
                    return
                self.state = state

                if isinstance(state, CountingDown):
                    yield SequencerEvent("countdown", {"remaining": state.remaining})
                    if await self._sleep(cfg.tick_seconds, cancelled):
                        return

                elif isinstance(state, Capturing):
                    yield SequencerEvent(
                        "capturing", {"index": state.index, "total": cfg.shot_count}
                    )
                    if cancelled.is_set():
                        return
                    try:
                        frames.append(self._grab(source, state.index))
                    except CaptureError as e:
                        frames.clear()
                        yield self._fail(e)
                        return
                    yield SequencerEvent(
                        "captured", {"index": state.index, "total": cfg.shot_count}
                    )

                elif isinstance(state, Pausing):
                    yield SequencerEvent("pausing", {"next_index": state.index + 1})
                    if await self._sleep(cfg.shot_delay_seconds, cancelled):
                        return

                state = next_state(state, cfg)

            if cancelled.is_set():
                return
            self.state = Done()
            logger.info("Capture session finished with %d frames", len(frames))
            yield SequencerEvent("done", {"count": len(frames)}, frames=list(frames))
        finally:
            if cancelled is self._cancelled:
                self._is_capturing = False

    async def _acquire(self, source: VideoSource, cancelled: asyncio.Event) -> bool | None:
        """Open the source, retrying once after a short delay.

        Returns None when cancelled during the retry wait.
        """
        for attempt in (1, 2):
            try:
                source.open()
                if source.is_ready():
                    return True
            except CameraUnavailable as e:
                logger.warning("Camera open failed (attempt %d): %s", attempt, e)
            if attempt == 1:
                logger.info("Camera not ready, retrying in %.1fs", self.config.retry_seconds)
                if await self._sleep(self.config.retry_seconds, cancelled):
                    return None
        return False

    def _grab(self, source: VideoSource, index: int) -> Frame:
        try:
            image = source.read_frame()
        except CaptureError as e:
            raise CaptureFailed(str(e)) from e
        except Exception as e:
            raise CaptureFailed(f"Frame grab failed: {e}") from e
        if image is None:
            raise CaptureFailed("No video frame available")

        try:
            data = encode_jpeg(image, self.config.jpeg_quality)
        except (OSError, ValueError) as e:
            raise CaptureFailed(f"JPEG encoding failed: {e}") from e

        width, height = image.size
        return Frame(
            index=index,
            data=data,
            width=width,
            height=height,
            quality=self.config.jpeg_quality,
        )

    def _fail(self, error: CaptureError) -> SequencerEvent:
        self.state = Failed(error.reason)
        logger.error("Capture session failed (%s): %s", error.reason, error)
        return SequencerEvent(
            "error",
            {"reason": error.reason},
            message=ERROR_MESSAGES.get(error.reason, str(error)),
        )

    async def _sleep(self, delay: float, cancelled: asyncio.Event) -> bool:
        """Wait for ``delay`` seconds. Returns True if cancelled meanwhile."""
        if cancelled.is_set():
            return True
        if delay <= 0:
            await asyncio.sleep(0)
            return cancelled.is_set()
        try:
            await asyncio.wait_for(cancelled.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True
