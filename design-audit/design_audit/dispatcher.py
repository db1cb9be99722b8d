"""
Multi-Screen Dispatcher

Runs the single-screen auditor over a list of frames with a fixed
number of concurrent workers draining a shared queue.

Completion order is NOT input order: ``on_screen_complete`` fires as
each screen settles, with the screen's input index so callers can put
results back in place.
"""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from .auditor import ScreenAuditor
from .errors import DesignAuditError
from .models import AuditConfig, FrameDescriptor, ImageInput, ScreenAuditResult

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3

ScreenCallback = Callable[[int, ScreenAuditResult], Union[None, Awaitable[None]]]


async def run_multi_screen_audit(
    frames: list[FrameDescriptor],
    persona_id: str,
    config: Optional[AuditConfig],
    on_screen_complete: ScreenCallback,
    *,
    auditor: ScreenAuditor,
    concurrency: int = DEFAULT_CONCURRENCY
) -> None:
    """
    Audit every frame once, at most ``concurrency`` at a time.

    Each frame is claimed by exactly one worker. A failing frame becomes
    an error-tagged ScreenAuditResult for its index and the worker moves
    on; it never stops sibling frames. There is no overall timeout and
    no cancellation once started.

    Args:
        frames: Frames with resolved image URLs
        persona_id: Persona applied to every screen
        config: Shared audit context; each screen gets its own screen_name
        on_screen_complete: Called once per frame as (index, result), in
                            completion order. May be sync or async. An
                            exception it raises is logged, not propagated.
        auditor: Single-screen auditor
        concurrency: Worker count (>= 1)
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    config = config or AuditConfig()
    queue: asyncio.Queue = asyncio.Queue()
    for index, frame in enumerate(frames):
        queue.put_nowait((index, frame))

    async def worker() -> None:
        while True:
            try:
                index, frame = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            result = await _audit_frame(auditor, frame, persona_id, config)
            try:
                outcome = on_screen_complete(index, result)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                # keep draining the queue
                logger.exception("Completion callback failed for screen %d", index)

    worker_count = min(concurrency, len(frames))
    logger.info("Auditing %d screens with %d workers", len(frames), worker_count)
    await asyncio.gather(*(worker() for _ in range(worker_count)))


async def _audit_frame(
    auditor: ScreenAuditor,
    frame: FrameDescriptor,
    persona_id: str,
    config: AuditConfig
) -> ScreenAuditResult:
    try:
        image = ImageInput(url=frame.image_url) if frame.image_url else None
        result = await auditor.audit(
            image,
            persona_id,
            config.model_copy(update={"screen_name": frame.name})
        )
    except DesignAuditError as e:
        logger.error("Audit error for frame \"%s\": %s", frame.name, e.message)
        return ScreenAuditResult.failed(frame, e.message)
    except Exception as e:
        # network failures and anything else unexpected stay scoped to this frame
        logger.exception("Audit error for frame \"%s\"", frame.name)
        return ScreenAuditResult.failed(frame, str(e) or "Failed to audit screen")
    return ScreenAuditResult.settled(frame, result)


class ScreenAuditBoard:
    """
    Per-run result slots, indexed like the input frames.

    Starts with every slot pending. ``record`` is a ready-made
    ``on_screen_complete`` callback; readers may look at the board at
    any time and see a mix of pending and settled slots.
    """

    def __init__(self, frames: list[FrameDescriptor]):
        self._slots = [ScreenAuditResult.pending(frame) for frame in frames]

    def record(self, index: int, result: ScreenAuditResult) -> None:
        if not self._slots[index].is_loading:
            raise RuntimeError(f"Screen {index} already settled")
        self._slots[index] = result

    @property
    def results(self) -> list[ScreenAuditResult]:
        return list(self._slots)

    @property
    def pending(self) -> int:
        return sum(1 for slot in self._slots if slot.is_loading)

    @property
    def done(self) -> bool:
        return self.pending == 0


async def audit_screens(
    frames: list[FrameDescriptor],
    persona_id: str,
    config: Optional[AuditConfig] = None,
    *,
    auditor: ScreenAuditor,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_screen_complete: Optional[ScreenCallback] = None
) -> list[ScreenAuditResult]:
    """
    Run the dispatcher and collect results back into input order.

    Args:
        on_screen_complete: Optional extra callback, fired after the
                            board records each result
    """
    board = ScreenAuditBoard(frames)

    async def record(index: int, result: ScreenAuditResult) -> None:
        board.record(index, result)
        if on_screen_complete is not None:
            outcome = on_screen_complete(index, result)
            if inspect.isawaitable(outcome):
                await outcome

    await run_multi_screen_audit(
        frames,
        persona_id,
        config,
        record,
        auditor=auditor,
        concurrency=concurrency
    )
    return board.results
