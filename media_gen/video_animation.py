"""
Image-to-video animation jobs.

A job moves Submitted -> Polling -> Completed | Failed. submit() creates the
job, poll() performs exactly one status check and applies it, and wait()
drives poll() on a fixed interval until the job is terminal, the timeout
elapses, or the caller cancels. Callers with their own scheduler can call
poll() directly.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from .exceptions import (
    GenerationError,
    OperationCancelledError,
    OperationTimeoutError,
    PollError,
    ProtocolError,
    ValidationError,
)
from .logger import get_library_logger
from .models import SUPPORTED_ASPECT_RATIOS, VideoJob, VideoStatus
from .providers.kling_provider import KlingVideoClient, SUPPORTED_DURATIONS

# Receives each provider message with the job's progress fraction
ProgressCallback = Callable[[str, float], None]

STATUS_ALIASES = {
    "pending": VideoStatus.PENDING,
    "queued": VideoStatus.PENDING,
    "in_queue": VideoStatus.PENDING,
    "submitted": VideoStatus.PENDING,
    "processing": VideoStatus.PROCESSING,
    "in_progress": VideoStatus.PROCESSING,
    "running": VideoStatus.PROCESSING,
    "completed": VideoStatus.COMPLETED,
    "succeed": VideoStatus.COMPLETED,
    "succeeded": VideoStatus.COMPLETED,
    "failed": VideoStatus.FAILED,
    "error": VideoStatus.FAILED,
}


def normalize_status(raw: Any) -> Optional[VideoStatus]:
    """Map a provider status string to a VideoStatus, or None if unknown."""
    if not isinstance(raw, str):
        return None
    return STATUS_ALIASES.get(raw.strip().lower())


def normalize_progress(raw: Any) -> Optional[float]:
    """Return progress as a fraction in [0, 1]; percentages are scaled down."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value > 1:
        value /= 100
    return min(max(value, 0.0), 1.0)


def extract_video_url(data: Dict[str, Any]) -> Optional[str]:
    video = data.get("video")
    if isinstance(video, dict) and video.get("url"):
        return video["url"]
    return data.get("video_url") or None


def extract_messages(data: Dict[str, Any]) -> List[str]:
    """Collect the status message and any log lines from a status response."""
    messages = []
    for log in data.get("logs") or []:
        text = log.get("message") if isinstance(log, dict) else log
        if text:
            messages.append(str(text))
    message = data.get("message") or data.get("error")
    if message:
        messages.append(str(message))
    return messages


class VideoAnimator:
    """Submits and tracks animation jobs on a queue-based video provider."""

    def __init__(
        self,
        client: KlingVideoClient,
        sleep_event_factory: Callable[[], threading.Event] = threading.Event,
        clock: Callable[[], float] = time.monotonic
    ):
        self.client = client
        self.config = client.config
        self.logger = get_library_logger()
        self._sleep_event_factory = sleep_event_factory
        self._clock = clock

    def submit(
        self,
        image_url: str,
        prompt: str = "",
        duration_seconds: Optional[int] = None,
        aspect_ratio: Optional[str] = None,
        cfg_scale: Optional[float] = None,
        timeout: Optional[float] = None
    ) -> VideoJob:
        """
        Submit an image for animation.

        Returns:
            A new job in the Submitted state

        Raises:
            ValidationError: For an empty image URL or unsupported duration,
                aspect ratio or cfg_scale
            SubmissionError: If the provider does not accept the job
        """
        if not image_url or not image_url.strip():
            raise ValidationError("image_url is required")

        duration = duration_seconds if duration_seconds is not None else self.config.default_duration
        if duration not in SUPPORTED_DURATIONS:
            raise ValidationError(f"Unsupported duration {duration}s. Use one of: {SUPPORTED_DURATIONS}")

        ratio = aspect_ratio or self.config.default_aspect_ratio
        if ratio not in SUPPORTED_ASPECT_RATIOS:
            raise ValidationError(
                f"Unsupported aspect ratio '{ratio}'. Use one of: {', '.join(SUPPORTED_ASPECT_RATIOS)}"
            )

        scale = self.config.cfg_scale if cfg_scale is None else cfg_scale
        if not 0 <= scale <= 10:
            raise ValidationError("cfg_scale must be between 0 and 10")

        payload = {
            "image_url": image_url,
            "prompt": prompt or "",
            "duration": duration,
            "aspect_ratio": ratio,
            "cfg_scale": scale,
        }
        self.logger.info(f"Submitting animation job: {duration}s, {ratio}")
        job_id = self.client.create_task(payload, timeout=timeout)
        return VideoJob(job_id=job_id)

    def poll(self, job: VideoJob, timeout: Optional[float] = None) -> VideoJob:
        """
        Check the job's status once and apply the response.

        Polling a terminal job returns it unchanged without a network call.
        Concurrent polls of the same job are serialized.

        Raises:
            PollError: If this status check failed; the job is unchanged and
                may be polled again
            GenerationError: If the provider refuses the status request
        """
        with job.poll_lock:
            if job.terminal:
                return job

            data = self.client.get_status(job.job_id, timeout=timeout)
            self._apply(job, data)
            return job

    def _apply(self, job: VideoJob, data: Dict[str, Any]) -> None:
        previous = job.status
        job.poll_count += 1
        job.logs = extract_messages(data)
        if job.logs:
            job.message = job.logs[-1]

        progress = normalize_progress(data.get("progress"))
        if progress is not None:
            job.progress = max(job.progress, progress)

        status = normalize_status(data.get("status"))
        if status is None:
            self._fail(job, ProtocolError(f"Unknown job status '{data.get('status')}' for job {job.job_id}"))
        elif status is VideoStatus.COMPLETED:
            url = extract_video_url(data)
            if url:
                job.status = VideoStatus.COMPLETED
                job.result_url = url
                job.progress = 1.0
            else:
                self._fail(job, ProtocolError(f"Job {job.job_id} completed without a video URL"))
        elif status is VideoStatus.FAILED:
            reason = data.get("error") or data.get("message") or "Video generation failed"
            self._fail(job, GenerationError(f"Video job {job.job_id} failed: {reason}", provider="kling"))
        else:
            job.status = status

        if job.status is not previous:
            self.logger.info(f"Video job {job.job_id} status: {job.status.value}")
        else:
            self.logger.debug(f"Video job {job.job_id}: {job.status.value} {job.progress:.0%}")

    def _fail(self, job: VideoJob, error: Exception) -> None:
        job.status = VideoStatus.FAILED
        job.error = error
        job.message = str(error)
        self.logger.error(str(error))

    def wait(
        self,
        job: VideoJob,
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
        max_poll_failures: Optional[int] = None,
        request_timeout: Optional[float] = None
    ) -> VideoJob:
        """
        Poll until the job completes.

        Args:
            job: Job returned by submit()
            timeout: Overall seconds to wait; the remote job is left running
                when it elapses
            poll_interval: Seconds between polls
            on_progress: Receives each provider message and the progress
                fraction; messages may repeat
            cancel_event: Set by the caller to stop waiting immediately
            max_poll_failures: Consecutive failed polls tolerated
            request_timeout: HTTP timeout for each poll, capped by the time left

        Returns:
            The completed job, carrying its result URL

        Raises:
            OperationTimeoutError: If the job is still running at the timeout
            OperationCancelledError: If cancel_event is set
            ProtocolError: If the provider broke its response contract
            GenerationError: If the job failed or polling kept failing
        """
        timeout = self.config.job_timeout if timeout is None else timeout
        interval = self.config.poll_interval if poll_interval is None else poll_interval
        allowed_failures = self.config.max_poll_failures if max_poll_failures is None else max_poll_failures
        waiter = cancel_event or self._sleep_event_factory()
        started = self._clock()
        consecutive_failures = 0

        self.logger.info(f"Polling video job {job.job_id} every {interval:.0f}s (timeout {timeout:.0f}s)")
        while not job.terminal:
            remaining = timeout - (self._clock() - started)
            if remaining <= 0:
                raise OperationTimeoutError(
                    f"Video job {job.job_id} still {job.status.value} after {timeout:.0f}s"
                )
            if waiter.wait(min(interval, remaining)):
                raise OperationCancelledError(f"Video job {job.job_id} polling cancelled")

            remaining = timeout - (self._clock() - started)
            if remaining <= 0:
                continue
            per_request = self.config.request_timeout if request_timeout is None else request_timeout

            try:
                self.poll(job, timeout=min(per_request, remaining))
            except PollError as e:
                consecutive_failures += 1
                self.logger.warning(f"Poll {consecutive_failures}/{allowed_failures} failed for job {job.job_id}: {e}")
                if consecutive_failures >= allowed_failures:
                    raise GenerationError(
                        f"Gave up on video job {job.job_id} after {consecutive_failures} failed polls: {e}",
                        provider="kling"
                    ) from e
                continue

            consecutive_failures = 0
            if on_progress is not None:
                for message in job.logs:
                    on_progress(message, job.progress)

        if job.status is VideoStatus.FAILED:
            raise job.error or GenerationError(f"Video job {job.job_id} failed")

        self.logger.info(f"Video job {job.job_id} completed: {job.result_url}")
        return job

    def animate(
        self,
        image_url: str,
        prompt: str = "",
        duration_seconds: Optional[int] = None,
        aspect_ratio: Optional[str] = None,
        timeout: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> VideoJob:
        """Submit and wait in one call."""
        job = self.submit(image_url, prompt, duration_seconds, aspect_ratio)
        return self.wait(job, timeout=timeout, on_progress=on_progress, cancel_event=cancel_event)
