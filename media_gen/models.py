"""
Data model shared by the generation components.

Results are immutable values created once per successful call. VideoJob is the
one mutable record: it changes only when a poll response is applied and stops
changing once it reaches a terminal status.
"""

import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple, Union

# Leading phrase that pins the generated subject to a reference image
IDENTITY_LOCK_CLAUSE = "Using the attached image as a strict reference"

SUPPORTED_ASPECT_RATIOS = ("16:9", "9:16", "1:1")


def asset_names(assets: Iterable[Union[str, Mapping]]) -> Tuple[str, ...]:
    """Extract display names from asset names or asset records with a "name" key."""
    names = []
    for asset in assets or ():
        name = asset if isinstance(asset, str) else asset.get("name")
        if name:
            names.append(str(name))
    return tuple(names)


def _sentence_containing(text: str, clause: str) -> Optional[str]:
    """Return the full sentence of ``text`` that contains ``clause``, or None."""
    index = text.find(clause)
    if index == -1:
        return None
    start = text.rfind(".", 0, index) + 1
    end = text.find(".", index + len(clause))
    if end == -1:
        return text[start:].strip()
    return text[start:end + 1].strip()


@dataclass(frozen=True)
class GenerationPrompt:
    """
    An image generation prompt and the phrases any refinement must keep.

    Attributes:
        text: Prompt text sent to the image provider
        invariant_clauses: Substrings that must survive every refinement; an
            identity-lock clause, when present, must stay first
        assets: Names of the assets the prompt refers to
    """

    text: str
    invariant_clauses: Tuple[str, ...] = ()
    assets: Tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str, assets: Iterable[Union[str, Mapping]] = ()) -> "GenerationPrompt":
        """
        Build a prompt, detecting an identity-lock clause anywhere in ``text``.

        The sentence carrying the clause becomes an invariant; refinements
        move it to the front.
        """
        lock = _sentence_containing(text, IDENTITY_LOCK_CLAUSE)
        clauses: Tuple[str, ...] = (lock,) if lock else ()
        return cls(text=text, invariant_clauses=clauses, assets=asset_names(assets))

    @property
    def identity_locked(self) -> bool:
        return any(IDENTITY_LOCK_CLAUSE in clause for clause in self.invariant_clauses)

    def missing_invariants(self, candidate: str) -> List[str]:
        """List the invariant clauses absent from ``candidate``."""
        missing = [clause for clause in self.invariant_clauses if clause not in candidate]
        for clause in self.invariant_clauses:
            if (
                IDENTITY_LOCK_CLAUSE in clause
                and clause not in missing
                and not candidate.lstrip().startswith(clause)
            ):
                missing.append(clause)
        return missing

    def enforce_invariants(self, candidate: str) -> str:
        """
        Return ``candidate`` with every invariant clause present.

        A misplaced identity-lock clause is moved to the front; any other
        missing clause is prepended.
        """
        result = candidate.strip()
        for clause in reversed(self.missing_invariants(result)):
            if clause in result:
                before, after = result.split(clause, 1)
                result = f"{before.rstrip()} {after.lstrip()}".strip()
            result = f"{clause} {result}".strip()
        return result

    def refined(self, text: str, new_assets: Iterable[Union[str, Mapping]] = ()) -> "GenerationPrompt":
        """Return the successor prompt carrying the same invariants."""
        merged = self.assets + tuple(name for name in asset_names(new_assets) if name not in self.assets)
        return replace(self, text=self.enforce_invariants(text), assets=merged)


@dataclass(frozen=True)
class ImageResult:
    """A generated image and where it came from."""

    url: str
    prompt: str
    provider: str
    model: Optional[str] = None


class VideoStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (VideoStatus.COMPLETED, VideoStatus.FAILED)


class JobState(str, Enum):
    """Client-side lifecycle of an animation job."""

    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class VideoJob:
    """
    Handle for one asynchronous animation job.

    Created by submission and updated in place by each poll. ``poll_lock``
    serializes polls of the same job.
    """

    job_id: str
    status: VideoStatus = VideoStatus.PENDING
    progress: float = 0.0
    message: str = ""
    result_url: Optional[str] = None
    poll_count: int = 0
    error: Optional[Exception] = None
    logs: List[str] = field(default_factory=list)
    poll_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def state(self) -> JobState:
        if self.status is VideoStatus.COMPLETED:
            return JobState.COMPLETED
        if self.status is VideoStatus.FAILED:
            return JobState.FAILED
        return JobState.SUBMITTED if self.poll_count == 0 else JobState.POLLING

    @property
    def terminal(self) -> bool:
        return self.status.terminal


@dataclass(frozen=True)
class VoiceoverResult:
    """Synthesized speech audio."""

    audio: bytes
    format: str
    text: str
    voice: str


@dataclass(frozen=True)
class CachedToken:
    """A bearer token and the absolute instant it expires, on the cache's clock."""

    token: str
    expires_at: float

    def valid_for(self, margin: float, now: float) -> bool:
        return self.expires_at - margin > now


@dataclass(frozen=True)
class AssetBundle:
    """Everything produced by one bundle request."""

    prompt: GenerationPrompt
    image: ImageResult
    video: Optional[VideoJob] = None
    voiceover: Optional[VoiceoverResult] = None
