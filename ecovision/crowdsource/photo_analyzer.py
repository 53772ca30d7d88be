"""
Photo analyzer for pollution reports
Classifies a captured image into a pollution type and severity level
"""

import asyncio
import logging
import random
import time
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ecovision.core.config import settings
from ecovision.core.constants import (
    POLLUTION_LEVELS,
    POLLUTION_TYPES,
    PollutionLevel,
    PollutionType,
)
from ecovision.core.exceptions import StaleClassification, UnknownClassification
from ecovision.crowdsource.report_store import ImageData

logger = logging.getLogger(__name__)


class ClassificationState(Enum):
    """Lifecycle of a classification request."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class ClassificationRequest:
    """A captured image waiting for (or holding) its classification."""
    token: str
    image: Optional[ImageData] = field(repr=False)
    state: ClassificationState = ClassificationState.PENDING
    pollution_type: Optional[PollutionType] = None
    level: Optional[PollutionLevel] = None
    error: Optional[str] = None
    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.state is ClassificationState.PENDING

    @property
    def is_completed(self) -> bool:
        return self.state is ClassificationState.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "token": self.token,
            "state": self.state.value,
            "type": self.pollution_type.value if self.pollution_type else None,
            "level": self.level.value if self.level else None,
            "error": self.error,
            "requested_at": self.requested_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class Classifier(ABC):
    """Strategy turning an image into a (type, level) pair."""

    @abstractmethod
    def classify(self, image: ImageData) -> Tuple[PollutionType, PollutionLevel]:
        """Return the pollution type and severity seen in the image."""


class PhotoAnalyzer(Classifier):
    """
    Stand-in image model.

    Draws type and level uniformly at random from the fixed enumerations.
    Pass a seed to make the outcome reproducible.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize photo analyzer.

        Args:
            seed: Seed for a private random generator
            rng: Random generator to use instead (takes precedence)
        """
        self._rng = rng or random.Random(seed)

    def classify(self, image: ImageData) -> Tuple[PollutionType, PollutionLevel]:
        if not image:
            raise ValueError("Cannot classify an empty image")

        pollution_type = self._rng.choice(POLLUTION_TYPES)
        level = self._rng.choice(POLLUTION_LEVELS)
        return pollution_type, level


class ClassificationService:
    """
    Runs classifications as deferred tasks on the running event loop.

    A result is only applied if its request is still pending when the
    latency window ends; cancelled or superseded requests drop it.

    Finished requests stay pollable for retention_seconds, and no more
    than max_finished of them are held; the oldest are forgotten first.
    Cancelled and failed requests give up their image right away.
    """

    def __init__(
        self,
        classifier: Optional[Classifier] = None,
        latency_seconds: Optional[float] = None,
        retention_seconds: Optional[float] = None,
        max_finished: Optional[int] = None
    ):
        """
        Initialize classification service.

        Args:
            classifier: Classification strategy (defaults to PhotoAnalyzer)
            latency_seconds: Delay before a result is produced
            retention_seconds: How long a finished request stays pollable
            max_finished: Cap on finished requests held at once
        """
        self.classifier = classifier or PhotoAnalyzer(seed=settings.classifier_seed)
        self.latency_seconds = (
            settings.classification_latency_seconds
            if latency_seconds is None else max(0.0, latency_seconds)
        )
        self.retention_seconds = (
            settings.classification_retention_seconds
            if retention_seconds is None else max(0.0, retention_seconds)
        )
        self.max_finished = (
            settings.max_finished_classifications
            if max_finished is None else max(0, max_finished)
        )

        self._requests: Dict[str, ClassificationRequest] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        # token -> monotonic finish time, oldest first
        self._finished: "OrderedDict[str, float]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._requests)

    def classify(self, image: ImageData) -> str:
        """
        Start classifying an image.

        Must be called from code running inside an event loop.

        Args:
            image: Captured image bytes or reference

        Returns:
            Token identifying the request
        """
        if not image:
            raise ValueError("Cannot classify an empty image")

        loop = asyncio.get_running_loop()
        self._evict()

        token = uuid.uuid4().hex
        self._requests[token] = ClassificationRequest(token=token, image=image)

        task = loop.create_task(self._run(token))
        self._tasks[token] = task
        task.add_done_callback(lambda _: self._tasks.pop(token, None))

        logger.info(f"Classification {token} started")
        return token

    def cancel(self, token: str) -> bool:
        """
        Cancel a pending request.

        Returns:
            True if the request was pending and is now cancelled

        Raises:
            UnknownClassification: if the token is unknown
        """
        request = self.get(token)
        if not request.is_pending:
            return False

        self._finish(request, ClassificationState.CANCELLED)
        logger.info(f"Classification {token} cancelled")
        return True

    def get(self, token: str) -> ClassificationRequest:
        request = self._requests.get(token)
        if request is None:
            raise UnknownClassification(token)
        return request

    async def wait(self, token: str) -> ClassificationRequest:
        """Wait until the request leaves the pending state and return it."""
        request = self.get(token)
        task = self._tasks.get(token)
        if request.is_pending and task is not None:
            await asyncio.shield(task)
        return request

    def discard(self, token: str) -> None:
        """Forget a request; a pending one is cancelled first."""
        if token in self._requests:
            self.cancel(token)
            self._requests.pop(token, None)
            self._finished.pop(token, None)

    @property
    def pending_count(self) -> int:
        return sum(1 for r in self._requests.values() if r.is_pending)

    async def _run(self, token: str) -> None:
        await asyncio.sleep(self.latency_seconds)

        request = self._requests.get(token)
        if request is None or not request.is_pending:
            logger.debug(f"Classification {token} no longer current, skipping model")
            return

        try:
            pollution_type, level = self.classifier.classify(request.image)
        except Exception as e:
            logger.error(f"Classification {token} failed: {e}")
            request.error = str(e)
            self._finish(request, ClassificationState.FAILED)
            return

        try:
            self._complete(token, pollution_type, level)
        except StaleClassification as e:
            logger.debug(str(e))

    def _complete(
        self,
        token: str,
        pollution_type: PollutionType,
        level: PollutionLevel
    ) -> ClassificationRequest:
        request = self._requests.get(token)
        if request is None or not request.is_pending:
            raise StaleClassification(token)

        request.pollution_type = PollutionType(pollution_type)
        request.level = PollutionLevel(level)
        self._finish(request, ClassificationState.COMPLETED)

        logger.info(f"Classification {token} completed: {request.pollution_type.value}, {request.level.value}")
        return request

    def _finish(self, request: ClassificationRequest, state: ClassificationState) -> None:
        request.state = state
        request.completed_at = datetime.now(timezone.utc)
        # Only a completed request can still become a report
        if state is not ClassificationState.COMPLETED:
            request.image = None

        self._finished[request.token] = time.monotonic()
        self._evict()

    def _evict(self) -> None:
        """Forget finished requests past the retention window or over the cap."""
        cutoff = time.monotonic() - self.retention_seconds
        while self._finished:
            token, finished_at = next(iter(self._finished.items()))
            if finished_at > cutoff and len(self._finished) <= self.max_finished:
                break
            del self._finished[token]
            self._requests.pop(token, None)
            logger.debug(f"Classification {token} forgotten")


def classify_photo(
    image: ImageData,
    seed: Optional[int] = None
) -> Tuple[PollutionType, PollutionLevel]:
    """
    Convenience function to classify a photo synchronously.

    Args:
        image: Image bytes or reference
        seed: Optional random seed

    Returns:
        (type, level) pair
    """
    analyzer = PhotoAnalyzer(seed=seed)
    return analyzer.classify(image)
