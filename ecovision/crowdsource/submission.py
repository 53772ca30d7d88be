"""
Citizen submission flow
Capture a photo, wait for its classification, then build a report draft
"""

import logging
from typing import Optional

from ecovision.core.exceptions import IncompleteSubmission, UnknownClassification
from ecovision.core.geo_utils import Location, validate_coordinate
from ecovision.crowdsource.photo_analyzer import (
    ClassificationRequest,
    ClassificationService,
)
from ecovision.crowdsource.report_store import ImageData, ReportDraft

logger = logging.getLogger(__name__)


class SubmissionFlow:
    """
    One in-progress citizen submission.

    Holds at most one meaningful classification: capturing a new image
    cancels whatever the previous capture started.
    """

    def __init__(self, service: ClassificationService):
        self.service = service
        self.image: Optional[ImageData] = None
        self.description: str = ""
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def request(self) -> Optional[ClassificationRequest]:
        if self._token is None:
            return None
        try:
            return self.service.get(self._token)
        except UnknownClassification:
            # forgotten once retention expired
            return None

    @property
    def is_analyzing(self) -> bool:
        request = self.request
        return request is not None and request.is_pending

    @property
    def is_ready(self) -> bool:
        request = self.request
        return self.image is not None and request is not None and request.is_completed

    def capture_image(self, image: ImageData) -> str:
        """Attach a photo and start classifying it."""
        self._drop_request()
        self.image = image
        self._token = self.service.classify(image)
        return self._token

    def remove_image(self) -> None:
        """Detach the photo; any pending classification is cancelled."""
        self._drop_request()
        self.image = None

    def describe(self, text: str) -> None:
        self.description = text or ""

    def build_draft(self, location: Location) -> ReportDraft:
        """
        Turn the flow into a submittable draft.

        Raises:
            IncompleteSubmission: if no image was captured or its
                classification has not completed
        """
        if not self.is_ready:
            raise IncompleteSubmission(
                "Capture a photo and wait for its analysis before submitting"
            )
        validate_coordinate(location.lat, location.lng)

        request = self.request
        return ReportDraft(
            location=location,
            image=self.image,
            description=self.description,
            type=request.pollution_type,
            level=request.level,
        )

    def reset(self) -> None:
        self.remove_image()
        self.description = ""

    def _drop_request(self) -> None:
        if self._token is not None:
            self.service.discard(self._token)
            logger.debug(f"Submission dropped classification {self._token}")
            self._token = None
