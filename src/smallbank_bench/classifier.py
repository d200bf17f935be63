import logging
from dataclasses import dataclass
from enum import Enum

from .constants import RECOGNIZED_ERROR_MESSAGES
from .errors import FatalResponseError
from .transport import Response

logger = logging.getLogger(__name__)


class Outcome(Enum):
    ACCEPTED = "accepted"
    RECOGNIZED_REJECTION = "recognized_rejection"
    FATAL = "fatal"


@dataclass(frozen=True)
class Classification:
    outcome: Outcome
    message: str = ""

    @property
    def is_fatal(self) -> bool:
        return self.outcome is Outcome.FATAL


def is_recognized_rejection(body_text: str) -> bool:
    """Return True if a failure body is one of the expected business-rule rejections."""
    return any(message in body_text for message in RECOGNIZED_ERROR_MESSAGES)


def classify(response: Response) -> Classification:
    """
    Classify a service response.

    Successful statuses are accepted. Failures are recognized rejections when
    the body contains one of the expected business-rule messages, and fatal
    otherwise.
    """
    if response.ok:
        return Classification(Outcome.ACCEPTED)

    body_text = response.text
    if is_recognized_rejection(body_text):
        return Classification(Outcome.RECOGNIZED_REJECTION, body_text)
    return Classification(Outcome.FATAL, body_text)


def check_response(response: Response, method: str = "") -> Classification:
    """
    Classify a response and abort on fatal failures.

    Args:
        response: Response returned by the transport
        method: Method name, used only in diagnostics

    Returns:
        Classification of a non-fatal response

    Raises:
        FatalResponseError: If the failure is not a recognized rejection
    """
    classification = classify(response)
    if classification.is_fatal:
        raise FatalResponseError(classification.message, method)
    if classification.outcome is Outcome.RECOGNIZED_REJECTION:
        logger.debug(f"{method} rejected: {classification.message}")
    return classification
