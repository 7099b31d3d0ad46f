from __future__ import annotations

import logging
from typing import Protocol

from .model import CorrectionRequest

logger = logging.getLogger(__name__)


class CorrectionNotifier(Protocol):
    """Hook for telling other parties about correction events.

    Delivery belongs to an external notification service; failures raised here
    are logged by the caller and never undo the state transition.
    """

    def submitted(self, request: CorrectionRequest) -> None:
        raise NotImplementedError

    def decided(self, request: CorrectionRequest) -> None:
        raise NotImplementedError


class LoggingNotifier:
    """Default notifier: records the event in the application log."""

    def submitted(self, request: CorrectionRequest) -> None:
        logger.info(
            f"Correction {request.request_id} submitted by worker {request.worker_id} "
            f"for {request.target_day} ({request.missing_field.value})"
        )

    def decided(self, request: CorrectionRequest) -> None:
        logger.info(
            f"Correction {request.request_id} {request.status.value} by approver {request.approver_id}"
        )
