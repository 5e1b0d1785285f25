"""Hysteresis for binary face states such as eye open/closed"""

from typing import Optional

from facespotter.models.features import UNCOMPUTED_PROBABILITY


class BinaryStateFilter:
    """Thresholds a probability, holding the last decision when it is missing.

    Intermediate frames often lack the landmarks a classifier needs and the
    detector reports the probability as uncomputed. For those frames the last
    accepted value is reused instead of flickering to a default.

    Attributes:
        threshold: Probabilities strictly above this are True
        initial: Value reported before any probability was accepted
        uncomputed: Sentinel meaning the detector abstained
        value: Last accepted decision
    """

    def __init__(self, threshold: float, initial: bool = True,
                 uncomputed: float = UNCOMPUTED_PROBABILITY):
        self.threshold = threshold
        self.initial = initial
        self.uncomputed = uncomputed
        self.value = initial

    def apply(self, probability: Optional[float], threshold: Optional[float] = None,
              uncomputed_sentinel: Optional[float] = None) -> bool:
        """Turn a probability into a decision.

        Args:
            probability: Detector probability, the sentinel, or None
            threshold: Overrides the configured threshold for this call
            uncomputed_sentinel: Overrides the configured sentinel for this call

        Returns:
            ``probability > threshold``, or the previous decision if the
            probability is uncomputed
        """
        if threshold is None:
            threshold = self.threshold
        if uncomputed_sentinel is None:
            uncomputed_sentinel = self.uncomputed

        if probability is None or probability == uncomputed_sentinel:
            return self.value

        self.value = probability > threshold
        return self.value

    def reset(self) -> None:
        self.value = self.initial
