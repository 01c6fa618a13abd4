from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional, Union

DEFAULT_MATCH_THRESHOLD = 0.95

ObjectPolarity = Literal["bright", "dark"]


@dataclass(frozen=True, slots=True)
class BestMatch:
    """
    Report only the single highest-scoring peak.
    """


@dataclass(frozen=True, slots=True)
class ThresholdFiltered:
    """
    Report every peak whose score is at least ``threshold``.

    Values outside [0.5, 1.0] are accepted; they only move the cut-off.
    """

    threshold: float

    def __post_init__(self) -> None:
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            raise TypeError("threshold must be a real number")
        if math.isnan(self.threshold):
            raise ValueError("threshold must not be NaN")


MatchPolicy = Union[BestMatch, ThresholdFiltered]


def policy_from_threshold(threshold: Optional[float]) -> MatchPolicy:
    """
    Translate the nullable threshold vocabulary into a match policy.
    """
    if threshold is None:
        return BestMatch()
    return ThresholdFiltered(float(threshold))


@dataclass(frozen=True, slots=True)
class DetectorConfig:
    """
    Immutable settings for a detection run.
    """

    policy: MatchPolicy = ThresholdFiltered(DEFAULT_MATCH_THRESHOLD)
    absolute_scores: bool = False
    keep_surface: bool = False
    simplify_template: bool = False
    object_polarity: ObjectPolarity = "bright"

    def __post_init__(self) -> None:
        if not isinstance(self.policy, (BestMatch, ThresholdFiltered)):
            raise TypeError("policy must be BestMatch or ThresholdFiltered")
        if self.object_polarity not in ("bright", "dark"):
            raise ValueError(f"Unrecognized object_polarity: {self.object_polarity!r}")

    @classmethod
    def from_threshold(cls, threshold: Optional[float], **kwargs) -> "DetectorConfig":
        return cls(policy=policy_from_threshold(threshold), **kwargs)

    @property
    def match_threshold(self) -> Optional[float]:
        if isinstance(self.policy, ThresholdFiltered):
            return self.policy.threshold
        return None


__all__ = [
    "BestMatch",
    "DEFAULT_MATCH_THRESHOLD",
    "DetectorConfig",
    "MatchPolicy",
    "ObjectPolarity",
    "ThresholdFiltered",
    "policy_from_threshold",
]
