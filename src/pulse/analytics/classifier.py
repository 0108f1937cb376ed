"""Sleep/wake classifier boundary.

The trained classifier lives outside this package.  Anything with a
``predict(features) -> int`` method, or a plain callable with the same
signature, can be plugged in; 1 means asleep and 0 means awake.

:class:`MotionThresholdClassifier` is a small actigraphy baseline for when
no trained model is available.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence, Union, runtime_checkable

from pulse.analytics.features import FEATURE_VECTOR_LENGTH

AWAKE = 0
ASLEEP = 1


class ClassifierError(Exception):
    """A classifier could not be loaded or returned an invalid label."""


@runtime_checkable
class Classifier(Protocol):
    def predict(self, features: Sequence[float]) -> int:
        ...


ClassifierLike = Union[Classifier, Callable[[Sequence[float]], int]]


def as_predict(classifier: ClassifierLike) -> Callable[[Sequence[float]], int]:
    """Return the prediction function of *classifier*."""
    if isinstance(classifier, Classifier):
        return classifier.predict
    if callable(classifier):
        return classifier
    raise ClassifierError(f"{classifier!r} is neither callable nor has predict()")


def predict_asleep(predict: Callable[[Sequence[float]], int], features: Sequence[float]) -> bool:
    """Run *predict* and map its 0/1 label to a bool."""
    label = predict(features)
    if label == ASLEEP:
        return True
    if label == AWAKE:
        return False
    raise ClassifierError(f"Classifier returned {label!r}; expected 0 or 1")


def load_classifier(spec: str) -> ClassifierLike:
    """Import a classifier from a ``"package.module:attribute"`` string.

    If the attribute is a class it is instantiated with no arguments.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ClassifierError(f"Expected 'module:attribute', got {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ClassifierError(f"Cannot import {module_name!r}: {e}") from e

    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ClassifierError(f"{module_name!r} has no attribute {attr!r}") from e

    if isinstance(obj, type):
        obj = obj()
    as_predict(obj)
    return obj


@dataclass
class MotionThresholdClassifier:
    """Asleep when the wrist is still and heart rate is not climbing.

    Uses positions of the standard 11-element feature vector:
      - vm_std_short (7) and vm_std_long (10) must both be below their limits
      - hr_mean_short (0) must not exceed hr_mean_long (4) by more than
        *hr_rise_bpm*
    """

    vm_std_short_max: float = 0.02
    vm_std_long_max: float = 0.05
    hr_rise_bpm: float = 5.0

    def predict(self, features: Sequence[float]) -> int:
        if len(features) != FEATURE_VECTOR_LENGTH:
            raise ClassifierError(
                f"Expected {FEATURE_VECTOR_LENGTH} features, got {len(features)}"
            )
        still = (
            features[7] < self.vm_std_short_max
            and features[10] < self.vm_std_long_max
        )
        calm = features[0] - features[4] <= self.hr_rise_bpm
        return ASLEEP if still and calm else AWAKE
