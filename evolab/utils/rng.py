"""
Thread-local random source.

Operators draw from this module instead of the global ``random`` state so that
parallel evaluation and mutation never contend on a shared generator. Each
thread owns a numpy ``Generator`` spawned from one root ``SeedSequence``.
"""

import threading
from typing import List, Optional

import numpy as np
from numpy.random import Generator, SeedSequence, default_rng

from evolab.exceptions import SampleSizeError


_lock = threading.Lock()
_local = threading.local()
_root = SeedSequence()
_epoch = 0


def seed(value: Optional[int] = None) -> None:
    """Reseed the root sequence and invalidate every thread's generator.

    Args:
        value: Entropy for the root ``SeedSequence``. None draws fresh entropy.
    """
    global _root, _epoch
    with _lock:
        _root = SeedSequence(value)
        _epoch += 1


def get_rng() -> Generator:
    """Return the calling thread's generator, spawning it on first use."""
    if getattr(_local, "epoch", None) != _epoch:
        with _lock:
            child = _root.spawn(1)[0]
            epoch = _epoch
        _local.rng = default_rng(child)
        _local.epoch = epoch
    return _local.rng


def bernoulli(probability: float) -> bool:
    """Bernoulli trial: True with the given probability.

    A draw in [0, 1) succeeds when it is strictly below ``probability``, so a
    probability of 0 never succeeds and 1 always does.
    """
    return bool(get_rng().random() < probability)


def uniform(low: float, high: float) -> float:
    """Uniform float in [low, high)."""
    value = float(get_rng().uniform(low, high))
    # numpy may round up to ``high`` for wide intervals
    if value >= high and high > low:
        value = float(np.nextafter(high, low))
    return value


def uniform_int(low: int, high: int) -> int:
    """Uniform integer in [low, high)."""
    return int(get_rng().integers(low, high))


def uniform_index(size: int) -> int:
    """Uniform index in [0, size)."""
    if size <= 0:
        raise SampleSizeError(1, size, "sequence")
    return int(get_rng().integers(0, size))


def distinct_indices(count: int, low: int, high: int) -> List[int]:
    """Draw ``count`` distinct integers uniformly from the closed range [low, high].

    Raises:
        SampleSizeError: If the range holds fewer than ``count`` integers.
    """
    available = high - low + 1
    if count > available or available <= 0:
        raise SampleSizeError(count, max(available, 0), "range of indices")
    picks = get_rng().choice(available, size=count, replace=False)
    return [low + int(i) for i in picks]


def shuffled(values: List[int]) -> List[int]:
    """Return a shuffled copy of ``values``."""
    result = list(values)
    get_rng().shuffle(result)
    return result
