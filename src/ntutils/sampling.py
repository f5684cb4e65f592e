"""Random source configuration and search bookkeeping.

All sampling in the toolkit goes through a `random.Random`-compatible object. By default this is an OS-entropy backed
`secrets.SystemRandom`, but a deterministic source can be installed for reproducible runs, or passed per call.

Typical usage example:

    set_random_source(seeded(123))
    p = keygen.random_n_bit_prime(64, 20)
    set_random_source(None)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import itertools
import logging
import random
import secrets
from typing import Iterator

from ntutils.errors import DegenerateInputError
from ntutils.errors import SearchExhausted

logger = logging.getLogger(__name__)

_RANDOM_SOURCE: random.Random = secrets.SystemRandom()


def seeded(seed: int) -> random.Random:
    """Build a deterministic random source. Not suitable for real key material."""
    return random.Random(seed)


def set_random_source(rng: random.Random | None) -> None:
    """Install the process-wide default random source.

    Args:
        rng: The source to use when a call does not provide its own. None restores the cryptographically seeded
            default.
    """
    global _RANDOM_SOURCE
    _RANDOM_SOURCE = secrets.SystemRandom() if rng is None else rng


def get_random_source() -> random.Random:
    return _RANDOM_SOURCE


def resolve(rng: random.Random | None) -> random.Random:
    """Pick the explicitly provided source, falling back to the configured default."""
    return _RANDOM_SOURCE if rng is None else rng


def worker_source(seed: int | None, index: int) -> random.Random:
    """Provide an independent random source for a concurrent worker.

    Workers never share a generator. With a base `seed` each worker is seeded with `seed + index` so that witnesses
    are reproducible but uncorrelated, otherwise each worker draws from its own OS-entropy source.

    Args:
        seed: Base seed, or None for OS entropy.
        index: The worker's position in the fan-out.

    Returns:
        A random source owned by that worker alone.
    """
    if seed is None:
        return secrets.SystemRandom()
    return random.Random(seed + index)


def attempts(max_iters: int | None, what: str) -> Iterator[int]:
    """Counts iterations of a rejection sampler, enforcing an optional cap.

    Args:
        max_iters: Maximum number of iterations, or None to search without bound.
        what: Description of the searched value, used in the error message.

    Yields:
        The zero-based iteration number.

    Raises:
        DegenerateInputError: If `max_iters` is given and below 1.
        SearchExhausted: Once `max_iters` iterations were consumed without the caller returning.
    """
    if max_iters is None:
        yield from itertools.count()
        return
    if max_iters < 1:
        raise DegenerateInputError("max_iters must be >= 1")
    yield from range(max_iters)
    logger.debug("Search for %s exhausted after %d iterations", what, max_iters)
    raise SearchExhausted(f"No {what} found within {max_iters} attempts.")
