"""Probabilistic primality testing, mainly focusing on the Miller-Rabin test.

A single Miller-Rabin round either proves a candidate composite or merely gathers confidence that it is prime, so a
verdict of "prime" is only ever probable. Rounds are aggregated sequentially by `miller_rabin` or fanned out over a
thread pool by `concurrent_miller_rabin`. Trial division by cached small primes is available as a cheap pre-filter.

Typical usage example:

    miller_rabin(479001599, 20)
    concurrent_miller_rabin(479001599, 20, seed=123)
    check_prime(2**127 - 1)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import concurrent.futures
import logging
import random

from ntutils import sampling
from ntutils.arith import modpow
from ntutils.errors import DegenerateInputError

logger = logging.getLogger(__name__)

DEFAULT_SIEVE_LIMIT: int = 10000

_SMALL_PRIMES: list[int] = []
_SMALL_PRIMES_CAP: int = 0


def _sieve(n: int = DEFAULT_SIEVE_LIMIT) -> list[int]:
    """Implements the Sieve of Eratosthenes.

    Uses the textbook Sieve of Eratosthenes to generate a set of primes up to `n`.
    Includes memory space optimization and sieving until root.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.

    Returns:
        A list of primes up to `n`.
    """
    if n < 2:
        return []
    i_size = (n - 1) // 2
    candidate: list[bool] = [True] * i_size
    for i in range(int(n**0.5) // 2):
        if candidate[i]:
            r = 2 * i + 3
            for j in range((r * r - 3) // 2, i_size, r):
                candidate[j] = False
    return [2] + [(no * 2 + 3) for no, ele in enumerate(candidate) if ele]


def get_pre_primes(n: int = DEFAULT_SIEVE_LIMIT, change: bool = False) -> list[int]:
    """Get the small primes, automatically generating if necessary.

    Uses `_SMALL_PRIMES` as a cache. Regeneration occurs if the requested range is greater, forced by `change` or
    the cache is empty.

    Args:
        n: The number up to which to generate primes. Defaults to 10000. Must be >= 0.
        change: Whether to force a recomputation of primes. Defaults to False.

    Returns:
        List of primes in ascending order. All primes at least to `n` or more unless `change` is True.

    Raises:
        ValueError: If `n` is negative.
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    global _SMALL_PRIMES
    global _SMALL_PRIMES_CAP
    if n > _SMALL_PRIMES_CAP or change or not _SMALL_PRIMES:
        _SMALL_PRIMES = _sieve(n)
        _SMALL_PRIMES_CAP = n
    return _SMALL_PRIMES


def trial_division(no: int, n: int = DEFAULT_SIEVE_LIMIT) -> bool:
    """Check the provided `no` against the known small primes.

    Never rejects a prime, so it is safe as a pre-filter in front of Miller-Rabin.

    Args:
         no: The number to check.
         n: Bound of the small primes used, passed to `get_pre_primes()`.

    Returns:
        False if `no` cannot be prime, True otherwise.
    """
    if no < 2:
        return False
    for prime in get_pre_primes(n):
        if prime**2 > no:
            return True
        if no % prime == 0:
            return False
    return True


def _trivial_verdict(n: int) -> bool | None:
    """Answer exactly for the candidates outside the witness range, None otherwise."""
    if n < 2:
        return False
    if n <= 3:
        return True
    if n % 2 == 0:
        return False
    return None


def _decompose(n: int) -> tuple[int, int]:
    """Write `n - 1` as `d * 2**s` with `d` odd."""
    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1
    return d, s


def witness_test(n: int, rng: random.Random) -> bool:
    """Performs a single Miller-Rabin round with a fresh random witness.

    Args:
        n: Odd integer greater than 4 to be tested.
        rng: Source for the witness, drawn uniformly from `[2, n - 2]`.

    Returns:
        False if the witness proves `n` composite, True if `n` is probably prime.
    """
    d, s = _decompose(n)
    a = rng.randrange(n - 3) + 2
    x = modpow(a, d, n)
    if x == 1 or x == n - 1:
        return True
    for _ in range(s - 1):
        x = (x * x) % n
        if x == 1:
            # Nontrivial square root of unity.
            return False
        if x == n - 1:
            return True
    return False


def miller_rabin(n: int, num_tests: int, rng: random.Random | None = None) -> bool:
    """Checks if the number is prime, using the Miller-Rabin test.

    May return false positives, with probability at most `4**-num_tests`. Never rejects a prime. The first
    composite verdict ends the test.

    Args:
        n: The candidate.
        num_tests: Number of independent rounds. Must be >= 1.
        rng: Random source for the witnesses. Defaults to the configured source.

    Returns:
        True if `n` is probably prime, False if it is certainly composite.

    Raises:
        DegenerateInputError: If `num_tests < 1`.
    """
    if num_tests < 1:
        raise DegenerateInputError("num_tests must be >= 1")
    verdict = _trivial_verdict(n)
    if verdict is not None:
        return verdict
    rng = sampling.resolve(rng)
    for _ in range(num_tests):
        if not witness_test(n, rng):
            return False
    return True


def concurrent_miller_rabin(n: int,
                            num_tests: int,
                            seed: int | None = None,
                            max_workers: int | None = None,
                            executor: concurrent.futures.Executor | None = None) -> bool:
    """Runs the Miller-Rabin rounds concurrently, one task per round.

    Each task owns a random source seeded with `seed + index`, so no generator is shared between threads. Verdicts
    are consumed in completion order: the first composite verdict is returned immediately, "prime" is only returned
    once every task has reported. On an early return the tasks still queued are cancelled and the pool is shut down
    without blocking, running tasks finish on their own and their threads are reaped by the pool.

    Args:
        n: The candidate.
        num_tests: Number of rounds, and of tasks. Must be >= 1.
        seed: Base seed for the per-task sources. None draws each task's witnesses from OS entropy.
        max_workers: Pool size when the pool is created here. Defaults to the `ThreadPoolExecutor` default.
        executor: Run the tasks on this executor instead of a private thread pool. It is left running.

    Returns:
        True if `n` is probably prime, False if it is certainly composite.

    Raises:
        DegenerateInputError: If `num_tests < 1`.
    """
    if num_tests < 1:
        raise DegenerateInputError("num_tests must be >= 1")
    verdict = _trivial_verdict(n)
    if verdict is not None:
        return verdict
    pool = executor
    if pool is None:
        pool = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="miller-rabin")
    futures = [pool.submit(witness_test, n, sampling.worker_source(seed, i)) for i in range(num_tests)]
    try:
        for future in concurrent.futures.as_completed(futures):
            if not future.result():
                logger.debug("Composite verdict for %d-bit candidate, abandoning remaining rounds", n.bit_length())
                return False
        return True
    finally:
        if executor is None:
            pool.shutdown(wait=False, cancel_futures=True)
        else:
            for future in futures:
                future.cancel()


def check_prime(candidate: int, iters: int | None = None, rng: random.Random | None = None) -> bool:
    """Performs a composite Primality test, using a limited amount of trial divisions, before a Miller-Rabin test.

    Args:
        candidate: The candidate prime to test.
        iters: Number of Miller-Rabin iterations to perform.
            If not provided will use defaults as per the FIPS 186-5 Appendix C.1
        rng: Random source for the witnesses. Defaults to the configured source.

    Returns:
        True if `candidate` is probably prime, False otherwise.
    """
    if candidate < 2:
        return False
    if not trial_division(candidate):
        return False
    if iters is None:
        if candidate.bit_length() <= 512:
            iters = 40
        elif candidate.bit_length() <= 1024:
            iters = 56
        elif candidate.bit_length() <= 1536:
            iters = 64
        elif candidate.bit_length() <= 2048:
            iters = 70
        else:
            iters = 74
    return miller_rabin(candidate, iters, rng)
