"""Random prime generation and RSA key pair generation.

Rejection samplers that draw uniformly from a bit-length range and keep the first candidate Miller-Rabin accepts.
Cheap necessary conditions (small-prime trial division, the residue of safe primes modulo 12) are checked first, but
never replace the Miller-Rabin verdict.

All samplers are unbounded by default. For tiny bit-lengths or unlucky sources they may in principle run for a long
time, so each accepts `max_iters` to turn that into a `SearchExhausted` error instead.

Typical usage example:

    p = random_n_bit_prime(256, 40)
    s = random_n_bit_safe_prime(128, 20)
    (n, e), (n, d, p, q) = generate_key_pair(512, 40)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random

from ntutils import sampling
from ntutils.arith import gcd
from ntutils.arith import invert
from ntutils.arith import normalize
from ntutils.errors import DegenerateInputError
from ntutils.errors import KeyGenerationFailed
from ntutils.primality import miller_rabin
from ntutils.primality import trial_division

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT: int = 2**16 + 1
DEFAULT_KEYGEN_ATTEMPTS: int = 8


def random_n_bit_number(n: int, rng: random.Random | None = None) -> int:
    """Returns a number drawn uniformly from `[2**n, 2**(n + 1))`.

    The result has exactly `n + 1` bits, its top bit set by construction.

    Raises:
        DegenerateInputError: If `n` is negative.
    """
    if n < 0:
        raise DegenerateInputError("n must be >= 0")
    rng = sampling.resolve(rng)
    base = 1 << n
    return base + rng.randrange(base)


def random_n_bit_prime(n: int,
                       certainty: int,
                       rng: random.Random | None = None,
                       max_iters: int | None = None) -> int:
    """Returns a random probable prime from `[2**n, 2**(n + 1))`.

    Args:
        n: Bit-length parameter, as in `random_n_bit_number`. Must be >= 1.
        certainty: Number of Miller-Rabin rounds a candidate has to pass.
        rng: Random source. Defaults to the configured source.
        max_iters: Optional cap on the number of candidates drawn.

    Returns:
        A probable prime.

    Raises:
        DegenerateInputError: If the range holds no primes or `certainty < 1`.
        SearchExhausted: If `max_iters` candidates were rejected.
    """
    if n < 1:
        raise DegenerateInputError("n must be >= 1 for the range to contain a prime")
    if certainty < 1:
        raise DegenerateInputError("certainty must be >= 1")
    rng = sampling.resolve(rng)
    for _ in sampling.attempts(max_iters, f"{n}-bit prime"):
        candidate = random_n_bit_number(n, rng)
        if trial_division(candidate) and miller_rabin(candidate, certainty, rng):
            return candidate
    raise AssertionError("unreachable")


def random_n_bit_safe_prime(n: int,
                            certainty: int,
                            rng: random.Random | None = None,
                            max_iters: int | None = None) -> int:
    """Like `random_n_bit_prime`, except it only returns safe primes.

    A safe prime p makes (p - 1) / 2 prime as well. Every safe prime above 7 is 11 modulo 12, candidates failing
    that are dropped before any primality work.

    Args:
        n: Bit-length parameter, as in `random_n_bit_number`. Must be >= 2.
        certainty: Number of Miller-Rabin rounds both p and (p - 1) / 2 have to pass.
        rng: Random source. Defaults to the configured source.
        max_iters: Optional cap on the number of candidates drawn.

    Returns:
        A probable safe prime.

    Raises:
        DegenerateInputError: If the range holds no safe primes or `certainty < 1`.
        SearchExhausted: If `max_iters` candidates were rejected.
    """
    if n < 2:
        raise DegenerateInputError("n must be >= 2 for the range to contain a safe prime")
    if certainty < 1:
        raise DegenerateInputError("certainty must be >= 1")
    rng = sampling.resolve(rng)
    for _ in sampling.attempts(max_iters, f"{n}-bit safe prime"):
        candidate = random_n_bit_number(n, rng)
        if candidate > 7 and candidate % 12 != 11:
            continue
        half = (candidate - 1) // 2
        if not (trial_division(candidate) and trial_division(half)):
            continue
        if miller_rabin(candidate, certainty, rng) and miller_rabin(half, certainty, rng):
            return candidate
    raise AssertionError("unreachable")


def generate_primes(bitlength: int, certainty: int, rng: random.Random | None = None) -> tuple[int, int]:
    """Generates the prime pair of an RSA modulus, each from `random_n_bit_prime(bitlength // 2)`.

    Raises:
        DegenerateInputError: If `bitlength < 2`.
    """
    if bitlength < 2:
        raise DegenerateInputError("bitlength must be >= 2")
    rng = sampling.resolve(rng)
    p = random_n_bit_prime(bitlength // 2, certainty, rng)
    q = random_n_bit_prime(bitlength // 2, certainty, rng)
    return p, q


def _derive_key(p: int, q: int, pub: int) -> tuple[int, int]:
    """Derive the modulus and private exponent, checking the RSA preconditions.

    Returns:
        (n, d) with d normalized into `[0, phi)`.

    Raises:
        KeyGenerationFailed: If the primes coincide, phi does not exceed `pub` or `pub` and phi share a factor.
    """
    if p == q:
        raise KeyGenerationFailed("Generated primes are not distinct.")
    phi = (p - 1) * (q - 1)
    if not phi > pub or gcd(pub, phi) != 1:
        raise KeyGenerationFailed(f"Public exponent {pub} is unusable with phi {phi}.")
    return p * q, normalize(invert(pub, phi), phi)


def generate_key_pair(bitlength: int,
                      certainty: int,
                      rng: random.Random | None = None,
                      pub: int = PUBLIC_EXPONENT,
                      max_attempts: int = DEFAULT_KEYGEN_ATTEMPTS) -> tuple[tuple[int, int], tuple[int, int, int, int]]:
    """Generates an RSA key pair.

    Primes that fail the preconditions are discarded and the whole pair is regenerated, at most `max_attempts`
    times.

    Args:
        bitlength: Nominal modulus size, each prime is drawn with `bitlength // 2`.
        certainty: Number of Miller-Rabin rounds per prime.
        rng: Random source. Defaults to the configured source.
        pub: The public exponent. Defaults to 65537.
        max_attempts: How many prime pairs to try.

    Returns:
        A tuple of (public, private) sub-tuples, (modulus, exponent) and (modulus, exponent, p, q).

    Raises:
        DegenerateInputError: If `max_attempts < 1`.
        KeyGenerationFailed: If no attempt satisfied the preconditions.
    """
    if max_attempts < 1:
        raise DegenerateInputError("max_attempts must be >= 1")
    rng = sampling.resolve(rng)
    logger.debug("Starting %d-bit RSA key generation", bitlength)
    for attempt in range(1, max_attempts + 1):
        p, q = generate_primes(bitlength, certainty, rng)
        try:
            n, d = _derive_key(p, q, pub)
        except KeyGenerationFailed as exc:
            logger.debug("Key generation attempt %d/%d failed: %s", attempt, max_attempts, exc)
            if attempt == max_attempts:
                raise
            continue
        logger.debug("Generated %d-bit modulus on attempt %d", n.bit_length(), attempt)
        return (n, pub), (n, d, p, q)
    raise AssertionError("unreachable")
