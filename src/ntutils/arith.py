"""Modular arithmetic primitives on arbitrary-precision integers.

Provides square-and-multiply exponentiation, the Euclidean algorithm and its extended form, and the modular inverse
derived from it. Everything else in the toolkit is built on these rather than on the builtin three-argument `pow`.

Typical usage example:

    modpow(3, 16, 3000)
    x, y = euclid(240, 46)
    d = normalize(invert(65537, phi), phi)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from ntutils.errors import DegenerateInputError


def modpow(base: int, exponent: int, modulus: int) -> int:
    """Computes `base**exponent % modulus` by square-and-multiply.

    Walks the exponent's bits from the lowest upward, multiplying the accumulator by the running square whenever a
    bit is set. Every intermediate is reduced modulo `modulus`.

    Args:
        base: Any integer, negative values are reduced first.
        exponent: Non-negative exponent.
        modulus: Positive modulus.

    Returns:
        The result in `[0, modulus)`.

    Raises:
        DegenerateInputError: If `modulus <= 0` or `exponent < 0`.
    """
    if modulus <= 0:
        raise DegenerateInputError("Modulus must be positive.")
    if exponent < 0:
        raise DegenerateInputError("Exponent must be non-negative.")
    result = 1 % modulus
    tmp = base % modulus
    while exponent:
        if exponent & 1:
            result = (result * tmp) % modulus
        tmp = (tmp * tmp) % modulus
        exponent >>= 1
    return result


def gcd(a: int, m: int) -> int:
    """Greatest common divisor by the iterative Euclidean algorithm."""
    while m != 0:
        a, m = m, a % m
    return a


def euclid(a: int, b: int) -> tuple[int, int]:
    """Implements the Extended Euclidean Algorithm.

    Such that a*x + b*y = gcd(a, b). Produces the same coefficients as the textbook recursion
    `euclid(a, b) = (t, s - (a // b) * t)` with `(s, t) = euclid(b, a % b)` and base case `(1, 0)`, but carries the
    coefficient pairs in a loop so the call depth stays constant.

    Args:
        a: The first natural number.
        b: The second natural number.

    Returns:
        The Bezout coefficients (x, y). Either may be negative.
    """
    r0, r1 = a, b
    s0, s1, t0, t1 = 1, 0, 0, 1
    while r1 != 0:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        s0, s1 = s1, s0 - q * s1
        t0, t1 = t1, t0 - q * t1
    return s0, t0


def invert(element: int, divisor: int) -> int:
    """Finds the inverse of `element` modulo `divisor`.

    The result is the raw Bezout coefficient and can be negative, e.g. `invert(101, 102) == -1`. Use `normalize` to
    obtain the representative in `[0, divisor)`.

    Args:
        element: The value to invert.
        divisor: The positive modulus.

    Returns:
        `x` such that `element * x % divisor == 1`.

    Raises:
        DegenerateInputError: If `divisor <= 0` or `element` has no inverse modulo `divisor`.
    """
    if divisor <= 0:
        raise DegenerateInputError("Divisor must be positive.")
    g = gcd(element, divisor)
    if g != 1:
        raise DegenerateInputError(f"{element} is not invertible modulo {divisor} (gcd is {g}).")
    s, _ = euclid(element, divisor)
    return s // g


def normalize(value: int, modulus: int) -> int:
    """Lift a possibly negative residue into `[0, modulus)` by repeated addition of `modulus`."""
    if modulus <= 0:
        raise DegenerateInputError("Modulus must be positive.")
    while value < 0:
        value += modulus
    return value
