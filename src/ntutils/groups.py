"""Generators of the multiplicative group modulo a safe prime.

For a safe prime p = 2q + 1 the group (Z/pZ)* has order 2q, so its only subgroups have order 1, 2, q and 2q. An
element whose square and q-th power both differ from 1 lies in none of the proper subgroups and therefore generates
the whole group. This makes testing a candidate two exponentiations, and a random candidate succeeds about half the
time.

Typical usage example:

    p, g = find_prime_and_generator(128, 20)
    group = SafePrimeGroup.generate(128, 20)
    h = group.exp(secret)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random
import typing

from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.type import namedtype
from pyasn1.type import univ

from ntutils import codec
from ntutils import sampling
from ntutils.arith import modpow
from ntutils.errors import DegenerateInputError
from ntutils.keygen import random_n_bit_safe_prime

logger = logging.getLogger(__name__)


class DHParameter(univ.Sequence):
    """PKCS#3 Diffie-Hellman domain parameters, not shipped by pyasn1-modules."""
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("prime", univ.Integer()),
        namedtype.NamedType("base", univ.Integer()),
        namedtype.OptionalNamedType("privateValueLength", univ.Integer()),
    )


def is_generator(g: int, p: int) -> bool:
    """Checks whether `g` generates (Z/pZ)* for the safe prime `p`.

    Args:
        g: The candidate element.
        p: A safe prime.

    Returns:
        True if `g` has order p - 1. Such an element also satisfies `g**2 % p != g` and `g**q % p != g`.
    """
    if not 0 < g < p:
        return False
    q = (p - 1) // 2
    return modpow(g, 2, p) != 1 and modpow(g, q, p) != 1


def find_generator(p: int,
                   rng: random.Random | None = None,
                   sequential: bool = False,
                   max_iters: int | None = None) -> int:
    """Finds a generator of (Z/pZ)* for the safe prime `p`.

    Args:
        p: A safe prime, at least 5.
        rng: Random source for the candidates. Defaults to the configured source.
        sequential: Walk the candidates upward from 1 instead of sampling them. Deterministic, but always yields the
            smallest generator.
        max_iters: Optional cap on the number of candidates tried.

    Returns:
        A generator of the group.

    Raises:
        DegenerateInputError: If `p < 5`.
        SearchExhausted: If `max_iters` candidates were rejected.
    """
    if p < 5:
        raise DegenerateInputError("p must be a safe prime >= 5")
    rng = sampling.resolve(rng)
    for i in sampling.attempts(max_iters, f"generator modulo {p.bit_length()}-bit prime"):
        g = i % (p - 1) + 1 if sequential else rng.randrange(1, p)
        if is_generator(g, p):
            return g
    raise AssertionError("unreachable")


def find_prime_and_generator(n: int,
                             certainty: int,
                             rng: random.Random | None = None,
                             max_iters: int | None = None) -> tuple[int, int]:
    """Draws a safe prime from `[2**n, 2**(n + 1))` together with a generator of its group.

    Args:
        n: Bit-length parameter of the safe prime, as in `keygen.random_n_bit_number`.
        certainty: Number of Miller-Rabin rounds for the safe prime test.
        rng: Random source. Defaults to the configured source.
        max_iters: Optional cap, applied to the prime search and the generator search separately.

    Returns:
        The pair (p, g).
    """
    rng = sampling.resolve(rng)
    p = random_n_bit_safe_prime(n, certainty, rng, max_iters)
    g = find_generator(p, rng, max_iters=max_iters)
    logger.debug("Found generator for %d-bit safe prime", p.bit_length())
    return p, g


class SafePrimeGroup(typing.NamedTuple):
    """The group (Z/pZ)* of a safe prime p = 2q + 1, with generator g.

    Attributes:
        p: The safe prime.
        q: The Sophie Germain prime (p - 1) / 2.
        g: A generator of the whole group.
    """
    p: int
    q: int
    g: int

    @classmethod
    def generate(cls,
                 n: int,
                 certainty: int,
                 rng: random.Random | None = None,
                 max_iters: int | None = None) -> "SafePrimeGroup":
        p, g = find_prime_and_generator(n, certainty, rng, max_iters)
        return cls(p, (p - 1) // 2, g)

    def exp(self, x: int) -> int:
        """The discrete-logarithm one-way function, `g**x mod p`."""
        return modpow(self.g, x, self.p)

    def contains(self, h: int) -> bool:
        """Whether `h` is an element of (Z/pZ)*, i.e. a valid image of `exp`."""
        return 0 < h < self.p

    def to_pem(self) -> str:
        """Serializes the group as PKCS#3 `DH PARAMETERS`."""
        params = DHParameter()
        params["prime"] = self.p
        params["base"] = self.g
        return codec.encode_pem("PKCS3_DH", encoder.encode(params))

    @classmethod
    def from_pem(cls, text: str) -> "SafePrimeGroup":
        """Reads PKCS#3 `DH PARAMETERS`.

        Raises:
            ValueError: If the armour or the encoded prime is malformed.
        """
        params, _ = decoder.decode(codec.decode_pem("PKCS3_DH", text), asn1Spec=DHParameter())
        p, g = int(params["prime"]), int(params["base"])
        if p < 5 or p % 2 == 0:
            raise ValueError("Encoded prime cannot be a safe prime.")
        return cls(p, (p - 1) // 2, g)
