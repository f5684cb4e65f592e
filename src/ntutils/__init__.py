"""Arbitrary-precision Number Theory Utilities in an Academic Sense.

Provides probabilistic primality testing (Miller-Rabin, sequential and concurrent), random prime and safe-prime
generation, generators of safe-prime groups, and textbook RSA built on top of them. All arithmetic is done with the
toolkit's own square-and-multiply and Euclidean routines.

Typical usage example:

    miller_rabin(479001599, 20)
    p, g = find_prime_and_generator(128, 20)
    encoded, e, n, d = rsa(1234, 256, 40)
    rsa_trapdoor(encoded, n, d)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
from ntutils.arith import euclid
from ntutils.arith import gcd
from ntutils.arith import invert
from ntutils.arith import modpow
from ntutils.arith import normalize
from ntutils.errors import DegenerateInputError
from ntutils.errors import KeyGenerationFailed
from ntutils.errors import NumberTheoryError
from ntutils.errors import SearchExhausted
from ntutils.groups import find_generator
from ntutils.groups import find_prime_and_generator
from ntutils.groups import is_generator
from ntutils.groups import SafePrimeGroup
from ntutils.keygen import generate_key_pair
from ntutils.keygen import random_n_bit_number
from ntutils.keygen import random_n_bit_prime
from ntutils.keygen import random_n_bit_safe_prime
from ntutils.primality import check_prime
from ntutils.primality import concurrent_miller_rabin
from ntutils.primality import miller_rabin
from ntutils.rsa import rsa
from ntutils.rsa import rsa_trapdoor
from ntutils.rsa import RSAPrivKey
from ntutils.rsa import RSAPubKey
from ntutils.sampling import seeded
from ntutils.sampling import set_random_source

__version__ = "0.0.1"
__all__ = [
    "modpow",
    "gcd",
    "euclid",
    "invert",
    "normalize",
    "miller_rabin",
    "concurrent_miller_rabin",
    "check_prime",
    "random_n_bit_number",
    "random_n_bit_prime",
    "random_n_bit_safe_prime",
    "generate_key_pair",
    "is_generator",
    "find_generator",
    "find_prime_and_generator",
    "SafePrimeGroup",
    "rsa",
    "rsa_trapdoor",
    "RSAPrivKey",
    "RSAPubKey",
    "seeded",
    "set_random_source",
    "NumberTheoryError",
    "DegenerateInputError",
    "KeyGenerationFailed",
    "SearchExhausted",
]
