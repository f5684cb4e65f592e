"""Exception hierarchy shared across the toolkit.

Every failure surfaces as one of these, never as a sentinel value. The concrete classes also derive from the builtin
exception a caller would naturally expect, so `except ValueError` keeps working for contract violations.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class NumberTheoryError(Exception):
    """Base class for all errors raised by ntutils."""


class DegenerateInputError(NumberTheoryError, ValueError):
    """A caller contract was violated, e.g. a non-positive modulus or a negative exponent."""


class KeyGenerationFailed(NumberTheoryError, RuntimeError):
    """Generated primes did not satisfy the RSA preconditions. Retrying with fresh primes may succeed."""


class SearchExhausted(NumberTheoryError, RuntimeError):
    """A rejection sampler hit its iteration cap without finding a result."""
