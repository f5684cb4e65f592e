"""Provides textbook RSA on top of the toolkit's own prime generation and modular arithmetic.

Handles the key objects, the raw RSA primitive (with CRT acceleration when the primes are known) and PKCS#1 PEM
serialization. The functional pair `rsa` / `rsa_trapdoor` generates a fresh key, encrypts with it and inverts the
encryption given only the modulus and private exponent.

No padding is applied anywhere, so this is not suitable for protecting real data.

Typical usage example:

    pk = RSAPrivKey.generate(512, 40)
    c = pk.pub.encrypt(1234)
    r = pk.decrypt(c)

    encoded, e, n, d = rsa(1234, 256, 40)
    assert rsa_trapdoor(encoded, n, d) == 1234
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import logging
import random
import typing

from pyasn1.codec.der import decoder
from pyasn1.codec.der import encoder
from pyasn1.codec.native import encoder as localize
from pyasn1_modules import rfc8017

from ntutils import codec
from ntutils import keygen
from ntutils.arith import invert
from ntutils.arith import modpow
from ntutils.arith import normalize
from ntutils.errors import DegenerateInputError

logger = logging.getLogger(__name__)


class RSAOutcome(typing.NamedTuple):
    """Result of `rsa`: the ciphertext and the key that produced it."""
    encoded: int
    e: int
    n: int
    d: int


class RSAKey:
    """The overall RSA key class implementation.

    Acts mostly as a template for the "core" components of a RSA Key that are strictly mandatory in both a public
    and a private key.

    Attributes:
        mod: The modulus of the keypair.
        expo: The exponent of the key, whether private or public.
    """

    def __init__(self, mod: int, expo: int) -> None:
        self.mod = mod
        self.expo = expo

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation. (Encrypt/Decrypt)

        Args:
            message: The int-marshalled message.

        Returns:
            `message**expo mod mod`.

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        return modpow(message, self.expo, self.mod)


class RSAPubKey(RSAKey):
    """A rather straightforward subclass of RSAKey, for Public Keys."""

    def encrypt(self, message: int) -> int:
        return self.c_rsa(message)

    def to_pem(self) -> str:
        """Export the Public RSA key as PKCS#1 PEM text."""
        keydata = rfc8017.RSAPublicKey()
        keydata["modulus"] = self.mod
        keydata["publicExponent"] = self.expo
        return codec.encode_pem("PKCS1_PUB", encoder.encode(keydata))

    @classmethod
    def from_pem(cls, text: str) -> "RSAPubKey":
        """Import the Public RSA key from PKCS#1 PEM text."""
        payload = codec.decode_pem("PKCS1_PUB", text)
        keydata, _ = decoder.decode(payload, asn1Spec=rfc8017.RSAPublicKey())
        pykeyd = localize.encode(keydata)
        return cls(pykeyd["modulus"], pykeyd["publicExponent"])


class RSAPrivKey(RSAKey):
    """RSA Private Key class implementation.

    Keeps the primes and CRT components when they are known, and exposes the connected public key.

    Attributes:
        mod: The modulus of the keypair.
        expo: The private exponent of the key.
        pub: The public key of the key.
        p: Private Prime 1.
        q: Private Prime 2.
    """

    def __init__(self, mod: int, pub_exp: int, priv_exp: int, p: int | None = None, q: int | None = None) -> None:
        """Initialize the RSA Private Key.

        Args:
            mod: The modulus of the keypair.
            pub_exp: The public exponent of the key.
            priv_exp: The private exponent of the key.
            p: The private prime 1.
            q: The private prime 2.
        """
        super().__init__(mod, priv_exp)
        self.pub: RSAPubKey = RSAPubKey(mod, pub_exp)
        self.p: int | None = None
        self.q: int | None = None
        self.exp1: int | None = None
        self.exp2: int | None = None
        self.coeff: int | None = None
        if p and q:
            self.p = p
            self.q = q
            self.exp1 = priv_exp % (p - 1)
            self.exp2 = priv_exp % (q - 1)
            self.coeff = normalize(invert(q, p), p)

    def c_rsa(self, message: int) -> int:
        """Performs core RSA operation accelerated with CRT. (Decrypt)

        Raises:
            ValueError: If the message is out of range for the current key.
        """
        if not self.p or not self.q:
            return super().c_rsa(message)
        if not 0 <= message < self.mod:
            raise ValueError("Message representative must be in range [0, mod-1]")
        m_1 = modpow(message, self.exp1, self.p)
        m_2 = modpow(message, self.exp2, self.q)
        h = ((m_1 - m_2) * self.coeff) % self.p
        return m_2 + self.q * h

    def decrypt(self, ciphertext: int) -> int:
        return self.c_rsa(ciphertext)

    def to_pem(self) -> str:
        """Exports the RSA Private Key as PKCS#1 PEM text.

        Raises:
            NotImplementedError: If the primes are unknown, PKCS#1 requires them.
        """
        if not self.p or not self.q:
            raise NotImplementedError("CRT-less private key export is not supported.")
        keydata = rfc8017.RSAPrivateKey()
        keydata["version"] = 0
        keydata["modulus"] = self.mod
        keydata["publicExponent"] = self.pub.expo
        keydata["privateExponent"] = self.expo
        keydata["prime1"] = self.p
        keydata["prime2"] = self.q
        keydata["exponent1"] = self.exp1
        keydata["exponent2"] = self.exp2
        keydata["coefficient"] = self.coeff
        return codec.encode_pem("PKCS1_PRIV", encoder.encode(keydata))

    @classmethod
    def from_pem(cls, text: str) -> "RSAPrivKey":
        """Imports the RSA Private Key from PKCS#1 PEM text.

        Raises:
            ValueError: For multi-prime keys.
        """
        payload = codec.decode_pem("PKCS1_PRIV", text)
        keydata, _ = decoder.decode(payload, asn1Spec=rfc8017.RSAPrivateKey())
        if keydata["version"] != 0:
            raise ValueError("Multi-prime keys are not supported.")
        pykeyd = localize.encode(keydata)
        return cls(pykeyd["modulus"], pykeyd["publicExponent"], pykeyd["privateExponent"], pykeyd["prime1"],
                   pykeyd["prime2"])

    @classmethod
    def generate(cls,
                 bitlength: int,
                 certainty: int,
                 rng: random.Random | None = None,
                 max_attempts: int = keygen.DEFAULT_KEYGEN_ATTEMPTS) -> "RSAPrivKey":
        """Generates an RSA Private Key, and its respective Public Key.

        Args:
            bitlength: Nominal modulus size.
            certainty: Number of Miller-Rabin rounds per prime.
            rng: Random source. Defaults to the configured source.
            max_attempts: How many prime pairs to try before giving up.

        Returns:
            A new generated RSA Private Key.

        Raises:
            KeyGenerationFailed: If no generated prime pair was usable.
        """
        (n, pub), (_, d, p, q) = keygen.generate_key_pair(bitlength, certainty, rng, max_attempts=max_attempts)
        return cls(n, pub, d, p, q)


def rsa(x: int, bitlength: int, certainty: int, rng: random.Random | None = None) -> RSAOutcome:
    """Generates a fresh key pair and encrypts `x` with it.

    Args:
        x: The message, in `[0, n)`. Below `2**bitlength` always fits.
        bitlength: Nominal modulus size.
        certainty: Number of Miller-Rabin rounds per prime.
        rng: Random source. Defaults to the configured source.

    Returns:
        (encoded, e, n, d)

    Raises:
        DegenerateInputError: If `x` is negative.
        ValueError: If `x` does not fit below the generated modulus.
        KeyGenerationFailed: If no generated prime pair was usable.
    """
    if x < 0:
        raise DegenerateInputError("Message must be non-negative.")
    key = RSAPrivKey.generate(bitlength, certainty, rng)
    encoded = key.pub.encrypt(x)
    logger.debug("Encrypted message under %d-bit modulus", key.mod.bit_length())
    return RSAOutcome(encoded, key.pub.expo, key.mod, key.expo)


def rsa_trapdoor(encoded: int, n: int, d: int) -> int:
    """Inverts `rsa` using only the modulus and the private exponent."""
    return modpow(encoded, d, n)
