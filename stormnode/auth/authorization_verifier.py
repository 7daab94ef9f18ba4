"""
Gate deciding whether an inbound command may be acted on.

Two independent checks must both pass:

- ``authorize(authtype, authdata)`` selects which agents of the fleet react.
  ``all`` always passes; ``randomselect`` passes with probability
  ``authdata / 1000`` so a broadcast command reaches a sample of agents.
  Unknown auth types fail closed.

- ``verify(signature)`` recovers the plaintext ``"<anything>|<epoch-ms>"``
  from an RSA PKCS#1 v1.5 signature block with the embedded public key and
  requires the timestamp to lie within the freshness window of the agent's
  clock, corrected by the learned clock offset. This is a replay window,
  not a nonce check: the same signed payload is accepted any number of
  times while it is fresh.
"""

from __future__ import annotations

import base64
import binascii
import math
import random
import time
from typing import Any, Callable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key

from .auth_type import AuthType
from .public_key import STORM_PUBLIC_KEY

FRESHNESS_WINDOW_MS = 1_800_000
RANDOMSELECT_RANGE = 1000
SIGNATURE_SEPARATOR = "|"


def epoch_ms() -> int:
    return int(time.time() * 1000)


class AuthorizationVerifier:

    def __init__(
        self,
        public_key: str | bytes = STORM_PUBLIC_KEY,
        clock_offset: int = 0,
        freshness_window_ms: int = FRESHNESS_WINDOW_MS,
        clock: Callable[[], int] = epoch_ms,
        rng: random.Random | None = None,
    ) -> None:
        if isinstance(public_key, str):
            public_key = public_key.encode()

        key = load_pem_public_key(public_key)
        if not isinstance(key, rsa.RSAPublicKey):
            raise TypeError("Err. - signature verification requires an RSA public key.")

        self._public_key: rsa.RSAPublicKey = key
        self._clock_offset = clock_offset
        self._freshness_window_ms = freshness_window_ms
        self._clock = clock
        self._rng = rng if rng else random.Random()

    @property
    def clock_offset(self) -> int:
        return self._clock_offset

    @property
    def freshness_window_ms(self) -> int:
        return self._freshness_window_ms

    def calibrate(self, signer_time_ms: int | float) -> int:
        """
        Align the freshness check with the signer's clock. Any sender able
        to produce one accepted command can move this offset.
        """
        self._clock_offset = int(self._clock() - signer_time_ms)
        return self._clock_offset

    def check(
        self,
        authtype: str | None,
        authdata: Any,
        signature: str | None,
    ) -> bool:
        return self.authorize(authtype, authdata) and self.verify(signature)

    def authorize(
        self,
        authtype: str | None,
        authdata: Any,
    ) -> bool:
        match AuthType.parse(authtype):
            case AuthType.ALL:
                return True

            case AuthType.RANDOMSELECT:
                try:
                    probability = float(authdata)

                except (TypeError, ValueError):
                    return False

                draw = self._rng.randint(1, RANDOMSELECT_RANGE)
                return draw <= probability

            case _:
                return False

    def verify(self, signature: str | None) -> bool:
        plaintext = self.recover(signature)
        if plaintext is None:
            return False

        parts = plaintext.split(SIGNATURE_SEPARATOR)
        if len(parts) < 2:
            return False

        try:
            timestamp = float(parts[1])

        except ValueError:
            return False

        if not math.isfinite(timestamp):
            return False

        return self.is_fresh(timestamp)

    def is_fresh(self, timestamp_ms: int | float) -> bool:
        skew = abs(self._clock() - self._clock_offset - timestamp_ms)
        return skew <= self._freshness_window_ms

    def recover(self, signature: str | bytes | None) -> str | None:
        if not signature or not isinstance(signature, (str, bytes)):
            return None

        try:
            signed = base64.b64decode(signature)
            recovered = self._public_key.recover_data_from_signature(
                signed,
                padding.PKCS1v15(),
                None,
            )

            return recovered.decode("utf-8")

        except (
            binascii.Error,
            InvalidSignature,
            ValueError,
            TypeError,
        ):
            return None
