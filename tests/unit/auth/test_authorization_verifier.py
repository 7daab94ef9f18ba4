"""
Tests for AuthorizationVerifier.

Covers:
- Freshness window boundaries, with and without a clock offset
- Clock calibration from a signer timestamp
- Signatures that cannot be recovered or parsed
- randomselect / all authorization
"""

import pytest

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from stormnode.auth import (
    FRESHNESS_WINDOW_MS,
    AuthorizationVerifier,
    AuthType,
)

from tests.unit.mocks import NOW_MS, RSASigner


class FixedDraw:
    """Stands in for random.Random, always drawing the same value."""

    def __init__(self, value: int) -> None:
        self.value = value
        self.draws = 0

    def randint(self, start: int, end: int) -> int:
        self.draws += 1
        return self.value


class TestFreshnessWindow:
    """Signature freshness against the verifier's clock."""

    def test_window_is_thirty_minutes(self) -> None:
        assert FRESHNESS_WINDOW_MS == 1_800_000

    def test_signature_at_window_edge_passes(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        """A timestamp exactly 1,800,000 ms old is still fresh."""
        assert verifier.verify(signer.sign_at(NOW_MS - 1_800_000)) is True

    def test_signature_past_window_edge_fails(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        """A timestamp 1,800,001 ms old is stale."""
        assert verifier.verify(signer.sign_at(NOW_MS - 1_800_001)) is False

    def test_future_signature_is_symmetric(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        assert verifier.verify(signer.sign_at(NOW_MS + 1_800_000)) is True
        assert verifier.verify(signer.sign_at(NOW_MS + 1_800_001)) is False

    def test_current_signature_passes(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        assert verifier.verify(signer.sign_at(NOW_MS)) is True

    def test_replay_within_window_passes_every_time(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        """There is no nonce tracking, so a replayed signature stays valid."""
        signature = signer.sign_at(NOW_MS - 1000)

        assert verifier.verify(signature) is True
        assert verifier.verify(signature) is True

    def test_clock_offset_shifts_window(self, signer: RSASigner) -> None:
        """With offset d the check is |now - d - t| <= window."""
        verifier = AuthorizationVerifier(
            public_key=signer.public_pem,
            clock_offset=600_000,
            clock=lambda: NOW_MS,
        )

        signer_now = NOW_MS - 600_000

        assert verifier.verify(signer.sign_at(signer_now - 1_800_000)) is True
        assert verifier.verify(signer.sign_at(signer_now - 1_800_001)) is False
        assert verifier.verify(signer.sign_at(signer_now + 1_800_000)) is True
        assert verifier.verify(signer.sign_at(signer_now + 1_800_001)) is False

    def test_custom_window(self, signer: RSASigner) -> None:
        verifier = AuthorizationVerifier(
            public_key=signer.public_pem,
            freshness_window_ms=1000,
            clock=lambda: NOW_MS,
        )

        assert verifier.verify(signer.sign_at(NOW_MS - 1000)) is True
        assert verifier.verify(signer.sign_at(NOW_MS - 1001)) is False

    def test_fractional_timestamp(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        assert verifier.verify(signer.sign_at(NOW_MS - 0.5)) is True


class TestCalibration:
    """Clock offset learned from a settime timestamp."""

    def test_calibrate_sets_offset(self, verifier: AuthorizationVerifier) -> None:
        offset = verifier.calibrate(NOW_MS - 3_600_000)

        assert offset == 3_600_000
        assert verifier.clock_offset == 3_600_000

    def test_calibrated_verifier_accepts_signer_clock(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        """A signer one hour behind is stale until the offset is learned."""
        signer_now = NOW_MS - 3_600_000
        signature = signer.sign_at(signer_now)

        assert verifier.verify(signature) is False

        verifier.calibrate(signer_now)

        assert verifier.verify(signature) is True

    def test_calibrate_with_future_signer(self, verifier: AuthorizationVerifier) -> None:
        assert verifier.calibrate(NOW_MS + 5000) == -5000


class TestUnrecoverableSignatures:
    """Anything that is not a fresh, well-formed signature is rejected."""

    @pytest.mark.parametrize(
        "signature",
        [
            None,
            "",
            "not base64 !!",
            "aGVsbG8=",
        ],
    )
    def test_garbage_signature(
        self,
        verifier: AuthorizationVerifier,
        signature: str | None,
    ) -> None:
        assert verifier.verify(signature) is False
        assert verifier.recover(signature) is None

    def test_non_string_signature(self, verifier: AuthorizationVerifier) -> None:
        assert verifier.verify(12345) is False

    def test_signature_from_other_key(self, verifier: AuthorizationVerifier) -> None:
        other = RSASigner(
            rsa.generate_private_key(
                public_exponent=65537,
                key_size=2048,
            )
        )

        assert verifier.verify(other.sign_at(NOW_MS)) is False

    def test_plaintext_without_separator(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        assert verifier.recover(signer.sign(str(NOW_MS))) == str(NOW_MS)
        assert verifier.verify(signer.sign(str(NOW_MS))) is False

    @pytest.mark.parametrize(
        "plaintext",
        [
            "stormdev|",
            "stormdev|yesterday",
            "stormdev|NaN",
            "stormdev|inf",
        ],
    )
    def test_unparseable_timestamp(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
        plaintext: str,
    ) -> None:
        assert verifier.verify(signer.sign(plaintext)) is False

    def test_recover_returns_plaintext(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        assert verifier.recover(signer.sign("fleet|123")) == "fleet|123"

    def test_rejects_non_rsa_key(self) -> None:
        public_pem = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        with pytest.raises(TypeError):
            AuthorizationVerifier(public_key=public_pem)

    def test_default_key_loads(self) -> None:
        verifier = AuthorizationVerifier()

        assert verifier.verify("aGVsbG8=") is False


class TestAuthorize:
    """Fleet selection by auth type."""

    def test_all_always_passes(self, verifier: AuthorizationVerifier) -> None:
        assert verifier.authorize("all", None) is True

    @pytest.mark.parametrize("authtype", [None, "", "none", "ALL", "token"])
    def test_unknown_auth_type_fails_closed(
        self,
        verifier: AuthorizationVerifier,
        authtype: str | None,
    ) -> None:
        assert verifier.authorize(authtype, 1000) is False

    def test_randomselect_draw_within_probability(self, signer: RSASigner) -> None:
        draw = FixedDraw(500)
        verifier = AuthorizationVerifier(public_key=signer.public_pem, rng=draw)

        assert verifier.authorize("randomselect", 500) is True
        assert verifier.authorize("randomselect", "500") is True
        assert verifier.authorize("randomselect", 499) is False
        assert draw.draws == 3

    def test_randomselect_extremes(self, signer: RSASigner) -> None:
        low = AuthorizationVerifier(public_key=signer.public_pem, rng=FixedDraw(1))
        high = AuthorizationVerifier(public_key=signer.public_pem, rng=FixedDraw(1000))

        assert low.authorize("randomselect", 0) is False
        assert high.authorize("randomselect", 1000) is True
        assert high.authorize("randomselect", 999) is False

    @pytest.mark.parametrize("authdata", [None, "half", [1, 2]])
    def test_randomselect_unusable_authdata(
        self,
        verifier: AuthorizationVerifier,
        authdata,
    ) -> None:
        assert verifier.authorize("randomselect", authdata) is False

    def test_check_requires_both(
        self,
        verifier: AuthorizationVerifier,
        signer: RSASigner,
    ) -> None:
        fresh = signer.sign_at(NOW_MS)
        stale = signer.sign_at(NOW_MS - 1_800_001)

        assert verifier.check("all", None, fresh) is True
        assert verifier.check("all", None, stale) is False
        assert verifier.check("none", None, fresh) is False

    def test_auth_type_parse(self) -> None:
        assert AuthType.parse("randomselect") == AuthType.RANDOMSELECT
        assert AuthType.parse("all") == AuthType.ALL
        assert AuthType.parse("other") is None
