"""Tests for the PBKDF2 credential hasher."""

from __future__ import annotations

import pytest

from campusgate import Pbkdf2Hasher
from campusgate.hashing import ALGORITHM


@pytest.fixture
def hasher() -> Pbkdf2Hasher:
    return Pbkdf2Hasher(iterations=1_000)


class TestPbkdf2Hasher:
    def test_verify_roundtrip(self, hasher: Pbkdf2Hasher) -> None:
        encoded = hasher.hash("secret-pass")
        assert hasher.verify("secret-pass", encoded)
        assert not hasher.verify("secret-pasS", encoded)

    def test_encoded_shape(self, hasher: Pbkdf2Hasher) -> None:
        encoded = hasher.hash("secret-pass")
        algorithm, iterations, _salt, _digest = encoded.split("$")
        assert algorithm == ALGORITHM
        assert iterations == "1000"
        assert "secret-pass" not in encoded
        assert Pbkdf2Hasher.looks_hashed(encoded)

    def test_salted(self, hasher: Pbkdf2Hasher) -> None:
        assert hasher.hash("secret-pass") != hasher.hash("secret-pass")

    def test_iterations_travel_with_hash(self, hasher: Pbkdf2Hasher) -> None:
        encoded = Pbkdf2Hasher(iterations=2_000).hash("secret-pass")
        assert hasher.verify("secret-pass", encoded)

    @pytest.mark.parametrize("malformed", ["", "plaintext", "md5$1$a$b", "pbkdf2_sha256$x$a$b"])
    def test_malformed_never_verifies(self, hasher: Pbkdf2Hasher, malformed: str) -> None:
        assert hasher.verify("secret-pass", malformed) is False

    def test_rejects_non_positive_iterations(self) -> None:
        with pytest.raises(ValueError):
            Pbkdf2Hasher(iterations=0)
