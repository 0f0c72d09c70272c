"""Tests for role identifier generation."""

from __future__ import annotations

import re
import threading
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from campusgate import DownstreamUnavailableError, RandomIdentifierGenerator, Reason


class TestFormats:
    def test_enrollment_number(self) -> None:
        generator = RandomIdentifierGenerator()
        assert re.fullmatch(r"2021CSE\d{4}", generator.generate_enrollment_number("cse", 2021))

    def test_employee_id_uses_current_year(self) -> None:
        generator = RandomIdentifierGenerator(clock=lambda: datetime(2026, 3, 1, tzinfo=timezone.utc))
        assert re.fullmatch(r"FAC2026ECE\d{4}", generator.generate_employee_id("ECE"))

    def test_suffix_width(self) -> None:
        generator = RandomIdentifierGenerator(suffix_digits=6)
        assert re.fullmatch(r"2024ME\d{6}", generator.generate_enrollment_number("me", 2024))


class TestUniqueness:
    def test_skips_taken_identifiers(self) -> None:
        generator = RandomIdentifierGenerator(is_taken=lambda candidate: candidate.endswith("0000"))
        with patch("campusgate.identifiers.secrets.randbelow", side_effect=[0, 7]):
            assert generator.generate_enrollment_number("CSE", 2024) == "2024CSE0007"

    def test_never_repeats_within_process(self) -> None:
        generator = RandomIdentifierGenerator()
        with patch("campusgate.identifiers.secrets.randbelow", side_effect=[5, 5, 6]):
            first = generator.generate_enrollment_number("CSE", 2024)
            second = generator.generate_enrollment_number("CSE", 2024)
        assert first == "2024CSE0005"
        assert second == "2024CSE0006"

    def test_exhaustion(self) -> None:
        generator = RandomIdentifierGenerator(is_taken=lambda _candidate: True, max_attempts=3)
        with pytest.raises(DownstreamUnavailableError) as exc_info:
            generator.generate_employee_id("CSE")
        assert exc_info.value.reason is Reason.IDENTIFIER_EXHAUSTED

    def test_concurrent_generation_is_unique(self) -> None:
        generator = RandomIdentifierGenerator(suffix_digits=3, max_attempts=5_000)
        issued: list[str] = []

        def worker() -> None:
            for _ in range(50):
                issued.append(generator.generate_enrollment_number("CSE", 2024))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(issued) == 400
        assert len(set(issued)) == 400
