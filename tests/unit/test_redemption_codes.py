"""Redemption code format tests."""

import re

from wastewise.rewards.codes import CODE_PREFIX, generate_redemption_code, normalize_redemption_code

CODE_RE = re.compile(r"^WW[A-Z0-9]{10}$")


class TestRedemptionCodes:
    def test_format(self):
        for _ in range(50):
            assert CODE_RE.match(generate_redemption_code())

    def test_prefix(self):
        assert generate_redemption_code().startswith(CODE_PREFIX)

    def test_codes_are_random(self):
        codes = {generate_redemption_code() for _ in range(200)}
        assert len(codes) == 200

    def test_normalize(self):
        assert normalize_redemption_code("  ww12abc34xyz ") == "WW12ABC34XYZ"
