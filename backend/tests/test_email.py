"""Tests for the registration email format check."""

import pytest

from microposts.utils.email import validate_email


class TestValidateEmail:

    @pytest.mark.parametrize(
        "email",
        [
            "user@example.com",
            "first.last@sub.example.org",
            "user+tag@example.co.uk",
            "user_name-1@example.io",
        ],
    )
    def test_accepts_well_formed_addresses(self, email):
        assert validate_email(email) is True

    @pytest.mark.parametrize(
        "email",
        [
            "",
            "plainaddress",
            "@example.com",
            "user@",
            "user@example",
            "user @example.com",
            "user@@example.com",
            "user@example.com\n",
            "us(er@example.com",
            "user!@example.com",
            'us"er@example.com',
        ],
    )
    def test_rejects_malformed_addresses(self, email):
        assert validate_email(email) is False
