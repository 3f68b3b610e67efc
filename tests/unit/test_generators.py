"""Tests for id and temporary password generators."""

import string

from libris.shared.utils.generators import (
    PASSWORD_SPECIAL_CHARACTERS,
    generate_cuid,
    generate_temp_password,
)


def test_temp_password_meets_character_classes() -> None:
    for _ in range(200):
        password = generate_temp_password()
        assert 8 <= len(password) <= 12
        assert any(c in string.ascii_uppercase for c in password)
        assert any(c in string.ascii_lowercase for c in password)
        assert any(c in string.digits for c in password)
        assert any(c in PASSWORD_SPECIAL_CHARACTERS for c in password)


def test_temp_password_length_is_clamped() -> None:
    assert len(generate_temp_password(min_length=2, max_length=4)) == 8
    assert len(generate_temp_password(min_length=30, max_length=40)) == 12


def test_cuid_is_unique_string() -> None:
    ids = {generate_cuid() for _ in range(50)}
    assert len(ids) == 50
    assert all(isinstance(i, str) and i for i in ids)
