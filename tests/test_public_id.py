import re

import pytest

from travel_planner.models import Profile
from travel_planner.utils import public_id
from travel_planner.utils.public_id import assign_public_id, generate_public_id, is_public_id


def test_generated_ids_are_eight_digits():
    for _ in range(200):
        assert re.match(r"^[0-9]{8}$", generate_public_id())


def test_generated_ids_rarely_collide():
    draws = {generate_public_id() for _ in range(1000)}
    assert len(draws) > 990


@pytest.mark.parametrize("value", ["12345678", "99999999"])
def test_is_public_id_accepts_eight_digits(value):
    assert is_public_id(value)


@pytest.mark.parametrize("value", ["1234567", "123456789", "abcdefgh", "", None, "1234 678"])
def test_is_public_id_rejects_other_values(value):
    assert not is_public_id(value)


def test_assign_public_id_skips_taken_values(app, make_user, monkeypatch):
    taken = make_user().profile.public_id
    candidates = iter([taken, "55555555"])
    monkeypatch.setattr(public_id, "generate_public_id", lambda: next(candidates))

    profile = Profile(username="fresh")
    assert assign_public_id(profile) == "55555555"


def test_assign_public_id_gives_up(app, make_user, monkeypatch):
    taken = make_user().profile.public_id
    monkeypatch.setattr(public_id, "generate_public_id", lambda: taken)

    with pytest.raises(RuntimeError):
        assign_public_id(Profile(username="unlucky"))
