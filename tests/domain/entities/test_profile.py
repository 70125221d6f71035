import pytest

from lazythumbs.domain.entities.profile import DerivativeProfile


def test_profile_defaults_to_fit():
    p = DerivativeProfile("medium_large", 768)
    assert (p.width, p.height, p.crop) == (768, 0, False)


@pytest.mark.parametrize("kwargs", [
    {"name": ""},
    {"name": "x", "width": -1, "height": 10},
    {"name": "x", "width": 0, "height": 0},
])
def test_profile_validation(kwargs):
    with pytest.raises(ValueError):
        DerivativeProfile(**kwargs)


def test_profile_is_immutable():
    p = DerivativeProfile("thumb", 150, 150, crop=True)
    with pytest.raises(Exception):
        p.width = 10
