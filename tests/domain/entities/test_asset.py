import uuid

import pytest

from lazythumbs.domain.entities.asset import Asset, DerivativeRecord


def test_asset_requires_rel_path():
    with pytest.raises(ValueError):
        Asset(rel_path="  ")


def test_asset_strips_leading_slash_and_splits_path():
    a = Asset(id=uuid.uuid4(), rel_path="/2024/01/cat.jpg")
    assert a.rel_path == "2024/01/cat.jpg"
    assert a.filename == "cat.jpg"
    assert a.rel_dir == "2024/01"
    assert a.canonical_url("http://x/uploads/") == "http://x/uploads/2024/01/cat.jpg"


def test_asset_at_upload_root_has_empty_dir():
    assert Asset(rel_path="cat.jpg").rel_dir == ""


def test_asset_rejects_negative_dims():
    with pytest.raises(ValueError):
        Asset(rel_path="cat.jpg", width=-1)


def test_derivative_record_validation():
    DerivativeRecord(size_name="thumbnail", filename="cat-150x150.jpg", mime_type="image/jpeg", byte_size=10)
    with pytest.raises(ValueError):
        DerivativeRecord(size_name="", filename="cat-150x150.jpg")
    with pytest.raises(ValueError):
        DerivativeRecord(size_name="thumbnail", filename="")
    with pytest.raises(ValueError):
        DerivativeRecord(size_name="thumbnail", filename="x.jpg", byte_size=-1)
