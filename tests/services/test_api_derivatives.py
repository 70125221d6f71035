import pytest
from starlette.testclient import TestClient

from lazythumbs.database.repos.settings_store import AUTOGEN_FLAG, SqlAlchemySettingsStore
from lazythumbs.services.api.app import create_app
from lazythumbs.services.api.deps import make_derivative_handler
from lazythumbs.services.api.static import _request_path


@pytest.fixture()
def handler_calls(cfg, session_factory):
    calls = []
    inner = make_derivative_handler(cfg, session_factory)

    def handler(raw_path):
        calls.append(raw_path)
        return inner(raw_path)

    handler.calls = calls
    return handler


@pytest.fixture()
def client(cfg, session_factory, handler_calls):
    app = create_app(cfg, session_factory=session_factory, derivative_handler=handler_calls)
    with TestClient(app) as c:
        yield c


def _enable(client, on=True):
    r = client.put("/api/settings/autogen", json={"enabled": on})
    assert r.status_code == 200
    assert r.json() == {"enabled": on}


def _register(client, rel_path, derivatives=()):
    r = client.post("/api/assets", json={"rel_path": rel_path, "derivatives": list(derivatives)})
    assert r.status_code == 201, r.text
    return r.json()


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["autogen"] is False


def test_missing_derivative_is_generated_and_then_served_statically(client, handler_calls, make_image, upload_root):
    make_image(upload_root / "2024/01/cat.jpg", (1000, 1000))
    asset = _register(client, "2024/01/cat.jpg")
    _enable(client)

    r = client.get("/uploads/2024/01/cat-150x150.jpg")
    out = upload_root / "2024/01/cat-150x150.jpg"
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"
    assert int(r.headers["content-length"]) == out.stat().st_size
    assert r.content == out.read_bytes()
    assert handler_calls.calls == ["/uploads/2024/01/cat-150x150.jpg"]

    # now on disk: plain static delivery, the engine is not consulted again
    r2 = client.get("/uploads/2024/01/cat-150x150.jpg")
    assert r2.status_code == 200
    assert len(handler_calls.calls) == 1

    body = client.get(f"/api/assets/{asset['id']}").json()
    [thumb] = body["derivatives"]
    assert thumb["size_name"] == "thumbnail"
    assert thumb["filename"] == "cat-150x150.jpg"
    assert thumb["url"] == "http://testserver/uploads/2024/01/cat-150x150.jpg"
    assert body["url"] == "http://testserver/uploads/2024/01/cat.jpg"


def test_non_ascii_filename_is_generated(client, handler_calls, make_image, upload_root):
    make_image(upload_root / "2024/01/café.jpg", (1000, 1000))
    _register(client, "2024/01/café.jpg")
    _enable(client)

    r = client.get("/uploads/2024/01/café-150x150.jpg")
    assert r.status_code == 200
    assert r.content == (upload_root / "2024/01/café-150x150.jpg").read_bytes()
    assert len(handler_calls.calls) == 1


def test_request_path_decodes_raw_bytes_as_utf8():
    raw = "/uploads/2024/01/café-150x150.jpg"
    assert _request_path({"type": "http", "raw_path": raw.encode("utf-8")}) == raw
    assert _request_path({"type": "http", "raw_path": b"/uploads/caf%C3%A9-150x150.jpg"}) == (
        "/uploads/caf%C3%A9-150x150.jpg"
    )
    assert _request_path({"type": "http", "raw_path": b"", "root_path": "", "path": raw}) == raw


def test_flag_off_keeps_the_404(client, make_image, upload_root):
    make_image(upload_root / "2024/01/cat.jpg", (1000, 1000))
    _register(client, "2024/01/cat.jpg")

    r = client.get("/uploads/2024/01/cat-150x150.jpg")
    assert r.status_code == 404
    assert not (upload_root / "2024/01/cat-150x150.jpg").exists()


@pytest.mark.parametrize("path", [
    "/uploads/2024/01/ghost-150x150.jpg",
    "/uploads/2024/01/cat-151x151.jpg",
    "/uploads/2024/01/cat.jpg.pdf",
])
def test_unservable_requests_stay_404(client, make_image, upload_root, path):
    make_image(upload_root / "2024/01/cat.jpg", (1000, 1000))
    _register(client, "2024/01/cat.jpg")
    _enable(client)
    assert client.get(path).status_code == 404


def test_original_is_served_without_the_engine(client, handler_calls, make_image, upload_root):
    make_image(upload_root / "2024/01/cat.jpg", (1000, 1000))
    r = client.get("/uploads/2024/01/cat.jpg")
    assert r.status_code == 200
    assert handler_calls.calls == []


def test_exact_source_size_is_passed_through(client, make_image, upload_root):
    src = make_image(upload_root / "2024/01/photo.jpg", (800, 600))
    _register(client, "2024/01/photo.jpg")
    _enable(client)

    r = client.get("/uploads/2024/01/photo-800x600.jpg")
    assert r.status_code == 200
    assert r.content == src.read_bytes()
    assert int(r.headers["content-length"]) == src.stat().st_size
    assert not (upload_root / "2024/01/photo-800x600.jpg").exists()


def test_register_suppresses_eager_derivatives_only_when_enabled(client, make_image, upload_root):
    make_image(upload_root / "a/one.jpg", (600, 600))
    kept = make_image(upload_root / "a/one-150x150.jpg", (150, 150))
    _register(client, "a/one.jpg", [{"size_name": "thumbnail", "file": kept.name, "mime_type": "image/jpeg"}])
    assert kept.exists()

    _enable(client)
    make_image(upload_root / "b/two.jpg", (600, 600))
    eager = make_image(upload_root / "b/two-150x150.jpg", (150, 150))
    pdf_preview = upload_root / "b/two-pdf.txt"
    pdf_preview.write_text("x")
    body = _register(client, "b/two.jpg", [
        {"size_name": "thumbnail", "file": eager.name, "mime_type": "image/jpeg"},
        {"size_name": "preview", "file": pdf_preview.name, "mime_type": "text/plain"},
    ])
    assert not eager.exists()
    assert pdf_preview.exists()
    assert {d["size_name"] for d in body["derivatives"]} == {"thumbnail", "preview"}


def test_edited_image_found_through_old_derivative_names(client, make_image, upload_root):
    make_image(upload_root / "2024/01/beach.jpg", (1200, 800))
    asset = _register(client, "2024/01/beach.jpg", [
        {"size_name": "medium", "file": "beach-300x200.jpg", "mime_type": "image/jpeg"},
    ])
    _enable(client)
    make_image(upload_root / "2024/01/beach-e17.jpg", (1200, 800))
    r = client.post(f"/api/assets/{asset['id']}/edit", json={"rel_path": "2024/01/beach-e17.jpg"})
    assert r.status_code == 200
    assert r.json()["original_filename"] == "beach.jpg"

    # the pre-edit file is gone; the asset is found through its original filename
    (upload_root / "2024/01/beach.jpg").unlink()
    r = client.get("/uploads/2024/01/beach-300x200.jpg")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"


def test_asset_api_errors(client, make_image, upload_root):
    assert client.get("/api/assets/00000000-0000-0000-0000-000000000000").status_code == 404
    assert client.post("/api/assets", json={"rel_path": "missing.jpg"}).status_code == 422
    assert client.post("/api/assets", json={"rel_path": "../x.jpg"}).status_code == 400

    make_image(upload_root / "dup.jpg", (10, 10))
    _register(client, "dup.jpg")
    assert client.post("/api/assets", json={"rel_path": "dup.jpg"}).status_code == 409

    r = client.post("/api/assets/00000000-0000-0000-0000-000000000000/edit", json={"rel_path": "dup.jpg"})
    assert r.status_code == 404


def test_flag_is_scoped_by_deployment_mode(cfg, session_factory):
    cfg.multi_deployment = True
    with session_factory() as s:
        SqlAlchemySettingsStore(s, multi_deployment=True).set_flag(AUTOGEN_FLAG, True)
        s.commit()
    app = create_app(cfg, session_factory=session_factory)
    with TestClient(app) as c:
        assert c.get("/api/settings/autogen").json() == {"enabled": True}
