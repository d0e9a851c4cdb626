import json

import pytest

from conftest import jpeg_bytes
from iiif_images_cli import cli
from iiif_images_core.config_manager import get_config_manager
from iiif_images_core.image_handler import get_image_handler

BASE = "https://iiif.example.org/iiif/3/page-1"
INFO = {"@context": "http://iiif.io/api/image/3/context.json", "width": 4000, "height": 2000}


def test_resolve_prints_summary(fake_http, capsys):
    fake_http.add(f"{BASE}/info.json", json_body=INFO)

    assert cli.main(["--resolve", BASE, "--region", "pct:0,0,50,50", "--max-dimension", "1000"]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["imageUrl"] == f"{BASE}/pct:0,0,50,50/1000,500/0/default.jpg"
    assert summary["info"]["constraints"]["maxWidth"] == 1000
    assert fake_http.calls == [f"{BASE}/info.json"]


def test_resolve_writes_output_file(fake_http, tmp_path):
    payload = jpeg_bytes()
    fake_http.add(f"{BASE}/info.json", json_body=INFO)
    fake_http.add(f"{BASE}/full/2000,1000/0/default.jpg", body=payload)
    out = tmp_path / "out" / "page.jpg"

    assert cli.main(["--resolve", BASE, "-o", str(out)]) == 0
    assert out.read_bytes() == payload


def test_resolve_failure_exit_code(fake_http, capsys):
    assert cli.main(["--resolve", BASE]) == 1
    assert "HTTP 404" in capsys.readouterr().err


def test_overrides_update_handler_ceiling():
    cli._apply_overrides(cli._build_parser().parse_args(["--max-dimension", "512", "--max-area", "90000"]))

    assert get_config_manager().get_setting("images.max_dimension") == 512
    assert get_image_handler().config.max_area == 90000


@pytest.mark.parametrize("port", ["0", "70000"])
def test_invalid_port_is_rejected(port):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--port", port])
    assert excinfo.value.code == 2


def test_server_mode_selects_transport(monkeypatch):
    calls = []
    monkeypatch.setattr("iiif_images_cli.server.run_server", lambda **kw: calls.append(kw))

    assert cli.main(["--http", "--port", "8080"]) == 0
    assert cli.main([]) == 0
    assert calls == [
        {"http": True, "host": "127.0.0.1", "port": 8080},
        {"http": False, "host": "127.0.0.1", "port": 3000},
    ]


def test_save_config_persists_overrides(monkeypatch, tmp_path):
    cm = get_config_manager()
    target = tmp_path / "config.json"
    monkeypatch.setattr(cm, "path", target)
    monkeypatch.setattr("iiif_images_cli.server.run_server", lambda **kw: pytest.fail("server must not start"))

    assert cli.main(["--save-config", "--max-dimension", "1200", "--port", "8080"]) == 0

    saved = json.loads(target.read_text(encoding="utf-8"))["settings"]
    assert saved["images"]["max_dimension"] == 1200
    assert saved["images"]["max_area"] is None
    assert saved["server"] == {"host": "127.0.0.1", "port": 8080}

    from iiif_images_core.config_manager import ConfigManager

    reloaded = ConfigManager.load(target)
    assert reloaded.get_optional_int("images.max_dimension") == 1200
