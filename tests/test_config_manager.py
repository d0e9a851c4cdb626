import json

from iiif_images_core.config_manager import ConfigManager


def test_load_creates_default_file(tmp_path):
    path = tmp_path / "config.json"
    cm = ConfigManager.load(path)

    assert path.exists()
    assert cm.get_setting("images.max_dimension") == 2000
    assert cm.get_setting("images.max_area") is None
    assert cm.get_setting("server.port") == 3000


def test_load_merges_user_values(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"settings": {"images": {"max_area": 4000000}}}), encoding="utf-8")

    cm = ConfigManager.load(path)

    assert cm.get_optional_int("images.max_area") == 4000000
    assert cm.get_setting("images.max_dimension") == 2000


def test_load_survives_corrupt_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert ConfigManager.load(path).get_setting("logging.level") == "INFO"


def test_set_setting_and_optional_int(tmp_path):
    cm = ConfigManager.load(tmp_path / "config.json")
    cm.set_setting("network.timeout_s", 5)
    cm.set_setting("images.max_area", "lots")

    assert cm.get_setting("network.timeout_s") == 5
    assert cm.get_optional_int("images.max_area") is None
    assert cm.get_setting("missing.path", "fallback") == "fallback"

    cm.save()
    assert json.loads(cm.path.read_text(encoding="utf-8"))["settings"]["network"]["timeout_s"] == 5
