from pathlib import Path

from pedebug.config import AppConfig, config_to_snapshot, load_config


def test_defaults_without_path():
    cfg = load_config(None)
    assert isinstance(cfg, AppConfig)
    assert cfg.limits.max_debug_entries == 32
    assert cfg.log_level == "WARNING"


def test_yaml_overrides(tmp_path: Path):
    p = tmp_path / "cfg.yaml"
    p.write_text("log_level: DEBUG\nlimits:\n  max_debug_entries: 4\n  max_codeview_path_len: 128\n", encoding="utf-8")
    cfg = load_config(str(p))

    assert cfg.log_level == "DEBUG"
    assert cfg.limits.max_debug_entries == 4
    assert cfg.limits.max_codeview_path_len == 128
    assert cfg.limits.max_sections == 96
    assert config_to_snapshot(cfg)["limits"]["max_debug_entries"] == 4


def test_empty_yaml_gives_defaults(tmp_path: Path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(str(p)) == AppConfig()
