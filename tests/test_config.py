import pytest

from obfuscate.config import DEFAULT_FORMATTER, DEFAULT_TIMEOUT_S, build_config


def test_defaults(tmp_path):
    cfg = build_config("Token", tmp_path)
    assert cfg.type_name == "Token"
    assert cfg.unit_dir == tmp_path.resolve()
    assert cfg.formatter == DEFAULT_FORMATTER
    assert cfg.timeout_s == DEFAULT_TIMEOUT_S


def test_yaml_overrides(tmp_path):
    (tmp_path / ".obfuscate.yaml").write_text(
        "formatter: [gofmt, -w]\ntimeout_s: 5\n", encoding="utf-8"
    )
    cfg = build_config("Token", tmp_path)
    assert cfg.formatter == ("gofmt", "-w")
    assert cfg.timeout_s == 5.0


def test_empty_yaml_keeps_defaults(tmp_path):
    (tmp_path / ".obfuscate.yaml").write_text("", encoding="utf-8")
    cfg = build_config("Token", tmp_path)
    assert cfg.formatter == DEFAULT_FORMATTER


@pytest.mark.parametrize(
    "body",
    [
        "formatter: goimports\n",
        "formatter: []\n",
        "timeout_s: 0\n",
        "replace_by: '#'\n",
        "formatter: [goimports\n",
    ],
)
def test_invalid_yaml(tmp_path, body):
    (tmp_path / ".obfuscate.yaml").write_text(body, encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid .obfuscate.yaml"):
        build_config("Token", tmp_path)


def test_explicit_config_file(tmp_path):
    cfg_file = tmp_path / "other.yaml"
    cfg_file.write_text("timeout_s: 2.5\n", encoding="utf-8")
    cfg = build_config("Token", tmp_path, config_file=cfg_file)
    assert cfg.timeout_s == 2.5


def test_unreadable_config_file(tmp_path):
    with pytest.raises(ValueError, match="Invalid missing.yaml"):
        build_config("Token", tmp_path, config_file=tmp_path / "missing.yaml")
