import pytest

from pqmashup.config import Settings, load_settings
from pqmashup.errors import ConfigError


def test_defaults():
    settings = load_settings()

    assert settings.item_glob == "customXml/item*.xml"
    assert settings.section_path == "Formulas/Section1.m"
    assert settings.queries_dir == "Individual_Queries"
    assert settings.compression == "deflated"
    assert settings.exclude == []
    assert settings.strict_header is False


def test_load_from_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("compression: stored\nexclude: 'Individual_Queries/*'\nstrict_header: true\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings.compression == "stored"
    assert settings.exclude == ["Individual_Queries/*"]
    assert settings.strict_header is True


def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")

    assert load_settings(path) == Settings()


@pytest.mark.parametrize(
    "content",
    ["- just\n- a list\n", "unknown_key: 1\n", "compression: zstd\n", "key: [unclosed\n"],
)
def test_invalid_yaml(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.yaml")


def test_merged_ignores_none():
    settings = Settings().merged({"strict_header": None, "keep_spaces": True})

    assert settings.strict_header is False
    assert settings.keep_spaces is True


def test_blank_exclude_means_no_patterns(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("exclude:\n", encoding="utf-8")

    assert load_settings(path).exclude == []


@pytest.mark.parametrize(
    "content",
    [
        "item_glob:\n",
        "section_path: 5\n",
        "queries_dir: ''\n",
        "strict_header: 'yes'\n",
        "keep_spaces: 1\n",
        "exclude: {a: 1}\n",
        "exclude: [1, 2]\n",
    ],
)
def test_wrong_value_types(tmp_path, content):
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_merged_rejects_non_mapping():
    with pytest.raises(ConfigError):
        Settings().merged(["a"])
