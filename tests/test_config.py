from datetime import timedelta
from pathlib import Path
from textwrap import dedent

import pytest

from github_stats.config import Config
from github_stats.exceptions import ConfigurationError
from github_stats.utils import mask_token, parse_duration, validate_url

SAMPLE = dedent(
    """
    version = "1.0.0"

    [server]
    api_url = "https://ghe.example.com/api/v3/"

    [api]
    timeout = 15

    [collection]
    interval = "2h30m"
    log_file = "~/github_stats.log"
    max_workers = 4

    [[orgs]]
    name = "acme"
    token = "tok-acme-1234"
    repos = ["widgets", "gadgets"]

    [[orgs]]
    name = "initech"
    token = "tok-initech-9876"
    repos = ["tps"]
    """
)


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_gives_defaults(tmp_path):
    config = Config.load(tmp_path / "absent.toml")

    assert config.server.api_url == "https://api.github.com"
    assert config.api.request_timeout is None
    assert config.collection.max_workers == 1
    assert config.collection.strict_decode is False
    assert config.interval == timedelta(hours=1)
    assert config.log_file is None
    assert config.repository_targets() == []


def test_load_sample(tmp_path):
    config = Config.load(_write(tmp_path, SAMPLE))

    assert config.server.api_url == "https://ghe.example.com/api/v3"
    assert config.api.request_timeout == 15
    assert config.interval == timedelta(hours=2, minutes=30)
    assert config.log_file == Path("~/github_stats.log").expanduser()
    assert config.collection.max_workers == 4


def test_repository_targets_follow_configuration_order(tmp_path):
    config = Config.load(_write(tmp_path, SAMPLE))

    targets = config.repository_targets()

    assert [t.full_name for t in targets] == ["acme/widgets", "acme/gadgets", "initech/tps"]
    assert targets[0].url == "https://ghe.example.com/api/v3/repos/acme/widgets"
    assert targets[2].token == "tok-initech-9876"
    assert all(t.interval == timedelta(hours=2, minutes=30) for t in targets)


def test_invalid_interval_falls_back_to_one_hour(caplog):
    config = Config.from_dict({"collection": {"interval": "soon"}})

    assert config.interval == timedelta(hours=1)
    assert "using 1:00:00" in caplog.text


def test_non_positive_interval_falls_back_to_one_hour():
    assert Config.from_dict({"collection": {"interval": "0"}}).interval == timedelta(hours=1)
    assert Config.from_dict({"collection": {"interval": "-5m"}}).interval == timedelta(hours=1)


def test_corrupted_file_raises_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        Config.load(_write(tmp_path, "[server\napi_url = "))


@pytest.mark.parametrize(
    "raw",
    [
        {"server": {"api_url": "ftp://example.com"}},
        {"api": {"timeout": -1}},
        {"collection": {"max_workers": 0}},
        {"orgs": [{"name": "  ", "repos": ["x"]}]},
        {"orgs": ["acme"]},
    ],
)
def test_invalid_sections_raise_configuration_error(raw):
    with pytest.raises(ConfigurationError):
        Config.from_dict(raw)


def test_dump_then_load_preserves_settings(tmp_path):
    config = Config.load(_write(tmp_path, SAMPLE))
    target = tmp_path / "nested" / "copy.toml"

    config.dump(target)

    assert Config.load(target).to_dict() == config.to_dict()


def test_masked_hides_tokens(tmp_path):
    masked = Config.load(_write(tmp_path, SAMPLE)).masked()

    assert masked["orgs"][0]["token"] == "*********1234"
    assert "tok-acme" not in str(masked)


def test_validate_required_fields():
    with pytest.raises(ConfigurationError, match="No organizations"):
        Config().validate_required_fields()

    config = Config.from_dict({"orgs": [{"name": "acme", "repos": []}]})
    with pytest.raises(ConfigurationError) as excinfo:
        config.validate_required_fields()
    assert "has no token" in str(excinfo.value)
    assert "lists no repositories" in str(excinfo.value)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1h", timedelta(hours=1)),
        ("30m", timedelta(minutes=30)),
        ("1h30m", timedelta(minutes=90)),
        ("90s", timedelta(seconds=90)),
        ("1.5h", timedelta(minutes=90)),
        ("250ms", timedelta(milliseconds=250)),
        ("0", timedelta(0)),
    ],
)
def test_parse_duration(text, expected):
    assert parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "1", "1d", "h", "1h 30m", "abc"])
def test_parse_duration_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_small_helpers():
    assert validate_url("https://api.github.com")
    assert not validate_url("api.github.com")
    assert mask_token("") == ""
    assert mask_token("abc") == "***"
    assert mask_token("ghp_abcdef") == "******cdef"
