from argparse import Namespace

import pytest

from gitea_provider.cli.config import DEFAULT_TIMEOUT_SECONDS, load_config, parse_bool


def make_args(base_url=None, destructive_actions=False):
    return Namespace(base_url=base_url, destructive_actions=destructive_actions)


def test_defaults_from_env():
    config = load_config(make_args(), {"GITEA_BASE_URL": "https://gitea.example.com/", "GITEA_TOKEN": "abc"})

    assert config.base_url == "https://gitea.example.com"
    assert config.token == "abc"
    assert config.destructive_actions is False
    assert config.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert config.max_pages is None


def test_flag_wins_over_env():
    config = load_config(make_args("http://localhost:3000"), {"GITEA_BASE_URL": "https://other.example.com"})

    assert config.base_url == "http://localhost:3000"


def test_blank_token_is_no_token():
    config = load_config(make_args("https://gitea.example.com"), {"GITEA_TOKEN": "  "})

    assert config.token is None


def test_missing_base_url():
    with pytest.raises(ValueError, match="GITEA_BASE_URL"):
        load_config(make_args(), {})


@pytest.mark.parametrize("base_url", ["gitea.example.com", "ftp://gitea.example.com", "https://"])
def test_base_url_must_be_http(base_url):
    with pytest.raises(ValueError, match="http"):
        load_config(make_args(base_url), {})


@pytest.mark.parametrize(
    ("flag", "env_value", "expected"),
    [
        (False, None, False),
        (True, None, True),
        (False, "yes", True),
        (False, "0", False),
    ],
)
def test_destructive_actions(flag, env_value, expected):
    env = {} if env_value is None else {"GITEA_DESTRUCTIVE_ACTIONS": env_value}

    config = load_config(make_args("https://gitea.example.com", destructive_actions=flag), env)

    assert config.destructive_actions is expected


def test_timeout_and_max_pages():
    env = {"GITEA_TIMEOUT_SECONDS": "2.5", "GITEA_MAX_PAGES": "40"}

    config = load_config(make_args("https://gitea.example.com"), env)

    assert config.timeout_seconds == 2.5
    assert config.max_pages == 40


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("GITEA_TIMEOUT_SECONDS", "soon"),
        ("GITEA_TIMEOUT_SECONDS", "0"),
        ("GITEA_MAX_PAGES", "1.5"),
        ("GITEA_MAX_PAGES", "-1"),
        ("GITEA_DESTRUCTIVE_ACTIONS", "maybe"),
    ],
)
def test_invalid_values(name, value):
    with pytest.raises(ValueError, match=name):
        load_config(make_args("https://gitea.example.com"), {name: value})


def test_parse_bool():
    assert parse_bool("TRUE", "X") is True
    assert parse_bool(None, "X") is False
    with pytest.raises(ValueError):
        parse_bool("2", "X")
