"""
Property-based tests for configuration loading.

Uses Hypothesis for property-based testing to verify that configuration
files and environment variables are mapped onto the configuration
dataclasses, and that unusable files raise ConfigurationError.
"""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ipv6_checker.cli import create_default_config, load_config_from_file
from ipv6_checker.config import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_REGISTRY_PATH,
    SystemConfig,
)
from ipv6_checker.exceptions import ConfigurationError


ENV_KEYS = ("IPV6_CHECKER_REGISTRY", "IPV6_CHECKER_LANG", "IPV6_CHECKER_HTTP_TIMEOUT", "IPV6_CHECKER_DEBUG")


def _clean_env(**values) -> dict:
    env = {k: v for k, v in os.environ.items() if k not in ENV_KEYS}
    env.update(values)
    return env


@st.composite
def config_document_strategy(draw) -> dict:
    """Generate valid JSON configuration documents."""
    document = {
        "probe": {
            "http_timeout_seconds": draw(st.floats(min_value=0.1, max_value=60.0, allow_nan=False)),
            "verify_tls": draw(st.booleans()),
        },
        "persistence": {
            "registry_path": draw(st.sampled_from(["data/services.yaml", "registry.json", "a/b/c.yml"])),
        },
        "logging": {
            "level": draw(st.sampled_from(["debug", "info", "warn", "error"])),
            "output_format": draw(st.sampled_from(["json", "text", "both"])),
        },
        "run": {
            "max_parallel_endpoints": draw(st.integers(min_value=1, max_value=16)),
        },
        "language": draw(st.sampled_from(["en", "de"])),
        "overrides": draw(st.lists(
            st.fixed_dictionaries({
                "endpoint_id": st.sampled_from(["cdn", "shop", "mail"]),
                "reason": st.sampled_from(["edge rejects probe client", "known false negative"]),
                "variant": st.sampled_from([None, "apex", "www"]),
                "http_works": st.booleans(),
            }),
            max_size=3,
        )),
    }
    return document


def _load(document) -> SystemConfig:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.json"
        path.write_text(document if isinstance(document, str) else json.dumps(document), encoding="utf-8")
        return load_config_from_file(path)


class TestConfigFileProperty:
    """Property 1: Every value in a config file reaches the configuration."""

    @given(document=config_document_strategy())
    @settings(max_examples=100, deadline=None)
    def test_file_values_are_applied(self, document: dict) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            config = _load(document)

        assert config.probe.http_timeout_seconds == document["probe"]["http_timeout_seconds"]
        assert config.probe.verify_tls == document["probe"]["verify_tls"]
        assert config.persistence.registry_path == Path(document["persistence"]["registry_path"])
        assert config.logging.level == document["logging"]["level"]
        assert config.logging.output_format == document["logging"]["output_format"]
        assert config.run.max_parallel_endpoints == document["run"]["max_parallel_endpoints"]
        assert config.language == document["language"]
        assert [o.endpoint_id for o in config.overrides] == [o["endpoint_id"] for o in document["overrides"]]
        assert [o.variant for o in config.overrides] == [o["variant"] for o in document["overrides"]]

    def test_empty_file_uses_defaults(self) -> None:
        with patch.dict(os.environ, _clean_env(), clear=True):
            config = _load({})

        assert config.probe.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS
        assert config.persistence.registry_path == DEFAULT_REGISTRY_PATH
        assert config.logging.level == "info"
        assert config.language == "en"
        assert config.overrides == []

    def test_missing_file(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_config_from_file(Path("/nonexistent/config.json"))
        assert exc_info.value.code == "not_found"

    def test_invalid_json(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            _load("{not json")
        assert exc_info.value.code == "parse_error"

    @pytest.mark.parametrize("document", [
        {"probe": {"http_timeout_seconds": "soon"}},
        {"overrides": [{"reason": "no endpoint id"}]},
        {"probe": []},
    ])
    def test_invalid_values(self, document: dict) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            _load(document)
        assert exc_info.value.code == "invalid_config"


class TestEnvironmentProperty:
    """Property 2: Environment variables provide the defaults."""

    @given(
        timeout=st.floats(min_value=0.5, max_value=30.0, allow_nan=False),
        language=st.sampled_from(["en", "de", "DE"]),
        debug=st.booleans(),
    )
    @settings(max_examples=50)
    def test_environment_values(self, timeout: float, language: str, debug: bool) -> None:
        env = _clean_env(
            IPV6_CHECKER_REGISTRY="custom/registry.yaml",
            IPV6_CHECKER_LANG=language,
            IPV6_CHECKER_HTTP_TIMEOUT=repr(timeout),
            IPV6_CHECKER_DEBUG="1" if debug else "0",
        )
        with patch.dict(os.environ, env, clear=True):
            config = create_default_config()

        assert config.persistence.registry_path == Path("custom/registry.yaml")
        assert config.language == language.lower()
        assert config.probe.http_timeout_seconds == timeout
        assert config.logging.level == ("debug" if debug else "info")

    def test_invalid_values_fall_back(self) -> None:
        env = _clean_env(IPV6_CHECKER_LANG="fr", IPV6_CHECKER_HTTP_TIMEOUT="fast")
        with patch.dict(os.environ, env, clear=True):
            config = create_default_config()

        assert config.language == "en"
        assert config.probe.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS

    def test_file_overrides_environment(self) -> None:
        env = _clean_env(IPV6_CHECKER_LANG="de", IPV6_CHECKER_REGISTRY="env.yaml")
        with patch.dict(os.environ, env, clear=True):
            config = _load({"language": "en"})

        assert config.language == "en"
        assert config.persistence.registry_path == Path("env.yaml")
