"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

try:
    from ._env import ensure_test_env
except ImportError:
    from tests._env import ensure_test_env
ensure_test_env()

import pytest

from models.server_config import ServerConfig
from server import new_server
from services.config_validator import validate_config
from services.errors import ConfigError, IncompleteCORSConfig, InvalidAPIPrefix, InvalidCSRFSecret


@pytest.mark.parametrize(
    "origins,methods",
    [
        (["https://foobar.com"], []),
        ([], ["GET", "POST"]),
    ],
)
def test_incomplete_cors_config_is_rejected(origins, methods):
    cfg = ServerConfig(access_control_allow_origin=origins, access_control_allow_methods=methods)
    with pytest.raises(IncompleteCORSConfig):
        validate_config(cfg)
    with pytest.raises(IncompleteCORSConfig):
        new_server(cfg)


@pytest.mark.parametrize(
    "origins,methods",
    [
        ([], []),
        (["https://foobar.com"], ["GET", "POST"]),
    ],
)
def test_matched_cors_config_is_accepted(origins, methods):
    cfg = ServerConfig(access_control_allow_origin=origins, access_control_allow_methods=methods)
    assert validate_config(cfg) is cfg
    assert new_server(cfg).config.cors_enabled == bool(origins)


def test_incomplete_cors_error_names_missing_list():
    with pytest.raises(IncompleteCORSConfig) as exc:
        validate_config(ServerConfig(access_control_allow_origin=["https://foobar.com"]))
    assert exc.value.missing == "access_control_allow_methods"
    assert isinstance(exc.value, ConfigError)


def test_csrf_secret_must_be_32_bytes():
    with pytest.raises(InvalidCSRFSecret):
        validate_config(ServerConfig(csrf_secret=b"short"))
    validate_config(ServerConfig(csrf_secret=b"k" * 32))


@pytest.mark.parametrize("prefix", ["api/", "/api", "/", ""])
def test_api_prefix_must_be_slash_delimited(prefix):
    with pytest.raises(InvalidAPIPrefix):
        validate_config(ServerConfig(api_prefix=prefix))


def test_server_generates_csrf_secret_when_absent():
    server = new_server(ServerConfig())
    assert server.config.csrf_secret is not None
    assert len(server.config.csrf_secret) == 32
