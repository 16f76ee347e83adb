# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for Config — YAML/TOML loading, env overrides and property binding."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel, Field

from finalizers.core.config import Config, config_properties
from finalizers.jobs.properties import RetryProperties


class TestConfig:
    def test_get_nested_value(self):
        config = Config({"finalizers": {"jobs": {"workers": 2}}})
        assert config.get("finalizers.jobs.workers") == 2

    def test_get_with_default(self):
        assert Config({}).get("missing.key", "default") == "default"

    def test_false_value_is_not_treated_as_missing(self):
        config = Config({"finalizers": {"logging": {"configure": False}}})
        assert config.get("finalizers.logging.configure", True) is False

    def test_load_from_yaml_file(self, tmp_path: Path):
        config_file = tmp_path / "finalizers.yaml"
        config_file.write_text("finalizers:\n  jobs:\n    workers: 8\n")
        config = Config.from_file(config_file)
        assert config.get("finalizers.jobs.workers") == 8
        assert str(config_file) in config.loaded_sources

    def test_load_from_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "finalizers.toml"
        config_file.write_text("[finalizers.jobs]\nretry_priority = 30\n")
        config = Config.from_file(config_file)
        assert config.get("finalizers.jobs.retry_priority") == 30

    def test_file_values_override_packaged_defaults(self, tmp_path: Path):
        config_file = tmp_path / "finalizers.yaml"
        config_file.write_text("finalizers:\n  jobs:\n    retry_wait_seconds: 5\n")
        config = Config.from_file(config_file)
        assert config.get("finalizers.jobs.retry_wait_seconds") == 5
        assert config.get("finalizers.jobs.retry_jitter_seconds") == 15

    def test_missing_file_keeps_defaults(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml")
        assert config.get("finalizers.jobs.queue_priority") == 10

    def test_without_defaults(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml", load_defaults=False)
        assert config.get("finalizers.jobs.queue_priority") is None

    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FINALIZERS_JOBS_WORKERS", "16")
        config = Config({"finalizers": {"jobs": {"workers": 4}}})
        assert config.get("finalizers.jobs.workers") == "16"

    def test_get_section(self):
        config = Config.defaults()
        section = config.get_section("finalizers.jobs")
        assert section["retry_priority"] == 20
        assert config.get_section("finalizers.absent") == {}


class TestPlaceholders:
    def test_resolves_config_reference(self):
        config = Config({"base": {"wait": 12}, "finalizers": {"jobs": {"retry_wait_seconds": "${base.wait}"}}})
        assert config.get("finalizers.jobs.retry_wait_seconds") == "12"

    def test_uses_default_when_unresolved(self):
        config = Config({"finalizers": {"logging": {"format": "${LOG_FORMAT_UNSET:json}"}}})
        assert config.get("finalizers.logging.format") == "json"

    def test_unresolvable_placeholder_raises(self):
        config = Config({"value": "${NOT_THERE_ANYWHERE}"})
        with pytest.raises(ValueError, match="Cannot resolve placeholder"):
            config.get("value")

    def test_circular_reference_raises(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ValueError, match="recursion depth"):
            config.get("a")


class TestProfileConfigMerging:
    def test_merge_profile_config(self, tmp_path: Path):
        base = tmp_path / "finalizers.yaml"
        base.write_text("finalizers:\n  jobs:\n    workers: 2\n    retry_priority: 20\n")
        profile = tmp_path / "finalizers-prod.yaml"
        profile.write_text("finalizers:\n  jobs:\n    workers: 32\n")

        config = Config.from_file(base, active_profiles=["prod"])
        assert config.get("finalizers.jobs.workers") == 32
        assert config.get("finalizers.jobs.retry_priority") == 20

    def test_missing_profile_file_is_skipped(self, tmp_path: Path):
        base = tmp_path / "finalizers.yaml"
        base.write_text("finalizers:\n  jobs:\n    workers: 2\n")
        config = Config.from_file(base, active_profiles=["nonexistent"])
        assert config.get("finalizers.jobs.workers") == 2


class TestConfigProperties:
    def test_bind_retry_properties_from_defaults(self):
        props = Config.defaults().bind(RetryProperties)
        assert props == RetryProperties()

    def test_bind_coerces_env_strings(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("FINALIZERS_JOBS_RETRY_WAIT_SECONDS", "2.5")
        monkeypatch.setenv("FINALIZERS_JOBS_WORKERS", "3")
        props = Config.defaults().bind(RetryProperties)
        assert props.retry_wait_seconds == 2.5
        assert props.workers == 3

    def test_bind_uses_dataclass_defaults(self):
        props = Config({}).bind(RetryProperties)
        assert props.queue_priority == 10
        assert props.conflict_jitter_seconds == 3.0

    def test_bind_pydantic_model(self):
        @config_properties(prefix="finalizers.audit")
        class AuditProperties(BaseModel):
            enabled: bool = False
            retention_days: int = Field(default=30, ge=1)

        config = Config({"finalizers": {"audit": {"enabled": True, "retention_days": 7}}})
        props = config.bind(AuditProperties)
        assert props.enabled is True
        assert props.retention_days == 7

    def test_bind_pydantic_validation_error(self):
        @config_properties(prefix="finalizers.audit")
        class AuditProperties(BaseModel):
            retention_days: int = Field(default=30, ge=1)

        config = Config({"finalizers": {"audit": {"retention_days": 0}}})
        with pytest.raises(ValueError, match="Configuration validation failed"):
            config.bind(AuditProperties)

    def test_bind_requires_decorator(self):
        @dataclass
        class Plain:
            value: int = 1

        with pytest.raises(ValueError, match="not decorated"):
            Config({}).bind(Plain)
