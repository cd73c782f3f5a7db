"""
Tests for prro.config — offline limits and settings resolution.
"""

import os
import subprocess
import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest
from django.test import override_settings

from prro.config import (
    DEFAULT_OFFLINE_CONFIG,
    MAX_MONTHLY_MINUTES,
    MAX_SESSION_MINUTES,
    OfflineConfig,
    load_offline_config,
)


class TestOfflineConfigDefaults:
    def test_statutory_limits(self):
        assert MAX_SESSION_MINUTES == 2160
        assert MAX_MONTHLY_MINUTES == 10080
        assert DEFAULT_OFFLINE_CONFIG.max_session_minutes == 2160
        assert DEFAULT_OFFLINE_CONFIG.max_monthly_minutes == 10080
        assert DEFAULT_OFFLINE_CONFIG.monthly_warning_minutes == 8400
        assert DEFAULT_OFFLINE_CONFIG.expiry_warning_minutes == 60
        assert DEFAULT_OFFLINE_CONFIG.max_package_size == 100
        assert DEFAULT_OFFLINE_CONFIG.testing is False

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_OFFLINE_CONFIG.max_package_size = 5


class TestOfflineConfigValidation:
    @pytest.mark.parametrize("value", [0, -1, "10", True])
    def test_rejects_bad_limits(self, value):
        with pytest.raises(ValueError):
            OfflineConfig(max_session_minutes=value)

    def test_warning_above_cap_rejected(self):
        with pytest.raises(ValueError, match="monthly_warning_minutes"):
            OfflineConfig(max_monthly_minutes=100, monthly_warning_minutes=200)

    def test_empty_time_zone_rejected(self):
        with pytest.raises(ValueError):
            OfflineConfig(time_zone="")


class TestFromMapping:
    def test_keys_case_insensitive(self):
        config = OfflineConfig.from_mapping({"MAX_PACKAGE_SIZE": 10, "testing": True})
        assert config.max_package_size == 10
        assert config.testing is True

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="MAX_SPEED"):
            OfflineConfig.from_mapping({"MAX_SPEED": 1})


class TestLoadOfflineConfig:
    def test_reads_django_settings(self):
        with override_settings(PRRO_OFFLINE={"MAX_PACKAGE_SIZE": 25}):
            assert load_offline_config().max_package_size == 25

    def test_overrides_win_over_settings(self):
        with override_settings(PRRO_OFFLINE={"MAX_PACKAGE_SIZE": 25}):
            config = load_offline_config({"max_package_size": 5})
        assert config.max_package_size == 5

    def test_empty_settings_fall_back_to_defaults(self):
        with override_settings(PRRO_OFFLINE={}):
            assert load_offline_config() is DEFAULT_OFFLINE_CONFIG


REPO_ROOT = Path(__file__).resolve().parents[2]

READ_PACKAGE_SIZE = (
    "from prro.config import load_offline_config; "
    "print(load_offline_config().max_package_size)"
)


def _run_fresh_interpreter(env_overrides: dict, pythonpath: list) -> str:
    env = {
        key: value
        for key, value in os.environ.items()
        if key not in ("DJANGO_SETTINGS_MODULE", "PYTHONPATH")
    }
    env.update(env_overrides)
    env["PYTHONPATH"] = os.pathsep.join(str(path) for path in pythonpath)
    completed = subprocess.run(
        [sys.executable, "-c", READ_PACKAGE_SIZE],
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
        check=True,
    )
    return completed.stdout.strip()


class TestLoadOfflineConfigFreshProcess:
    def test_settings_module_read_before_any_other_settings_access(self, tmp_path):
        (tmp_path / "small_package_settings.py").write_text(
            'SECRET_KEY = "test"\n'
            "INSTALLED_APPS = []\n"
            'PRRO_OFFLINE = {"MAX_PACKAGE_SIZE": 7}\n',
            encoding="utf-8",
        )
        output = _run_fresh_interpreter(
            {"DJANGO_SETTINGS_MODULE": "small_package_settings"},
            [tmp_path, REPO_ROOT],
        )
        assert output == "7"

    def test_without_settings_module_defaults_apply(self):
        assert _run_fresh_interpreter({}, [REPO_ROOT]) == "100"
