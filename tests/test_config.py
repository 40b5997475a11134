"""Tests for the configuration module."""

import os
import tempfile

import yaml

from sysmet.config import SysmetConfig, load_config


def test_load_config_defaults():
    """Loading from a non-existent file returns defaults."""
    cfg = load_config("/tmp/nonexistent_sysmet.yaml")
    assert isinstance(cfg, SysmetConfig)
    assert cfg.log_level == "WARNING"
    assert cfg.store.database == "./sysmet.db"
    assert cfg.store.lock_timeout_seconds == 5.0
    assert cfg.store.lock_poll_interval_seconds == 0.1
    assert cfg.update.ignored_networks == []
    assert cfg.update.cleanup_older_days is None
    assert cfg.dashboard.refresh_interval_seconds == 120.0
    assert cfg.thresholds.cpu == 95
    assert cfg.thresholds.swap == 65


def test_load_config_from_yaml():
    """Loading from a YAML file populates values and ignores unknown keys."""
    data = {
        "store": {"database": "/var/lib/sysmet/metrics.db", "unknown": 1},
        "update": {"ignored_networks": ["lo", "docker0"], "cleanup_older_days": 30},
        "thresholds": {"cpu": 80, "disk": None},
    }
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        path = fh.name

    try:
        cfg = load_config(path)
        assert cfg.store.database == "/var/lib/sysmet/metrics.db"
        assert cfg.update.ignored_networks == ["lo", "docker0"]
        assert cfg.update.cleanup_older_days == 30
        thresholds = cfg.thresholds.to_thresholds()
        assert thresholds.cpu == 80
        assert thresholds.disk is None
        assert thresholds.ram == 90
    finally:
        os.unlink(path)


def test_env_override():
    """Environment variables override YAML values."""
    data = {"store": {"database": "from-yaml.db"}}
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        path = fh.name

    try:
        os.environ["SYSMET_DATABASE"] = "from-env.db"
        os.environ["SYSMET_IGNORED_NETWORKS"] = "lo, veth0"
        os.environ["SYSMET_CPU_THRESHOLD"] = "none"
        os.environ["SYSMET_CLEANUP_OLDER"] = "7"
        cfg = load_config(path)
        assert cfg.store.database == "from-env.db"
        assert cfg.update.ignored_networks == ["lo", "veth0"]
        assert cfg.update.cleanup_older_days == 7
        assert cfg.thresholds.cpu is None
    finally:
        for key in ("SYSMET_DATABASE", "SYSMET_IGNORED_NETWORKS", "SYSMET_CPU_THRESHOLD", "SYSMET_CLEANUP_OLDER"):
            os.environ.pop(key, None)
        os.unlink(path)
