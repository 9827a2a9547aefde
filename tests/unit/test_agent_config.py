from pathlib import Path

import pytest

from flannel_agent import config as agent_config
from flannel_agent.config import load_config


def test_load_config(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
kubernetes:
  kubeconfig: /home/ops/.kube/config
  context: guest-ab12
  namespace: tenants
backoff:
  max_elapsed_time: 120
  max_attempts: 7
  initial_interval: 1
  max_interval: 30
  multiplier: 1.5
informer:
  resync_period: 45
  stop_timeout: 3
  poll_interval: 0.2
crd:
  establish_timeout: 90
"""
    )

    cfg = load_config(config_path)

    assert cfg.kubernetes.kubeconfig == Path("/home/ops/.kube/config")
    assert cfg.kubernetes.context == "guest-ab12"
    assert cfg.kubernetes.namespace == "tenants"
    assert cfg.kubernetes.in_cluster is False
    assert cfg.backoff.max_elapsed_time == pytest.approx(120.0)
    assert cfg.backoff.max_attempts == 7
    assert cfg.backoff.initial_interval == pytest.approx(1.0)
    assert cfg.backoff.max_interval == pytest.approx(30.0)
    assert cfg.backoff.multiplier == pytest.approx(1.5)
    assert cfg.informer.resync_period == pytest.approx(45.0)
    assert cfg.informer.stop_timeout == pytest.approx(3.0)
    assert cfg.informer.poll_interval == pytest.approx(0.2)
    assert cfg.establish_timeout == pytest.approx(90.0)


def test_load_config_defaults(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("")

    cfg = load_config(config_path)

    assert cfg.kubernetes.in_cluster is True
    assert cfg.kubernetes.namespace == ""
    assert cfg.backoff.max_elapsed_time == pytest.approx(300.0)
    assert cfg.backoff.max_attempts == 0
    assert cfg.informer.resync_period == pytest.approx(60.0)
    assert cfg.informer.stop_timeout == pytest.approx(5.0)


def test_missing_default_file_uses_defaults(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(agent_config, "DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")

    cfg = load_config(None)

    assert cfg.backoff.initial_interval == pytest.approx(0.5)


def test_load_config_rejects_non_mapping(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="must be a mapping"):
        load_config(config_path)


def test_load_config_rejects_bad_numbers(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("backoff:\n  max_interval: soon\n")

    with pytest.raises(ValueError, match="max_interval"):
        load_config(config_path)


def test_load_config_rejects_negative_values(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("informer:\n  resync_period: -1\n")

    with pytest.raises(ValueError, match="resync_period"):
        load_config(config_path)
