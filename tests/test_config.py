"""Tests for configuration loading and logging setup."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from utils.config import (
    Alternative,
    EnvelopeConfig,
    EnvelopeMethod,
    Measure,
    Ties,
    load_config,
    load_envelope_config,
)
from utils.logging_utils import setup_logging


def test_defaults() -> None:
    cfg = EnvelopeConfig()
    assert cfg.alpha == 0.05
    assert cfg.alternative is Alternative.TWO_SIDED
    assert cfg.ties is Ties.MIDRANK
    assert cfg.measure is Measure.ERL
    assert cfg.erl_hist_n == 6
    assert cfg.probs == (0.025, 0.975)


def test_option_strings_are_parsed() -> None:
    cfg = EnvelopeConfig(alternative="less", measure="area", ties="liberal", method="qdir")
    assert cfg.alternative is Alternative.LESS
    assert cfg.measure is Measure.AREA
    assert cfg.ties is Ties.LIBERAL
    assert cfg.method is EnvelopeMethod.QDIR


@pytest.mark.parametrize(
    "kwargs",
    [
        {"alternative": "both"},
        {"measure": "median"},
        {"ties": "average"},
        {"scaling": "z"},
        {"alpha": 1.5},
        {"alpha": -0.1},
        {"probs": (0.9, 0.1)},
        {"quantile_type": 11},
        {"erl_hist_n": -1},
    ],
)
def test_invalid_options_fail(kwargs) -> None:
    with pytest.raises(ValueError):
        EnvelopeConfig(**kwargs)


def test_non_boolean_savedevs_warns(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        cfg = EnvelopeConfig(savedevs="yes")
    assert cfg.savedevs is False
    assert "savedevs" in caplog.text


def test_load_envelope_config_yaml(tmp_path: Path) -> None:
    path = tmp_path / "test.yaml"
    path.write_text("envelope:\n  alpha: 0.1\n  measure: cont\n  probs: [0.05, 0.95]\n")
    cfg = load_envelope_config(path)
    assert cfg.alpha == pytest.approx(0.1)
    assert cfg.measure is Measure.CONT
    assert cfg.probs == (0.05, 0.95)


def test_load_envelope_config_json_flat(tmp_path: Path) -> None:
    path = tmp_path / "test.json"
    path.write_text(json.dumps({"method": "st", "savedevs": True}))
    cfg = load_envelope_config(path)
    assert cfg.method is EnvelopeMethod.ST
    assert cfg.savedevs is True


def test_unknown_keys_and_formats_fail(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        EnvelopeConfig.from_dict({"alpah": 0.1})
    bad = tmp_path / "cfg.toml"
    bad.write_text("alpha = 0.1")
    with pytest.raises(ValueError):
        load_config(bad)
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers)
    try:
        logger = setup_logging(logging.INFO, log_dir=tmp_path, log_file="run.log")
        logger.info("hello envelopes")
        for handler in root.handlers:
            handler.flush()
        assert "hello envelopes" in (tmp_path / "run.log").read_text()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved:
            root.addHandler(handler)
