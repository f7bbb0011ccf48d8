from __future__ import annotations

from pathlib import Path

import pytest

from einvoice_excel.config.loader import ConfigError, load_config
from einvoice_excel.models.config_models import DefaultValues, MapperConfig


def test_load_config_none_returns_defaults():
    cfg = load_config(None)
    assert cfg == MapperConfig()
    assert cfg.metadata_rows == 2
    assert cfg.defaults.currency == "MYR"
    assert cfg.defaults.scheme_agency_name == "CertEx"


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.metadata_rows == 2
    assert cfg.schema_version == "v1"
    assert cfg.error_log_dir == "logs"
    assert cfg.defaults.invoice_type == "01"
    # 未指定キーは既定値
    assert cfg.defaults.tax_scheme_id == "OTH"


def test_load_config_overrides(temp_workdir: Path):
    path = temp_workdir / "config" / "custom.yml"
    path.write_text(
        "metadata_rows: 0\nerror_log_dir: out/errors\ndefaults:\n  currency: USD\n  country_list_agency_id: '5'\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.metadata_rows == 0
    assert cfg.error_log_dir == "out/errors"
    assert cfg.defaults == DefaultValues(currency="USD", country_list_agency_id="5")


def test_load_config_empty_file(temp_workdir: Path):
    path = temp_workdir / "config" / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == MapperConfig()


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "broken.yml"
    path.write_text("metadata_rows: [1,\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_load_config_root_not_mapping(temp_workdir: Path):
    path = temp_workdir / "config" / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="config root must be a mapping"):
        load_config(path)
