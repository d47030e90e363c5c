"""Smoke tests for configuration loading, protein catalog and env settings."""
import pytest
from loguru import logger

from utils.config import AppConfig, DataConfig, load_config
from utils.logging_config import configure_logging, reset_logging
from utils.settings import get_settings


@pytest.fixture
def fresh_settings(monkeypatch):
    for name in ("ASSAY_BASE", "PDB_BASE_URL", "DEFAULT_PROTEIN", "LOG_LEVEL", "REQUEST_TIMEOUT"):
        monkeypatch.delenv(f"ASSAY_EXPLORER_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_default_config(tmp_path):
    cfg = AppConfig(base_dir=tmp_path)
    assert cfg.app_name == "Molecular Assay Explorer"
    assert cfg.default_protein == "6LU7"
    assert "1HSG" in cfg.target_ids()
    assert cfg.data.assay_base == str(tmp_path / "data")
    assert cfg.get_target("1hsg").label == "1HSG - HIV-1 Protease"
    assert cfg.get_target("") is None


def test_remote_assay_base_is_left_untouched(tmp_path):
    cfg = AppConfig(base_dir=tmp_path, data=DataConfig(assay_base="https://example.org/assays"))
    assert cfg.data.assay_base == "https://example.org/assays"


def test_targets_yaml_overrides_catalog(tmp_path):
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "protein_targets.yaml").write_text(
        "default: 3clp\n"
        "targets:\n"
        "  - pdb_id: 3clp\n"
        "    name: Test Protease\n"
        "  - pdb_id: 1HSG\n"
        "    name: HIV-1 Protease\n"
    )
    cfg = AppConfig(base_dir=tmp_path)
    assert cfg.target_ids() == ["3CLP", "1HSG"]
    assert cfg.default_protein == "3CLP"


def test_broken_yaml_keeps_defaults(tmp_path):
    (tmp_path / "templates").mkdir()
    (tmp_path / "templates" / "protein_targets.yaml").write_text("targets: [ {pdb_id: 1ABC}\n")
    cfg = AppConfig(base_dir=tmp_path)
    assert cfg.target_ids() == ["6LU7", "1HSG", "1M17"]


def test_unknown_default_protein_falls_back(tmp_path):
    cfg = AppConfig(base_dir=tmp_path, default_protein="9ZZZ")
    assert cfg.default_protein == "6LU7"


def test_env_settings_override(tmp_path, monkeypatch, fresh_settings):
    monkeypatch.setenv("ASSAY_EXPLORER_ASSAY_BASE", "https://cdn.example.org/assays")
    monkeypatch.setenv("ASSAY_EXPLORER_DEFAULT_PROTEIN", "1hsg")
    monkeypatch.setenv("ASSAY_EXPLORER_REQUEST_TIMEOUT", "5")
    cfg = load_config(base_dir=tmp_path)
    assert cfg.data.assay_base == "https://cdn.example.org/assays"
    assert cfg.default_protein == "1HSG"
    assert cfg.data.request_timeout == 5.0


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    reset_logging()
    try:
        configure_logging(level="INFO", log_file=str(log_file))
        configure_logging(level="DEBUG")  # second call is ignored
        logger.info("assay explorer ready")
        logger.debug("not written at INFO")
    finally:
        logger.remove()
        reset_logging()
    content = log_file.read_text()
    assert "assay explorer ready" in content
    assert "not written at INFO" not in content
