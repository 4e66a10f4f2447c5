"""测试 unirank.config 中的配置加载与合并逻辑。"""

from pathlib import Path

import pytest

import unirank.config as cfg


def _copy_repo_config(tmp_path: Path) -> Path:
    repo_config = Path(cfg.PROJECT_ROOT) / "config.yaml"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(repo_config.read_text(encoding="utf-8"), encoding="utf-8")
    return config_path


def test_build_effective_config_missing_file_raises(tmp_path: Path) -> None:
    """config.yaml 不存在时应抛出 FileNotFoundError。"""
    with pytest.raises(FileNotFoundError):
        cfg.build_effective_config(config_path=tmp_path / "config.yaml")


def test_repo_config_defaults() -> None:
    effective = cfg.build_effective_config()
    assert effective["profile"] == "default"
    assert effective["table"] == "university_excel_data"
    assert cfg.header_row_offset(effective) == 3
    assert effective["export"]["sheet_title"] == "University Rankings"


def test_profile_and_overrides_merge(tmp_path: Path) -> None:
    """profile 覆盖 defaults，overrides 再覆盖 profile；嵌套 dict 做一层合并。"""
    config_path = _copy_repo_config(tmp_path)
    effective = cfg.build_effective_config(
        profile="debug",
        config_path=config_path,
        overrides={"db_path": str(tmp_path / "x.db"), "export": {"sheet_title": "Custom"}},
    )
    assert effective["log_level"] == "DEBUG"
    assert effective["db_path"] == str(tmp_path / "x.db")
    assert effective["export"]["sheet_title"] == "Custom"
    assert effective["export"]["csv_filename"] == "university-data.csv"
    assert effective["config_path"] == str(config_path)


def test_missing_profile_raises(tmp_path: Path) -> None:
    config_path = _copy_repo_config(tmp_path)
    with pytest.raises(KeyError):
        cfg.build_effective_config(profile="research", config_path=config_path)


@pytest.mark.parametrize("text", ["- 1\n- 2\n", "profile: default\n", "defaults: [1, 2]\n"])
def test_invalid_config_shapes_raise_value_error(tmp_path: Path, text: str) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(text, encoding="utf-8")
    with pytest.raises(ValueError):
        cfg.build_effective_config(config_path=config_path)


def test_header_row_offset_falls_back_to_fixed_layout() -> None:
    assert cfg.header_row_offset({}) == cfg.HEADER_ROW_OFFSET
    assert cfg.header_row_offset({"import": {"header_row_offset": "5"}}) == 5
