"""Unit tests for configuration loading and validation."""

import pytest
import yaml
from pydantic import ValidationError

from qrlocate.config_loader import (
    DEFAULT_CONFIG_PATH,
    Config,
    DecodingConfig,
    PreprocessingConfig,
    RectificationConfig,
    StrategySpec,
    get_default_config,
    load_config,
)


class TestBundledConfig:
    def test_bundled_file_exists(self):
        assert DEFAULT_CONFIG_PATH.exists()

    def test_padding_ratios(self):
        config = get_default_config()

        assert config.region.extract_margin_ratio == pytest.approx(0.1)
        assert config.validation.roi_padding_ratio == pytest.approx(0.3)
        assert config.rectification.padding_ratio == pytest.approx(0.15)

    def test_matches_model_defaults(self):
        assert get_default_config() == Config()

    def test_decoding_scales(self):
        decoding = get_default_config().decoding

        assert decoding.vendor_scales == [1, 2]
        assert decoding.primary_scales == [1, 2, 3, 4]


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_partial_override(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump({"validation": {"target_size": 480}, "runtime": {"init_timeout_s": 5}})
        )

        config = load_config(path)

        assert config.validation.target_size == 480
        assert config.runtime.init_timeout_s == 5
        assert config.validation.roi_padding_ratio == pytest.approx(0.3)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_config(path) == Config()

    def test_strategies(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "detection:\n"
            "  strategies:\n"
            "    - name: identity\n"
            "    - name: big\n"
            "      steps: ['scale:3', contrast]\n"
        )

        config = load_config(path)

        assert [s.name for s in config.detection.strategies] == ["identity", "big"]
        assert config.detection.strategies[1].steps == ["scale:3", "contrast"]

    def test_unknown_step_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("detection:\n  strategies:\n    - name: x\n      steps: [sepia]\n")

        with pytest.raises(ValidationError, match="Unknown preprocessing step"):
            load_config(path)

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("{}")

        assert isinstance(load_config(str(path)), Config)


class TestFieldValidation:
    def test_even_kernel_rejected(self):
        with pytest.raises(ValidationError, match="must be odd"):
            PreprocessingConfig(blur_kernel_size=4)

    def test_small_adaptive_block_rejected(self):
        with pytest.raises(ValidationError):
            PreprocessingConfig(adaptive_block_size=1)

    def test_rectification_padding_upper_bound(self):
        with pytest.raises(ValidationError):
            RectificationConfig(padding_ratio=0.6)

    def test_empty_scales_rejected(self):
        with pytest.raises(ValidationError, match="at least one scale"):
            DecodingConfig(primary_scales=[])

    def test_negative_scale_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            DecodingConfig(vendor_scales=[1, -2])

    def test_strategy_spec_default_steps(self):
        assert StrategySpec(name="identity").steps == []

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            Config(runtime={"init_timeout_s": 0})

