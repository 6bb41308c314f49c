"""
Tests for threshold configuration.
"""

import dataclasses

import pytest

from market_bias.engines.analysis_config import (
    DEFAULT_CONFIG,
    AnalysisConfig,
    BiasConfig,
    StructureThresholds,
    clamp,
    create_aggressive_config,
    create_conservative_config,
    get_config,
    safe_divide,
)


class TestHelpers:
    def test_safe_divide(self):
        assert safe_divide(1, 4) == 0.25
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 0, default=0.5) == 0.5

    def test_clamp(self):
        assert clamp(120, 0, 95) == 95
        assert clamp(-3, 0, 95) == 0
        assert clamp(42, 0, 95) == 42


class TestDefaults:
    """Default threshold values"""

    def test_bias_defaults(self):
        bias = DEFAULT_CONFIG.bias
        assert bias.recent_candle_count == 10
        assert bias.reversal_check_count == 3
        assert (bias.liquidity_lower_threshold, bias.liquidity_upper_threshold) == (0.3, 0.7)
        assert bias.momentum_multiplier == 1.5
        assert bias.max_confidence == 95

    def test_structure_defaults(self):
        assert DEFAULT_CONFIG.structure == StructureThresholds(swing_lookback=5, erl_offset=0.001)

    def test_get_config(self):
        assert get_config() is DEFAULT_CONFIG

    def test_configs_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.bias.max_confidence = 100


class TestValidation:
    def test_invalid_window(self):
        with pytest.raises(ValueError):
            BiasConfig(recent_candle_count=0)

    def test_inverted_liquidity_thresholds(self):
        with pytest.raises(ValueError):
            BiasConfig(liquidity_lower_threshold=0.8, liquidity_upper_threshold=0.2)

    def test_invalid_lookback(self):
        with pytest.raises(ValueError):
            StructureThresholds(swing_lookback=0)


class TestProfiles:
    def test_aggressive_is_looser(self):
        config = create_aggressive_config()
        assert isinstance(config, AnalysisConfig)
        assert config.bias.momentum_multiplier < DEFAULT_CONFIG.bias.momentum_multiplier
        assert config.structure.swing_lookback < DEFAULT_CONFIG.structure.swing_lookback

    def test_conservative_is_stricter(self):
        config = create_conservative_config()
        assert config.bias.momentum_multiplier > DEFAULT_CONFIG.bias.momentum_multiplier
        assert config.bias.max_confidence <= DEFAULT_CONFIG.bias.max_confidence
