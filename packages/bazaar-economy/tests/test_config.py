"""Tests for EconomyConfig and Settings."""
from __future__ import annotations

import pytest
from bazaar_economy import EconomyConfig, Settings


class TestEconomyConfig:
    def test_defaults(self) -> None:
        config = EconomyConfig()
        assert config.tps == 20
        assert config.start_target_value == 50
        assert config.contract_count == 3
        assert config.decay_time_ms == 10000
        assert config.noise_interval_ms == 5000
        assert (config.reward_min, config.reward_max) == (1.0, 1.4)

    def test_is_frozen(self) -> None:
        with pytest.raises(AttributeError):
            EconomyConfig().tps = 60  # type: ignore[misc]


class TestRewardClamping:
    def test_min_is_bounded(self) -> None:
        s = Settings()
        s.set_reward_min(0)
        assert s.reward_min == 0.1
        s.set_reward_min(99)
        assert s.reward_min == 5.0

    def test_raising_min_drags_max(self) -> None:
        s = Settings()
        s.set_reward_min(2.0)
        assert (s.reward_min, s.reward_max) == (2.0, 2.0)

    def test_lowering_max_drags_min(self) -> None:
        s = Settings()
        s.set_reward_max(0.5)
        assert (s.reward_min, s.reward_max) == (0.5, 0.5)

    def test_max_is_bounded(self) -> None:
        s = Settings()
        s.set_reward_max(10)
        assert s.reward_max == 6.0
        assert s.reward_min == 1.0


class TestStoredSettings:
    def test_round_trip(self) -> None:
        s = Settings(contract_count=5, paused=True)
        s.set_reward_max(2.5)
        loaded = Settings()
        loaded.update_from(s.to_dict())
        assert loaded == s

    def test_bad_fields_are_skipped(self) -> None:
        s = Settings()
        s.update_from({
            "decay_time_ms": -1,
            "noise_interval_ms": "fast",
            "contract_count": True,
            "paused": "yes",
            "reward_min": None,
        })
        assert s == Settings()

    def test_non_mapping_is_ignored(self) -> None:
        s = Settings()
        s.update_from(["nope"])
        assert s == Settings()

    def test_from_config(self) -> None:
        config = EconomyConfig(contract_count=7, reward_min=2.0, reward_max=1.5)
        s = Settings.from_config(config)
        assert s.contract_count == 7
        # The later max wins and drags the min down with it.
        assert (s.reward_min, s.reward_max) == (1.5, 1.5)
