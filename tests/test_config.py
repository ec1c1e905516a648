"""Tests for wavfx.config (EffectConfig defaults and validation)."""

import math

import pytest

from wavfx.config import EFFECTS, EffectConfig, EffectConfigError


class TestDefaults:
    def test_documented_defaults(self):
        c = EffectConfig()
        assert c.effect == "echo"
        assert c.wet == 0.5
        assert c.delay_ms == 250.0
        assert c.decay_time_s == 1.0
        assert c.chorus_rate_hz == 0.8
        assert c.chorus_depth_ms == 20.0
        assert c.damping == 0.5

    def test_defaults_valid(self):
        for effect in EFFECTS:
            EffectConfig(effect=effect).validate()

    def test_effect_name_normalised(self):
        assert EffectConfig(effect=" Reverb ").effect == "reverb"

    def test_validate_returns_self(self):
        c = EffectConfig()
        assert c.validate() is c


class TestValidation:
    @pytest.mark.parametrize(
        "overrides,match",
        [
            ({"effect": "flanger"}, "Unknown effect"),
            ({"wet": -0.01}, "wet"),
            ({"wet": 1.01}, "wet"),
            ({"wet": math.nan}, "finite"),
            ({"delay_ms": 0.0}, "delay_ms"),
            ({"delay_ms": -5.0}, "delay_ms"),
            ({"delay_ms": math.inf}, "finite"),
            ({"decay_time_s": 0.0}, "decay_time_s"),
            ({"decay_time_s": -1.0}, "decay_time_s"),
            ({"wet": "0.5"}, "number"),
            ({"wet": True}, "number"),
        ],
    )
    def test_echo_rejects(self, overrides, match):
        with pytest.raises(EffectConfigError, match=match):
            EffectConfig(**overrides).validate()

    def test_reverb_damping_range(self):
        EffectConfig(effect="reverb", damping=0.0).validate()
        EffectConfig(effect="reverb", damping=0.99).validate()
        with pytest.raises(EffectConfigError, match="damping"):
            EffectConfig(effect="reverb", damping=1.0).validate()
        with pytest.raises(EffectConfigError, match="damping"):
            EffectConfig(effect="reverb", damping=-0.1).validate()

    def test_chorus_ranges(self):
        EffectConfig(effect="chorus", chorus_depth_ms=0.0).validate()
        with pytest.raises(EffectConfigError, match="chorus_rate_hz"):
            EffectConfig(effect="chorus", chorus_rate_hz=0.0).validate()
        with pytest.raises(EffectConfigError, match="chorus_depth_ms"):
            EffectConfig(effect="chorus", chorus_depth_ms=-1.0).validate()

    def test_chorus_ignores_decay(self):
        EffectConfig(effect="chorus", decay_time_s=0.0).validate()

    def test_echo_ignores_chorus_params(self):
        EffectConfig(effect="echo", chorus_rate_hz=0.0, chorus_depth_ms=-3.0).validate()

    def test_gain_rounding_to_one_rejected(self):
        with pytest.raises(EffectConfigError, match="too short"):
            EffectConfig(delay_ms=1e-20, decay_time_s=1.0).validate()

    def test_config_error_is_value_error(self):
        assert issubclass(EffectConfigError, ValueError)


class TestDerived:
    def test_feedback_gain(self):
        c = EffectConfig(delay_ms=250.0, decay_time_s=1.0)
        assert c.feedback_gain == pytest.approx(10 ** -0.75)

    def test_delay_s(self):
        assert EffectConfig(delay_ms=125.0).delay_s == 0.125


class TestRoundTrip:
    def test_replace(self):
        c = EffectConfig().replace(effect="chorus", wet=0.2)
        assert c.effect == "chorus"
        assert c.wet == 0.2

    def test_replace_unknown_field(self):
        with pytest.raises(EffectConfigError):
            EffectConfig().replace(speed=3)

    def test_dict_round_trip(self):
        c = EffectConfig(effect="reverb", wet=0.3, damping=0.7)
        assert EffectConfig.from_dict(c.to_dict()) == c

    def test_from_dict_unknown_keys(self):
        with pytest.raises(EffectConfigError, match="Unknown config keys"):
            EffectConfig.from_dict({"effect": "echo", "feedback": 0.4})

    def test_frozen(self):
        with pytest.raises(AttributeError):
            EffectConfig().wet = 0.1
