"""Tests for the effects composition pipeline."""

import pytest

from stagecraft.effects import (
    CHROMATIC_ABERRATION_FILTER,
    EFFECT_KINDS,
    EFFECT_TYPES,
    compose_effects,
    legacy_filter_chain,
    make_effect,
    resolve_kind,
)


NEUTRAL_FILTER = {"brightness": 1, "contrast": 1, "saturate": 1, "grayscale": 0, "blur": 0}


class TestEmptyComposition:
    def test_no_inputs_gives_empty_chain(self):
        fragment = compose_effects(None, [], None)
        assert fragment["filter"] == ""
        assert fragment["mix_blend_mode"] is None
        assert fragment["hints"] == []
        assert fragment["svg_filters"] == []

    def test_neutral_legacy_filter_gives_empty_chain(self):
        assert compose_effects(NEUTRAL_FILTER, [], None)["filter"] == ""


class TestLegacyFilter:
    def test_fixed_order_regardless_of_dict_order(self):
        legacy = {"blur": 3, "grayscale": 0.5, "saturate": 2, "contrast": 1.1, "brightness": 0.9}
        assert legacy_filter_chain(legacy) == [
            "brightness(0.9)",
            "contrast(1.1)",
            "saturate(2)",
            "grayscale(0.5)",
            "blur(3px)",
        ]

    def test_neutral_fields_skipped(self):
        assert legacy_filter_chain({"brightness": 1, "blur": 2}) == ["blur(2px)"]

    def test_non_numeric_field_skipped(self):
        assert legacy_filter_chain({"brightness": "bright", "contrast": 1.5}) == ["contrast(1.5)"]


class TestEffectStack:
    def test_legacy_first_then_stack_in_order(self):
        effects = [
            make_effect("hue_rotate", {"degree": 45}),
            make_effect("sepia", {"amount": 0.5}),
            make_effect("gaussian_blur", {"radius": 4}),
        ]
        fragment = compose_effects({"brightness": 1.2, "blur": 2}, effects, None)
        assert fragment["filter"] == (
            "brightness(1.2) blur(2px) hue-rotate(45deg) sepia(0.5) blur(4px)"
        )

    def test_stack_order_is_significant(self):
        a = make_effect("invert", {"amount": 1})
        b = make_effect("sepia", {"amount": 1})
        assert compose_effects(None, [a, b])["filter"] == "invert(1) sepia(1)"
        assert compose_effects(None, [b, a])["filter"] == "sepia(1) invert(1)"

    def test_disabled_effect_skipped(self):
        effects = [
            make_effect("sepia", enabled=False),
            make_effect("invert", {"amount": 0.3}),
        ]
        assert compose_effects(None, effects)["filter"] == "invert(0.3)"

    def test_non_numeric_param_skipped_and_composition_continues(self):
        effects = [
            make_effect("sepia", {"amount": "lots"}),
            make_effect("hue_rotate", {"degree": 30}),
        ]
        assert compose_effects(None, effects)["filter"] == "hue-rotate(30deg)"

    def test_boolean_param_is_malformed(self):
        effect = make_effect("invert", {"amount": True})
        assert compose_effects(None, [effect])["filter"] == ""

    def test_missing_params_skipped(self):
        effect = {"kind": "sepia", "enabled": True}
        assert compose_effects(None, [effect])["filter"] == ""

    def test_unknown_kind_skipped(self):
        effect = {"kind": "sparkle", "enabled": True, "params": {}}
        assert compose_effects(None, [effect])["filter"] == ""

    def test_extra_filters_come_first(self):
        fragment = compose_effects(
            {"contrast": 2}, [make_effect("sepia")], extra_filters=["blur(5px)"],
        )
        assert fragment["filter"] == "blur(5px) contrast(2) sepia(1)"


class TestEffectIdentity:
    def test_legacy_label_migrates_to_kind(self):
        effect = {
            "id": "e1", "type": "color", "name": "Hue Rotate",
            "isEnabled": True, "params": {"degree": 90},
        }
        assert resolve_kind(effect) == "hue_rotate"
        assert compose_effects(None, [effect])["filter"] == "hue-rotate(90deg)"

    def test_kind_survives_relabel(self):
        effect = make_effect("hue_rotate", {"degree": 10}, name="Farbton drehen")
        assert effect["name"] == "Farbton drehen"
        assert compose_effects(None, [effect])["filter"] == "hue-rotate(10deg)"

    def test_kind_takes_precedence_over_label(self):
        effect = {"kind": "invert", "name": "Sepia", "enabled": True, "params": {"amount": 1}}
        assert resolve_kind(effect) == "invert"

    def test_unlabelled_effect_has_no_kind(self):
        assert resolve_kind({"name": 42}) is None


class TestRenderingHints:
    def test_chromatic_aberration_uses_svg_filter(self):
        fragment = compose_effects(None, [make_effect("chromatic_aberration")])
        assert fragment["filter"] == "url(#chromatic-aberration)"
        assert fragment["svg_filters"] == [CHROMATIC_ABERRATION_FILTER]

    def test_chromatic_aberration_filter_channels(self):
        offsets = [p for p in CHROMATIC_ABERRATION_FILTER["primitives"] if p["op"] == "offset"]
        assert {p["channel"]: p["dx"] for p in offsets} == {"red": 2, "blue": -2}

    def test_svg_filter_defined_once(self):
        effects = [make_effect("chromatic_aberration"), make_effect("chromatic_aberration")]
        assert len(compose_effects(None, effects)["svg_filters"]) == 1

    def test_pixelate_is_a_hint_not_a_filter(self):
        fragment = compose_effects(None, [make_effect("pixelate", {"size": 8})])
        assert fragment["filter"] == ""
        assert fragment["hints"] == [{"kind": "pixelate", "size": 8.0}]

    def test_pixelate_size_one_is_noop(self):
        fragment = compose_effects(None, [make_effect("pixelate", {"size": 1})])
        assert fragment["hints"] == []

    def test_glitch_offset(self):
        fragment = compose_effects(None, [make_effect("glitch", {"intensity": 1.5})])
        assert fragment["hints"] == [{"kind": "glitch", "intensity": 1.5, "offset_px": 3.0}]

    def test_vignette_hint(self):
        fragment = compose_effects(None, [make_effect("vignette")])
        assert fragment["hints"] == [{"kind": "vignette", "amount": 1.0}]

    def test_halftone_reads_legacy_param_name(self):
        effect = {"name": "Halftone", "isEnabled": True, "params": {"dotSize": 3}}
        fragment = compose_effects(None, [effect])
        assert fragment["hints"] == [{"kind": "halftone", "dot_size": 3.0}]


class TestBlendMode:
    def test_passes_through(self):
        assert compose_effects(None, [], "multiply")["mix_blend_mode"] == "multiply"

    def test_unknown_value_passes_through_unchanged(self):
        assert compose_effects(None, [], "plus-lighter")["mix_blend_mode"] == "plus-lighter"

    def test_empty_is_unset(self):
        assert compose_effects(None, [], "")["mix_blend_mode"] is None


class TestMakeEffect:
    def test_defaults_filled(self):
        effect = make_effect("gaussian_blur")
        assert effect["params"] == {"radius": 10}
        assert effect["type"] == "blur"
        assert effect["name"] == "Gaussian Blur"
        assert effect["enabled"] is True

    def test_unique_ids(self):
        assert make_effect("sepia")["id"] != make_effect("sepia")["id"]

    def test_explicit_id_kept(self):
        assert make_effect("sepia", effect_id="fx-1")["id"] == "fx-1"

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown effect kind"):
            make_effect("sparkle")

    def test_unknown_param_raises(self):
        with pytest.raises(ValueError, match="unknown param"):
            make_effect("sepia", {"degree": 10})

    def test_legacy_param_name_renamed(self):
        assert make_effect("halftone", {"dotSize": 6})["params"] == {"dot_size": 6}

    @pytest.mark.parametrize("kind", sorted(EFFECT_KINDS))
    def test_every_kind_has_a_known_type(self, kind):
        assert make_effect(kind)["type"] in EFFECT_TYPES

    @pytest.mark.parametrize("kind", sorted(EFFECT_KINDS))
    def test_every_kind_composes_without_error(self, kind):
        compose_effects(None, [make_effect(kind)])
