"""Tests for final style composition."""

import pytest

from stagecraft.animation import IDENTITY, AnimationDelta
from stagecraft.compose import build_transform, compose_clip_style, render_scene
from stagecraft.effects import make_effect
from stagecraft.manifest import normalize_scene


def _clip(**overrides):
    clip = {
        "id": "c1",
        "type": "image",
        "start": 0,
        "end": 5,
        "geometry": {"x": 0, "y": 0, "width": 100, "height": 100,
                     "rotation": 0, "scale": 1, "opacity": 1},
    }
    clip.update(overrides)
    return clip


class TestBuildTransform:
    def test_geometry_only(self):
        geometry = {"x": 10, "y": 20.5, "rotation": 45, "scale": 2}
        assert build_transform(geometry, IDENTITY) == (
            "translate(10px, 20.5px) rotate(45deg) scale(2)"
        )

    def test_animation_scale_follows_geometry_scale(self):
        geometry = {"x": 0, "y": 0, "rotation": 0, "scale": 2}
        transform = build_transform(geometry, AnimationDelta(scale=0.5))
        assert transform == "translate(0px, 0px) rotate(0deg) scale(2) scale(0.5)"

    def test_offsets_precede_animation_scale(self):
        geometry = {"x": 0, "y": 0, "rotation": 0, "scale": 1}
        delta = AnimationDelta(scale=0.25, translate_x=-50, offset_y=-15)
        assert build_transform(geometry, delta) == (
            "translate(0px, 0px) rotate(0deg) scale(1) "
            "translate(-50%, 0%) translateY(-15px) scale(0.25)"
        )

    def test_slide_offset_in_percent(self):
        geometry = {"x": 0, "y": 0, "rotation": 0, "scale": 1}
        transform = build_transform(geometry, AnimationDelta(translate_y=-25))
        assert transform.endswith("translate(0%, -25%)")

    def test_bounce_offset_in_pixels(self):
        geometry = {"x": 0, "y": 0, "rotation": 0, "scale": 1}
        transform = build_transform(geometry, AnimationDelta(offset_y=-15))
        assert transform.endswith("translateY(-15px)")


class TestComposeClipStyle:
    def test_static_clip(self):
        style = compose_clip_style(_clip(), 1.0)
        assert style["transform"] == "translate(0px, 0px) rotate(0deg) scale(1)"
        assert style["transform_origin"] == "0 0"
        assert style["opacity"] == 1.0
        assert style["width"] == 100
        assert style["filter"] == ""
        assert style["clip_path"] is None
        assert style["mix_blend_mode"] is None
        assert style["text"] is None
        assert style["background"] is None

    def test_geometry_opacity_multiplies_animation(self):
        clip = _clip(
            geometry={"opacity": 0.5},
            animation={"enter": {"type": "fade", "duration": 1, "easing": "linear"}},
        )
        assert compose_clip_style(clip, 0.5)["opacity"] == pytest.approx(0.25)

    def test_bounce_enter(self):
        clip = _clip(animation={"enter": {"type": "bounce", "duration": 1, "easing": "linear"}})
        style = compose_clip_style(clip, 0.25)
        assert style["transform"] == (
            "translate(0px, 0px) rotate(0deg) scale(1) translateY(-15px) scale(0.25)"
        )

    def test_animation_blur_precedes_effects(self):
        clip = _clip(
            animation={"enter": {"type": "blur", "duration": 1, "easing": "linear"}},
            effects=[make_effect("sepia")],
        )
        assert compose_clip_style(clip, 0.25)["filter"] == "blur(15px) sepia(1)"

    def test_wipe_sets_clip_path(self):
        clip = _clip(animation={"exit": {"type": "wipe", "duration": 1,
                                         "direction": "top", "easing": "linear"}})
        assert compose_clip_style(clip, 4.5)["clip_path"] == "inset(0 0 50% 0)"

    def test_text_clip_gets_typewriter_text(self):
        clip = _clip(
            type="text", text="Hello",
            animation={"enter": {"type": "typewriter", "duration": 1, "easing": "linear"}},
        )
        assert compose_clip_style(clip, 0.7)["text"] == "Hel|"

    def test_shape_fill_is_background(self):
        style = compose_clip_style(_clip(type="shape", fill="rgb(1, 2, 3)"), 1.0)
        assert style["background"] == "rgb(1, 2, 3)"


class TestRenderScene:
    @pytest.fixture
    def scene(self, scene_data):
        return normalize_scene(scene_data)

    def test_visible_clips_in_manifest_order(self, scene):
        assert [s["id"] for s in render_scene(scene, 2.0)] == ["title", "photo"]

    def test_end_is_exclusive(self, scene):
        assert [s["id"] for s in render_scene(scene, 5.0)] == ["photo"]

    def test_nothing_visible(self, scene):
        assert render_scene(scene, 10.0) == []

    def test_title_overlapping_exit(self, scene):
        style = render_scene(scene, 4.5)[0]
        assert style["id"] == "title"
        assert style["opacity"] == pytest.approx(0.5)
        assert style["transform"] == (
            "translate(100px, 50px) rotate(0deg) scale(1) translate(-50%, 0%)"
        )
        assert style["text"] == "Hello"

    def test_title_fade_in(self, scene):
        style = render_scene(scene, 0.5)[0]
        assert style["opacity"] == pytest.approx(0.875)

    def test_photo_effects(self, scene):
        photo = render_scene(scene, 3.0)[1]
        assert photo["filter"] == "brightness(1.2) hue-rotate(45deg)"
        assert photo["mix_blend_mode"] == "multiply"

    def test_badge_background(self, scene):
        badge = render_scene(scene, 7.0)[-1]
        assert badge["id"] == "badge"
        assert badge["background"] == "rgb(255, 0, 102)"
