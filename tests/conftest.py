"""Shared test fixtures for stagecraft tests."""

import pytest
import yaml


def _scene_dict():
    """A small valid scene: one text clip, one image clip, one shape."""
    return {
        "canvas": {"width": 1000, "height": 800, "background": "#111111"},
        "paths": {"media": "/data/media"},
        "clips": [
            {
                "id": "title",
                "type": "text",
                "text": "Hello",
                "start": 0,
                "end": 5,
                "geometry": {"x": 100, "y": 50, "width": 300, "height": 80},
                "animation": {
                    "enter": {"type": "fade", "duration": 1},
                    "exit": {"type": "slide", "duration": 1, "direction": "left", "easing": "linear"},
                },
            },
            {
                "id": "photo",
                "type": "image",
                "src": "${media}/photo.png",
                "start": 2,
                "end": 8,
                "geometry": {"x": 0, "y": 0, "width": 200, "height": 200},
                "filter": {"brightness": 1.2},
                "effects": [{"kind": "hue_rotate", "params": {"degree": 45}}],
                "blend_mode": "multiply",
            },
            {
                "id": "badge",
                "type": "shape",
                "start": 6,
                "end": 9,
                "fill": "#FF0066",
            },
        ],
    }


@pytest.fixture
def scene_data():
    """The standard test scene as a raw (un-normalized) dict."""
    return _scene_dict()


@pytest.fixture
def scene_file(tmp_path):
    """Write the standard test scene to a YAML file and return its path."""
    path = tmp_path / "scene.yaml"
    path.write_text(yaml.dump(_scene_dict()))
    return path
