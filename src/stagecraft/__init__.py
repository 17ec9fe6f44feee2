"""stagecraft — transform and timeline animation engine for 2D scenes.

Turns pointer drags into rotation-aware geometry updates, evaluates
enter/exit animations at a playhead time, and composes filter effects
and blend modes into a style description for a rendering surface.
Scenes are declared in YAML manifests.
"""
