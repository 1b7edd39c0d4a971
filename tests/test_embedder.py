"""Tests for embedding animations."""

import logging
import xml.etree.ElementTree as ET

import pytest

from svganim import (
    AnimationSettings,
    AnimationType,
    detect,
    embed,
    ensure_namespace,
    strip_owned_artifacts,
)
from svganim.constants import SCRIPT_ID, STYLE_ID, WRAPPER_CLASS_PREFIX
from svganim.embedder import build_css_rule
from svganim.svg_utils import NAMESPACE
from tests.conftest import PLAIN_ICON, canonical, find_all, local_name, xmlns_declarations

CSS_TYPES = ["spin", "pulse", "bounce", "shake", "fade"]
DRAW_TYPES = ["draw", "draw-reverse", "draw-loop"]


def owned_styles(svg: str) -> list[ET.Element]:
    return [node for node in find_all(svg, "style") if node.get("id") == STYLE_ID]


def owned_scripts(svg: str) -> list[ET.Element]:
    return [node for node in find_all(svg, "script") if node.get("id") == SCRIPT_ID]


def wrappers(svg: str) -> list[ET.Element]:
    return [
        node
        for node in find_all(svg, "g")
        if (node.get("class") or "").startswith(WRAPPER_CLASS_PREFIX)
    ]


class TestCSSFamily:
    def test_spin(self) -> None:
        """Test embedding spin into a minimal icon and reading it back."""
        settings = {
            "duration": 2,
            "timing": "linear",
            "iteration": "infinite",
            "direction": "normal",
            "delay": 0,
        }
        result = embed('<svg><path d="M0 0 10 10"/></svg>', "spin", settings)

        styles = owned_styles(result)
        assert len(styles) == 1
        css = styles[0].text or ""
        assert "@keyframes spin" in css
        assert "animation: spin 2s linear 0s infinite normal;" in css

        (wrapper,) = wrappers(result)
        assert f".{wrapper.get('class')} {{" in css
        assert [local_name(child.tag) for child in wrapper] == ["path"]

        detected = detect(result)
        assert detected is not None
        assert detected.type is AnimationType.SPIN
        assert detected.settings == AnimationSettings.from_dict(settings)

    def test_layout(self, plain_icon: str) -> None:
        """Test that the style comes first and the wrapper holds every child."""
        root = ET.fromstring(embed(plain_icon, AnimationType.PULSE))
        assert [local_name(child.tag) for child in root] == ["style", "g"]
        assert [local_name(child.tag) for child in root[1]] == ["path", "circle"]
        assert root.get("viewBox") == "0 0 24 24"

    def test_class_suffix(self, plain_icon: str) -> None:
        result = embed(plain_icon, "bounce", class_suffix="fixed")
        assert wrappers(result)[0].get("class") == f"{WRAPPER_CLASS_PREFIX}fixed"

    def test_fresh_class_per_call(self, plain_icon: str) -> None:
        first = wrappers(embed(plain_icon, "spin"))[0].get("class")
        second = wrappers(embed(plain_icon, "spin"))[0].get("class")
        assert first != second

    def test_default_settings(self, plain_icon: str) -> None:
        detected = detect(embed(plain_icon, "fade"))
        assert detected is not None
        assert detected.settings == AnimationSettings()

    def test_settings_written_verbatim(self, plain_icon: str) -> None:
        """Test that out-of-range values are not corrected."""
        settings = AnimationSettings(duration=-1, iteration=0, delay=-0.5)
        css = owned_styles(embed(plain_icon, "shake", settings))[0].text or ""
        assert "animation: shake -1s ease -0.5s 0 normal;" in css

    def test_cubic_bezier(self, plain_icon: str) -> None:
        settings = AnimationSettings(
            duration=0.75, timing="cubic-bezier(0.4, 0, 0.2, 1)", iteration=3
        )
        detected = detect(embed(plain_icon, "spin", settings))
        assert detected is not None
        assert detected.settings == settings

    @pytest.mark.parametrize("name", CSS_TYPES)
    def test_round_trip(self, plain_icon: str, name: str) -> None:
        settings = AnimationSettings(
            duration=1.25, timing="ease-in", iteration=2, direction="alternate", delay=0.5
        )
        detected = detect(embed(plain_icon, name, settings))
        assert detected is not None
        assert detected.type.value == name
        assert detected.settings == settings


class TestDrawFamily:
    @pytest.mark.parametrize("name", DRAW_TYPES)
    def test_artifacts(self, plain_icon: str, name: str) -> None:
        """Test that style and script lead the root and nothing is wrapped."""
        result = embed(plain_icon, name)
        root = ET.fromstring(result)
        assert [local_name(child.tag) for child in root] == [
            "style",
            "script",
            "path",
            "circle",
        ]
        assert root[0].get("id") == STYLE_ID
        assert root[1].get("id") == SCRIPT_ID
        assert wrappers(result) == []

    @pytest.mark.parametrize("name", DRAW_TYPES)
    def test_type_round_trip(self, plain_icon: str, name: str) -> None:
        detected = detect(embed(plain_icon, name))
        assert detected is not None
        assert detected.type.value == name

    def test_settings_applied(self, plain_icon: str) -> None:
        settings = AnimationSettings(duration=3, timing="linear", iteration=1)
        css = owned_styles(embed(plain_icon, "draw", settings))[0].text or ""
        assert "animation: draw 3s linear 0s 1 normal forwards" in css


class TestReembedding:
    def test_replaces_previous_animation(self) -> None:
        """Test re-embedding over a document with an existing pair."""
        svg = (
            f'<svg xmlns="{NAMESPACE}">'
            f'<style id="{STYLE_ID}">@keyframes spin {{}}</style>'
            f'<script id="{SCRIPT_ID}">void 0;</script>'
            '<g class="icon-anim-old"><path d="M1 1"/></g></svg>'
        )
        result = embed(svg, "draw")
        assert len(owned_styles(result)) == 1
        assert len(owned_scripts(result)) == 1
        assert wrappers(result) == []
        assert len(find_all(result, "path")) == 1

    @pytest.mark.parametrize(
        "sequence",
        [
            ["spin", "pulse"],
            ["spin", "draw"],
            ["draw", "draw-loop"],
            ["draw-reverse", "fade", "shake"],
            ["bounce", "bounce", "bounce"],
        ],
    )
    def test_no_accumulation(self, plain_icon: str, sequence: list[str]) -> None:
        svg = plain_icon
        for name in sequence:
            svg = embed(svg, name)
        assert len(owned_styles(svg)) == 1
        assert len(owned_scripts(svg)) == (1 if sequence[-1] in DRAW_TYPES else 0)
        assert len(wrappers(svg)) == (1 if sequence[-1] in CSS_TYPES else 0)
        assert xmlns_declarations(svg) == [NAMESPACE]

    @pytest.mark.parametrize("name", CSS_TYPES + DRAW_TYPES)
    def test_clean_restores_document(self, plain_icon: str, name: str) -> None:
        restored = strip_owned_artifacts(embed(plain_icon, name))
        assert canonical(restored) == canonical(ensure_namespace(plain_icon))

    def test_none_removes_animation(self, plain_icon: str) -> None:
        result = embed(embed(plain_icon, "spin"), "none")
        assert owned_styles(result) == []
        assert wrappers(result) == []
        assert detect(result) is None


class TestNamespace:
    def test_adds_namespace(self, plain_icon: str) -> None:
        """Test that a root missing xmlns declares it exactly once."""
        assert xmlns_declarations(embed(plain_icon, "spin")) == [NAMESPACE]
        assert xmlns_declarations(embed(plain_icon, "draw")) == [NAMESPACE]

    def test_elements_in_svg_namespace(self, plain_icon: str) -> None:
        root = ET.fromstring(embed(plain_icon, "spin"))
        assert all(node.tag.startswith(f"{{{NAMESPACE}}}") for node in root.iter())


class TestUnknown:
    def test_unknown_type(self, plain_icon: str, caplog: pytest.LogCaptureFixture) -> None:
        animated = embed(plain_icon, "spin")
        with caplog.at_level(logging.WARNING, logger="svganim"):
            result = embed(animated, "wobble")
        assert "wobble" in caplog.text
        assert canonical(result) == canonical(ensure_namespace(PLAIN_ICON))

    def test_not_svg(self) -> None:
        assert embed("hello world", "spin") == "hello world"


class TestTextFallback:
    MALFORMED = '<svg width="24"><path d="M0 0"></svg>'

    def test_css_scoped_to_document(self) -> None:
        result = embed(self.MALFORMED, "spin")
        assert f'<style id="{STYLE_ID}">' in result
        assert "svg { animation: spin 1s ease 0s infinite normal;" in result
        assert WRAPPER_CLASS_PREFIX not in result
        assert xmlns_declarations(result) == [NAMESPACE]

    def test_detect(self) -> None:
        detected = detect(embed(self.MALFORMED, "pulse", AnimationSettings(duration=4)))
        assert detected is not None
        assert detected.type is AnimationType.PULSE
        assert detected.settings == AnimationSettings(duration=4)

    def test_draw(self) -> None:
        result = embed(self.MALFORMED, "draw")
        assert f'<script id="{SCRIPT_ID}">' in result
        assert result.endswith('<path d="M0 0"></svg>')
        detected = detect(result)
        assert detected is not None
        assert detected.type is AnimationType.DRAW

    @pytest.mark.parametrize("name", ["spin", "draw", "draw-loop"])
    def test_clean_restores_document(self, name: str) -> None:
        restored = strip_owned_artifacts(embed(self.MALFORMED, name))
        assert restored == ensure_namespace(self.MALFORMED)

    def test_reembed(self) -> None:
        result = embed(embed(self.MALFORMED, "spin"), "fade")
        assert result.count(f'id="{STYLE_ID}"') == 1
        assert "@keyframes spin" not in result


class TestBuildCSSRule:
    def test_rule(self) -> None:
        rule = build_css_rule(AnimationType.SPIN, AnimationSettings(duration=2), ".x")
        assert rule.startswith("@keyframes spin")
        assert rule.endswith(
            ".x { animation: spin 2s ease 0s infinite normal; "
            "transform-origin: center center; transform-box: fill-box; }"
        )


class TestPrecision:
    @pytest.mark.parametrize("name", CSS_TYPES)
    def test_float_settings_round_trip(self, plain_icon: str, name: str) -> None:
        settings = AnimationSettings(duration=0.1234567, delay=1.0000001, iteration=2)
        detected = detect(embed(plain_icon, name, settings))
        assert detected is not None
        assert detected.settings == settings

    def test_tiny_duration(self, plain_icon: str) -> None:
        settings = AnimationSettings(duration=1e-07)
        detected = detect(embed(plain_icon, "spin", settings))
        assert detected is not None
        assert detected.settings.duration == 1e-07


class TestUnencodableText:
    """Documents holding lone surrogates, e.g. read with surrogateescape."""

    SVG = "<svg><text>\udcff</text></svg>"

    def test_ensure_namespace(self) -> None:
        assert ensure_namespace(self.SVG) == f'<svg xmlns="{NAMESPACE}"><text>\udcff</text></svg>'

    def test_strip_owned_artifacts(self) -> None:
        assert strip_owned_artifacts(self.SVG) == self.SVG

    def test_detect(self) -> None:
        assert detect(self.SVG) is None

    def test_embed(self) -> None:
        result = embed(self.SVG, "spin")
        assert "svg { animation: spin 1s ease 0s infinite normal;" in result
        assert result.endswith("<text>\udcff</text></svg>")
        detected = detect(result)
        assert detected is not None
        assert detected.type is AnimationType.SPIN
        restored = strip_owned_artifacts(result)
        assert restored == ensure_namespace(self.SVG)
