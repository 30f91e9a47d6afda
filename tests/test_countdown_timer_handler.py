# /tests/test_countdown_timer_handler.py
"""
Unit tests for the countdown timer handler

Covers parameter resolution, SVG generation with a pinned clock, and the PNG
cache hit/miss path with rasterization mocked out.
"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import pytz
from werkzeug.datastructures import MultiDict

from src.components.countdown_timer_generator import TimerImageError
from src.components.png_cache import PngCache
from src.components.web import countdown_timer_handler as handler

FIXED_NOW = datetime(2030, 1, 1, 0, 0, 0, tzinfo=pytz.utc)
RENDER_PNG = "src.components.countdown_timer_generator.render_png"


@pytest.fixture
def cache():
    return PngCache(ttl_seconds=60, max_entries=10)


class TestParseTimerParams:
    """Test cases for query parameter resolution"""

    def test_defaults_when_nothing_is_given(self):
        """Test defaults for an empty query"""
        style, target = handler.parse_timer_params({})
        assert target is None
        assert style.label == "Offer Ends In"
        assert style.template == "boxed"
        assert style.background == "#1c1917"
        assert style.box == "#292524"
        assert style.digits == "#facc15"
        assert style.labels_color == "#a8a29e"
        assert style.accent == "#facc15"
        assert style.font == "TikTok Sans, Outfit, sans-serif"
        assert (style.radius, style.font_weight, style.padding) == (16, 700, 20)
        assert style.label_style == "long"

    def test_present_but_empty_label_is_kept_empty(self):
        """Test that label= disables the header"""
        style, _ = handler.parse_timer_params({"label": ""})
        assert style.label == ""

    def test_invalid_values_fall_back(self):
        """Test that invalid parameters fall back to defaults"""
        style, _ = handler.parse_timer_params({
            "template": "fancy",
            "bg": "notacolor",
            "radius": "500",
            "fontWeight": "heavy",
            "padding": "-5",
            "labelStyle": "tiny",
        })
        assert style.template == "boxed"
        assert style.background == "#1c1917"
        assert (style.radius, style.font_weight, style.padding) == (16, 700, 20)
        assert style.label_style == "long"

    def test_valid_values_are_used(self):
        """Test that valid parameters are honored"""
        style, target = handler.parse_timer_params({
            "label": "  Sale  ",
            "target": "2099-01-01T00:00:00.000Z",
            "template": "minimal-narrow",
            "accent": "ff0000",
            "radius": "0",
            "fontWeight": "400",
            "padding": "150",
            "labelStyle": "short",
        })
        assert style.label == "Sale"
        assert target == "2099-01-01T00:00:00.000Z"
        assert style.template == "minimal-narrow"
        assert style.accent == "#ff0000"
        assert (style.radius, style.font_weight, style.padding) == (0, 400, 150)
        assert style.label_style == "short"

    def test_style_exposes_colors_and_layout_options(self):
        """Test the colors and layout options views of a style"""
        style, _ = handler.parse_timer_params({"radius": "8"})
        assert style.colors.labels_color == "#a8a29e"
        assert style.layout_options.radius == 8


class TestCalculateSegments:
    """Test cases for remaining-time segments"""

    def test_future_target(self):
        """Test segments for a future target"""
        segments = handler.calculate_segments("2030-01-02T01:01:01Z", now=FIXED_NOW)
        assert [s.value for s in segments] == ["01", "01", "01", "01"]

    def test_past_target_is_all_zero(self):
        """Test that an expired target gives all "00\""""
        segments = handler.calculate_segments("2020-01-01T00:00:00Z", now=FIXED_NOW)
        assert [s.value for s in segments] == ["00", "00", "00", "00"]

    def test_unparseable_target_is_all_zero(self):
        """Test that an unparseable target gives all "00\""""
        segments = handler.calculate_segments("soon", now=FIXED_NOW)
        assert [s.value for s in segments] == ["00", "00", "00", "00"]

    def test_out_of_range_target_is_all_zero(self):
        """Test that a target whose UTC instant overflows gives all "00\""""
        segments = handler.calculate_segments("9999-12-31T23:00:00-05:00", now=FIXED_NOW)
        assert [s.value for s in segments] == ["00", "00", "00", "00"]


class TestGenerateTimerSvg:
    """Test cases for SVG generation"""

    def test_minimal_short_labels(self):
        """Test minimal layout with short labels and a header"""
        svg = handler.generate_timer_svg({
            "target": "2030-01-03T00:00:00Z",
            "label": "Sale",
            "template": "minimal",
            "labelStyle": "short",
        }, now=FIXED_NOW)
        assert ">Sale</text>" in svg
        assert ">02</text>" in svg
        for unit in ("D", "H", "M", "S"):
            assert f">{unit}</text>" in svg
        assert svg.count(">:</text>") == 3

    def test_empty_label_has_no_header(self):
        """Test that an empty label renders no header"""
        svg = handler.generate_timer_svg({"label": "", "target": "2030-01-03T00:00:00Z"}, now=FIXED_NOW)
        assert 'height="160"' in svg
        assert "<line" not in svg


class TestQueryPairs:
    """Test cases for query pair extraction"""

    def test_plain_dict(self):
        """Test pairs from a plain dict"""
        assert handler.query_pairs({"a": "1"}) == [("a", "1")]

    def test_multidict_keeps_repeated_names(self):
        """Test that repeated names in a MultiDict are all kept"""
        pairs = handler.query_pairs(MultiDict([("a", "1"), ("a", "2")]))
        assert pairs == [("a", "1"), ("a", "2")]


class TestGenerateTimerPng:
    """Test cases for the cached PNG path"""

    def test_miss_then_hit(self, cache):
        """Test that the second identical request is served from cache"""
        args = {"target": "2030-01-03T00:00:00Z", "label": "Sale"}
        with patch(RENDER_PNG, return_value=b"\x89PNG-fake") as mock_render:
            first, first_status = handler.generate_timer_png(args, cache, now=FIXED_NOW)
            second, second_status = handler.generate_timer_png(args, cache, now=FIXED_NOW)

        assert first_status == "MISS"
        assert second_status == "HIT"
        assert first == second == b"\x89PNG-fake"
        assert mock_render.call_count == 1

    def test_parameter_order_shares_cache_entry(self, cache):
        """Test that reordered parameters share one cache entry"""
        with patch(RENDER_PNG, return_value=b"png") as mock_render:
            handler.generate_timer_png(MultiDict([("label", "A"), ("bg", "#000")]), cache, now=FIXED_NOW)
            _, status = handler.generate_timer_png(MultiDict([("bg", "#000"), ("label", "A")]), cache, now=FIXED_NOW)
        assert status == "HIT"
        assert mock_render.call_count == 1

    def test_density_is_passed_to_rasterizer(self, cache):
        """Test that the configured density reaches the rasterizer"""
        with patch(RENDER_PNG, return_value=b"png") as mock_render:
            handler.generate_timer_png({}, cache, now=FIXED_NOW, density=72)
        assert mock_render.call_args.kwargs["density"] == 72

    def test_without_cache_always_renders(self):
        """Test that rendering happens every time without a cache"""
        with patch(RENDER_PNG, return_value=b"png") as mock_render:
            handler.generate_timer_png({}, None, now=FIXED_NOW)
            _, status = handler.generate_timer_png({}, None, now=FIXED_NOW)
        assert status == "MISS"
        assert mock_render.call_count == 2

    def test_rasterization_failure_caches_nothing(self, cache):
        """Test that a failed render leaves the cache empty"""
        with patch(RENDER_PNG, side_effect=TimerImageError("boom")):
            with pytest.raises(TimerImageError):
                handler.generate_timer_png({}, cache, now=FIXED_NOW)
        assert len(cache) == 0

    def test_cache_failures_fall_through_to_render(self):
        """Test that cache errors are ignored and the image is rendered"""
        broken_cache = MagicMock()
        broken_cache.get.side_effect = RuntimeError("cache down")
        broken_cache.put.side_effect = RuntimeError("cache down")

        with patch(RENDER_PNG, return_value=b"png"):
            png_bytes, status = handler.generate_timer_png({}, broken_cache, now=FIXED_NOW)

        assert png_bytes == b"png"
        assert status == "MISS"
        broken_cache.put.assert_called_once()
