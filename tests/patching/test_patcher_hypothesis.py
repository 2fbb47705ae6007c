"""
Hypothesis property-based tests for locate + patch.

The core properties: a patch never touches lines outside the located
call, a missing target leaves the document unchanged, and the style that
lands in the code carries exactly the requested values.
"""
from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from core import FontWeight, PropertySet
from patching import locate, patch
from patching.patcher import patch_block
from tests.samples import EXAMPLE_LINES, TITLE_BLOCK


# ------------------------------------------------------------------
# Strategies
# ------------------------------------------------------------------

# Filler lines: no call token, no parentheses, no markers
_filler_line = st.text(
    st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789 ;=+-*/.<>[]"),
    max_size=40,
)
_filler = st.lists(_filler_line, max_size=10)

_hex = st.from_regex(r"#[0-9a-f]{6}", fullmatch=True)
_text = st.text(
    st.sampled_from("abcdefghijklmnopqrstuvwxyz ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!?.,"),
    min_size=1,
    max_size=30,
)


@st.composite
def property_sets(draw: st.DrawFn) -> PropertySet:
    return PropertySet(
        text=draw(_text),
        color=draw(_hex),
        background_color=draw(_hex),
        font_size=draw(st.integers(min_value=1, max_value=200)),
        font_weight=draw(st.sampled_from(list(FontWeight))),
    )


# ------------------------------------------------------------------
# Properties
# ------------------------------------------------------------------


class TestPatchProperties:
    @given(prefix=_filler, suffix=_filler, props=property_sets())
    @settings(max_examples=200)
    def test_lines_outside_range_untouched(self, prefix, suffix, props):
        lines = [*prefix, *TITLE_BLOCK, *suffix]
        call = locate(lines, "title")
        assert call is not None
        assert call.start_line == len(prefix)

        result = patch(lines, call, props)

        assert result[: len(prefix)] == prefix
        assert result[len(result) - len(suffix) :] == suffix
        assert len(result) == len(lines)

    @given(lines=_filler, props=property_sets())
    @settings(max_examples=100)
    def test_missing_target_is_noop(self, lines, props):
        assert patch(lines, locate(lines, "title"), props) == lines

    @given(props=property_sets())
    @settings(max_examples=100)
    def test_style_carries_requested_values(self, props):
        style_line = patch_block(TITLE_BLOCK, props).block[2]
        assert f"color: '{props.color}'" in style_line
        assert f"backgroundColor: '{props.background_color}'" in style_line
        assert f"fontSize: '{props.font_size}px'" in style_line
        assert f"fontWeight: '{props.font_weight.value}'" in style_line

    @given(props=property_sets())
    @settings(max_examples=100)
    def test_text_lands_in_trailing_argument(self, props):
        last = patch_block(TITLE_BLOCK, props).block[-1]
        assert last == f"    }}, '{props.text}'),"

    @given(target=st.sampled_from(["title", "description", "cta"]), props=property_sets())
    @settings(max_examples=60)
    def test_patching_twice_is_idempotent(self, target, props):
        once = patch(EXAMPLE_LINES, locate(EXAMPLE_LINES, target), props)
        twice = patch(once, locate(once, target), props)
        assert once == twice
