"""Tests for hand-drawn grid authoring and the text grid format."""

import pytest

from watercurtain.exceptions import RasterizationError
from watercurtain.models import PatternSource
from watercurtain.raster import GridEditor, parse_grid_text, render_grid_text


class TestGridEditor:
    """Test GridEditor state changes."""

    @pytest.fixture
    def editor(self):
        return GridEditor(cols=8, rows=4, name="Manual")

    @pytest.mark.unit
    def test_starts_empty(self, editor):
        assert editor.rows == 4
        assert editor.cols == 8
        assert not any(any(row) for row in editor.grid)

    @pytest.mark.unit
    def test_toggle(self, editor):
        assert editor.toggle(1, 2) is True
        assert editor.grid[1][2] is True
        assert editor.toggle(1, 2) is False
        assert editor.grid[1][2] is False

    @pytest.mark.unit
    def test_toggle_out_of_range(self, editor):
        with pytest.raises(IndexError):
            editor.toggle(4, 0)

    @pytest.mark.unit
    def test_drag_draws_with_state_of_first_cell(self, editor):
        editor.paint([(0, 0), (0, 1), (0, 2)])
        assert editor.grid[0][:3] == (True, True, True)

    @pytest.mark.unit
    def test_drag_erases_when_first_cell_was_on(self, editor):
        for col in range(8):
            editor.set_cell(0, col, True)

        editor.begin_stroke(0, 0)
        editor.extend_stroke(0, 1)
        editor.extend_stroke(0, 2)
        editor.end_stroke()

        assert editor.grid[0] == (False, False, False, True, True, True, True, True)

    @pytest.mark.unit
    def test_drag_without_press_does_nothing(self, editor):
        editor.extend_stroke(2, 2)
        assert editor.grid[2][2] is False

    @pytest.mark.unit
    def test_clear(self, editor):
        editor.paint([(0, 0), (1, 1)])
        editor.clear()
        assert not any(any(row) for row in editor.grid)

    @pytest.mark.unit
    def test_resize_clamps_and_discards(self, editor):
        editor.toggle(0, 0)
        editor.resize(500, 3)
        assert editor.rows == 100
        assert editor.cols == 8
        assert not editor.grid[0][0]

        editor.resize(0, 16)
        assert editor.rows == 1
        assert editor.cols == 16

    @pytest.mark.unit
    def test_to_draft(self, editor):
        editor.toggle(3, 7)
        draft = editor.to_draft()
        assert draft.name == "Manual"
        assert draft.source is PatternSource.MANUAL
        assert draft.origin == "4x8 grid"
        assert draft.matrix == editor.grid

    @pytest.mark.unit
    def test_to_draft_requires_name(self, editor):
        editor.name = "   "
        with pytest.raises(RasterizationError, match="name is required"):
            editor.to_draft()

    @pytest.mark.unit
    def test_to_draft_requires_multiple_of_eight(self, editor):
        editor.resize(4, 12)
        with pytest.raises(RasterizationError, match="multiple of 8"):
            editor.to_draft()

    @pytest.mark.unit
    def test_load_existing_matrix(self, editor):
        matrix = ((True,) * 16, (False,) * 16)
        editor.load(matrix)
        assert editor.rows == 2
        assert editor.cols == 16
        assert editor.grid == matrix


class TestGridText:
    """Test the '#'/'.' text grid format."""

    @pytest.mark.unit
    def test_round_trip(self):
        text = "##....##\n..####..\n#.#.#.#."
        assert render_grid_text(parse_grid_text(text)) == text

    @pytest.mark.unit
    def test_matrix_round_trip(self):
        matrix = tuple(tuple((r * c) % 3 == 0 for c in range(16)) for r in range(5))
        assert parse_grid_text(render_grid_text(matrix)) == matrix

    @pytest.mark.unit
    def test_render_custom_characters(self):
        assert render_grid_text(((True, False) * 4,), on="X", off=" ") == "X X X X "

    @pytest.mark.unit
    def test_blank_lines_and_indentation_ignored(self):
        assert parse_grid_text("\n  ########  \n\n") == ((True,) * 8,)

    @pytest.mark.unit
    def test_unknown_characters(self):
        with pytest.raises(RasterizationError, match="Line 2"):
            parse_grid_text("........\n...x....")

    @pytest.mark.unit
    def test_ragged_rows(self):
        with pytest.raises(RasterizationError):
            parse_grid_text("........\n................")

    @pytest.mark.unit
    def test_width_not_multiple_of_eight(self):
        with pytest.raises(RasterizationError, match="multiple of 8"):
            parse_grid_text("......")

    @pytest.mark.unit
    def test_empty(self):
        with pytest.raises(RasterizationError, match="empty"):
            parse_grid_text("\n\n")
