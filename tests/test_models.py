"""Tests for Pydantic models."""

import json

import pytest
from pydantic import ValidationError

from watercurtain.exceptions import PatternValidationError
from watercurtain.models import (
    AppConfig,
    Color,
    Pattern,
    PatternDraft,
    PatternSource,
    check_matrix,
    concat_matrices,
)


class TestMatrix:
    """Test grid invariant checks."""

    @pytest.mark.unit
    def test_check_matrix_converts_to_bool_tuples(self):
        matrix = check_matrix([[1, 0, 0, 0, 0, 0, 0, 1]])
        assert matrix == ((True, False, False, False, False, False, False, True),)

    @pytest.mark.unit
    def test_empty_matrix_rejected(self):
        with pytest.raises(PatternValidationError, match="no rows"):
            check_matrix([])

    @pytest.mark.unit
    def test_ragged_rows_rejected(self):
        with pytest.raises(PatternValidationError, match="row 1"):
            check_matrix([[False] * 8, [False] * 16])

    @pytest.mark.unit
    @pytest.mark.parametrize("width", [0, 4, 12, 17])
    def test_width_must_be_multiple_of_eight(self, width):
        with pytest.raises(PatternValidationError):
            check_matrix([[False] * width])

    @pytest.mark.unit
    def test_concat_keeps_order(self):
        a = ((True,) * 8,)
        b = ((False,) * 8, (True,) * 8)
        assert concat_matrices([a, b]) == a + b


class TestPatternDraft:
    """Test PatternDraft model."""

    @pytest.mark.unit
    def test_properties(self):
        draft = PatternDraft(
            name="wave", matrix=[[False] * 16] * 3, source=PatternSource.TEXT, origin="wave"
        )
        assert draft.valve_count == 16
        assert draft.row_count == 3

    @pytest.mark.unit
    def test_is_frozen(self):
        draft = PatternDraft(name="a", matrix=[[False] * 8], source=PatternSource.MANUAL)
        with pytest.raises(ValidationError):
            draft.name = "b"

    @pytest.mark.unit
    def test_invalid_matrix_rejected(self):
        with pytest.raises(ValidationError, match="multiple of 8"):
            PatternDraft(name="a", matrix=[[False] * 5], source=PatternSource.MANUAL)

    @pytest.mark.unit
    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            PatternDraft(name="", matrix=[[False] * 8], source=PatternSource.MANUAL)

    @pytest.mark.unit
    def test_wire_format_uses_device_field_names(self):
        draft = PatternDraft(
            name="logo", matrix=[[True] * 8], source=PatternSource.VECTOR, origin="logo.svg"
        )
        wire = draft.to_wire()
        assert wire["patternData"] == [[True] * 8]
        assert wire["promptOrFile"] == "logo.svg"
        assert wire["source"] == "svg"

    @pytest.mark.unit
    def test_accepts_device_field_names(self):
        draft = PatternDraft.model_validate(
            {"name": "x", "patternData": [[0, 1] * 4], "source": "image", "promptOrFile": "x.png"}
        )
        assert draft.source is PatternSource.IMAGE
        assert draft.origin == "x.png"
        assert draft.matrix[0][1] is True


class TestPattern:
    """Test Pattern model."""

    @pytest.mark.unit
    def test_from_draft_assigns_id(self):
        draft = PatternDraft(name="a", matrix=[[False] * 8], source=PatternSource.MANUAL)
        first = Pattern.from_draft(draft)
        second = Pattern.from_draft(draft)
        assert first.id and second.id
        assert first.id != second.id
        assert first.matrix == draft.matrix

    @pytest.mark.unit
    def test_from_draft_keeps_given_id(self):
        draft = PatternDraft(name="a", matrix=[[False] * 8], source=PatternSource.MANUAL)
        assert Pattern.from_draft(draft, "abc").id == "abc"


class TestColor:
    """Test Color model."""

    @pytest.mark.unit
    def test_from_hex(self):
        color = Color.from_hex("#7DF9FF")
        assert (color.r, color.g, color.b) == (125, 249, 255)

    @pytest.mark.unit
    def test_from_hex_without_hash_and_lowercase(self):
        assert Color.from_hex("7df9ff").to_hex() == "#7DF9FF"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", ["", "#FFF", "#GGGGGG", "#1234567"])
    def test_invalid_hex(self, value):
        with pytest.raises(ValueError):
            Color.from_hex(value)

    @pytest.mark.unit
    def test_color_validation(self):
        with pytest.raises(ValidationError):
            Color(r=256, g=0, b=0)


class TestAppConfig:
    """Test AppConfig model."""

    @pytest.mark.unit
    def test_defaults(self):
        config = AppConfig()
        assert config.device_address == "192.168.4.1"
        assert config.default_valve_count == 16
        assert config.connect_timeout == 5.0
        assert config.http_probe_timeout == 2.0
        assert config.ws_probe_timeout == 1.0
        assert config.settle_delay == 0.2
        assert config.completion_delay == 0.5
        assert config.led_color == "#7DF9FF"
        assert config.speed == 100
        assert config.discovery_candidates[0] == "192.168.4.1"
        assert len(config.discovery_candidates) == 9

    @pytest.mark.unit
    @pytest.mark.parametrize("valves", [0, 7, 12])
    def test_valve_count_validation(self, valves):
        with pytest.raises(ValidationError):
            AppConfig(default_valve_count=valves)

    @pytest.mark.unit
    def test_color_is_normalized(self):
        assert AppConfig(led_color="ff0000").led_color == "#FF0000"

    @pytest.mark.unit
    def test_speed_range(self):
        with pytest.raises(ValidationError):
            AppConfig(speed=10)
        with pytest.raises(ValidationError):
            AppConfig(speed=501)

    @pytest.mark.unit
    def test_blank_candidates_dropped(self):
        config = AppConfig(discovery_candidates=[" 10.0.0.5 ", "", "  "])
        assert config.discovery_candidates == ["10.0.0.5"]

    @pytest.mark.unit
    def test_save_and_load(self, temp_dir):
        path = temp_dir / "config.json"
        AppConfig(device_address="192.168.1.50", speed=250).save(path)

        loaded = AppConfig.load_or_default(path)
        assert loaded.device_address == "192.168.1.50"
        assert loaded.speed == 250

    @pytest.mark.unit
    def test_load_missing_file_does_not_create_it(self, temp_dir):
        path = temp_dir / "missing.json"
        config = AppConfig.load_or_default(path)
        assert config == AppConfig()
        assert not path.exists()

    @pytest.mark.unit
    def test_load_corrupt_file_returns_defaults(self, temp_dir):
        path = temp_dir / "config.json"
        path.write_text("{ not json", encoding="utf-8")

        assert AppConfig.load_or_default(path) == AppConfig()
        assert path.read_text(encoding="utf-8") == "{ not json"

    @pytest.mark.unit
    def test_font_path_serializes_as_string(self, temp_dir):
        config = AppConfig(font_path=temp_dir / "font.ttf")
        data = json.loads(config.model_dump_json())
        assert data["font_path"] == str(temp_dir / "font.ttf")
