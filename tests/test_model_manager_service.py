"""Tests for ModelManagerService with the application config."""

from pathlib import Path
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from watercurtain.model_manager import ModelEvent, ModelManagerService
from watercurtain.models import AppConfig


@pytest.fixture
def service(tmp_path: Path):
    return ModelManagerService[AppConfig](AppConfig, AppConfig(), default_path=tmp_path / "config.json")


class TestAccess:
    """Test reads."""

    @pytest.mark.unit
    def test_get(self, service):
        assert service.get("device_address") == "192.168.4.1"
        assert service.get("missing", "fallback") == "fallback"

    @pytest.mark.unit
    def test_get_model_is_a_copy(self, service):
        model = service.get_model()
        model.discovery_candidates.append("1.2.3.4")
        assert "1.2.3.4" not in service.get("discovery_candidates")

    @pytest.mark.unit
    def test_get_all_is_json_ready(self, service):
        data = service.get_all()
        assert data["font_path"] is None
        assert data["led_color"] == "#7DF9FF"


class TestMutation:
    """Test set/update/reset."""

    @pytest.mark.unit
    def test_set_validates(self, service):
        service.set("led_color", "ff0000")
        assert service.get("led_color") == "#FF0000"

    @pytest.mark.unit
    def test_set_invalid_value_keeps_model(self, service):
        with pytest.raises(ValidationError):
            service.set("speed", 5)
        assert service.get("speed") == 100

    @pytest.mark.unit
    def test_set_unknown_field(self, service):
        with pytest.raises(AttributeError):
            service.set("volume", 11)

    @pytest.mark.unit
    def test_update_is_all_or_nothing(self, service):
        with pytest.raises(ValidationError):
            service.update({"device_address": "10.0.0.1", "default_valve_count": 9})
        assert service.get("device_address") == "192.168.4.1"

    @pytest.mark.unit
    def test_reset(self, service):
        service.set("speed", 300)
        service.reset()
        assert service.get("speed") == 100


class TestPersistence:
    """Test save/load round trip through the default path."""

    @pytest.mark.unit
    def test_save_and_load(self, service, tmp_path: Path):
        service.set("device_address", "192.168.1.101")
        service.save()

        other = ModelManagerService[AppConfig](AppConfig, AppConfig(), default_path=tmp_path / "config.json")
        other.load()
        assert other.get("device_address") == "192.168.1.101"

    @pytest.mark.unit
    def test_save_without_path(self):
        service = ModelManagerService[AppConfig](AppConfig, AppConfig())
        with pytest.raises(ValueError):
            service.save()


class TestEvents:
    """Test observer notifications."""

    @pytest.mark.unit
    def test_events(self, service):
        observer = Mock()
        service.register_observer(observer)

        service.set("speed", 200)
        observer.on_model_event.assert_called_with(
            ModelEvent.MODEL_UPDATED, keys=["speed"], values={"speed": 200}
        )

        service.save()
        assert observer.on_model_event.call_args.args[0] is ModelEvent.MODEL_SAVED

        service.reset()
        assert observer.on_model_event.call_args.args[0] is ModelEvent.MODEL_RESET

    @pytest.mark.unit
    def test_failed_update_emits_nothing(self, service):
        observer = Mock()
        service.register_observer(observer)
        with pytest.raises(ValidationError):
            service.set("speed", 1000)
        observer.on_model_event.assert_not_called()


class TestAutoSave:
    """Test writing to the default path after each change."""

    @pytest.mark.unit
    def test_changes_are_written(self, tmp_path: Path):
        path = tmp_path / "config.json"
        service = ModelManagerService[AppConfig](AppConfig, AppConfig(), default_path=path, auto_save=True)

        service.set("device_address", "10.0.0.7")
        assert AppConfig.model_validate_json(path.read_text()).device_address == "10.0.0.7"

    @pytest.mark.unit
    def test_rejected_change_is_not_written(self, tmp_path: Path):
        path = tmp_path / "config.json"
        service = ModelManagerService[AppConfig](AppConfig, AppConfig(), default_path=path, auto_save=True)

        with pytest.raises(ValidationError):
            service.set("speed", 5)
        assert not path.exists()

    @pytest.mark.unit
    def test_without_path_does_nothing(self):
        service = ModelManagerService[AppConfig](AppConfig, AppConfig(), auto_save=True)
        service.set("speed", 200)
        assert service.get("speed") == 200
