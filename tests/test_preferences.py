"""Tests for the JSON preferences file and UI formatting helpers."""

from datetime import datetime

from fleet_rental.domain.models import ReservationStatus, VehicleStatus
from fleet_rental.ui.strings import (
    format_currency,
    format_datetime,
    reservation_status_label,
    vehicle_status_label,
)
from fleet_rental.utils.config_store import load_config_data, save_config_data


class TestConfigStore:
    """Tests for load_config_data and save_config_data."""

    def test_missing_file_is_empty(self, tmp_path):
        assert load_config_data(tmp_path / "config.json") == {}

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_config_data(path) == {}

    def test_non_object_is_empty(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_config_data(path) == {}

    def test_save_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        save_config_data(path, {"theme": "dark"})
        assert load_config_data(path) == {"theme": "dark"}
        assert not path.with_suffix(".json.tmp").exists()


class TestFormatting:
    """Tests for display helpers."""

    def test_currency_uses_dot_thousands(self):
        assert format_currency(1234567) == "R$ 1.234.567"

    def test_missing_price(self):
        assert format_currency(None) == "-"

    def test_datetime(self):
        assert format_datetime(datetime(2024, 1, 2, 9, 5)) == "02/01/2024 09:05"

    def test_status_labels(self):
        assert vehicle_status_label(VehicleStatus.MAINTENANCE) == "Em manutenção"
        assert reservation_status_label(ReservationStatus.ACTIVE) == "Em andamento"
