"""
Settings tests: environment parsing and logging setup.
"""
import pytest

from greenarea.config import Settings, configure_logging, load_settings
from greenarea.pivot import PROVINCE_LABEL


class TestLoadSettings:
    def test_defaults(self):
        s = load_settings(environ={})
        assert s == Settings()
        assert s.province_label == PROVINCE_LABEL

    def test_values_from_environment(self):
        s = load_settings(environ={
            "GREENAREA_STORE_DIR": "/srv/green",
            "GREENAREA_PRIORITY": "Merkez EAH; Mehmet Akif İnan EAH ;",
            "GREENAREA_ALLOWED": "Birecik DH;Suruç DH",
            "GREENAREA_CAN_UPLOAD": "Yes",
            "GREENAREA_USER": "ayse",
            "GREENAREA_LOG_LEVEL": "debug",
            "GREENAREA_HOSPITALS": "Birecik DH;Suruç DH;Harran DH",
            "GREENAREA_NAME_PREFIX": " Şanlıurfa ",
        })

        assert s.store_dir == "/srv/green"
        assert s.priority == ["Merkez EAH", "Mehmet Akif İnan EAH"]
        assert s.allowed == ["Birecik DH", "Suruç DH"]
        assert s.can_upload is True
        assert s.user == "ayse"
        assert s.log_level == "DEBUG"
        assert s.hospitals == ["Birecik DH", "Suruç DH", "Harran DH"]
        assert s.name_prefix == "Şanlıurfa"

    def test_blank_values_fall_back(self):
        s = load_settings(environ={"GREENAREA_USER": "", "GREENAREA_STORE_DIR": ""})
        assert s.user == "anonymous"
        assert s.store_dir == Settings().store_dir


class TestConfigureLogging:
    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("chatty")

    def test_known_level(self):
        configure_logging("info")
