"""
Test Suite for Error Handling and Settings
==========================================

Tests for:
- Exception hierarchy codes and reporting
- Settings defaults, validation and environment overrides
"""

import logging

import pytest

from organ_transplant_graph.config.settings import (
    TransplantSettings,
    load_settings,
    DEFAULT_SETTINGS,
    MAX_PATIENTS
)
from organ_transplant_graph.core.error_handling import (
    TransplantGraphError,
    PatientNotFoundError,
    PositionOutOfBoundsError,
    CapacityExceededError,
    DataIngestionError,
    SnapshotError,
    ConfigurationError,
    describe_error
)


class TestExceptionHierarchy:
    """Tests for the custom exceptions"""

    @pytest.mark.parametrize("error,code", [
        (PatientNotFoundError("x"), "TG100"),
        (PositionOutOfBoundsError("x"), "TG200"),
        (CapacityExceededError("x"), "TG300"),
        (DataIngestionError("x"), "TG400"),
        (SnapshotError("x"), "TG500"),
        (ConfigurationError("x"), "TG600"),
    ])
    def test_error_codes(self, error, code):
        assert isinstance(error, TransplantGraphError)
        assert error.error_code == code

    def test_builtin_bases(self):
        """Lookup errors can be caught with the builtin types too"""
        assert isinstance(PatientNotFoundError("x"), LookupError)
        assert isinstance(PositionOutOfBoundsError("x"), IndexError)

    def test_details(self):
        error = CapacityExceededError("full", role="Donor", capacity=3, details={'extra': 1})
        assert error.details == {'role': "Donor", 'capacity': 3, 'extra': 1}

    def test_to_dict(self):
        error = PatientNotFoundError("No donor named Zed", name="Zed", role="Donor")
        report = error.to_dict()

        assert report['error_type'] == "PatientNotFoundError"
        assert report['message'] == "No donor named Zed"
        assert report['details']['name'] == "Zed"
        assert report['recoverable'] == True

    def test_configuration_errors_are_fatal(self):
        assert ConfigurationError("bad").recoverable == False

    def test_describe_foreign_error(self, caplog):
        """Errors outside the hierarchy are logged as unexpected"""
        with caplog.at_level(logging.WARNING, logger="organ_transplant_graph.core.error_handling"):
            report = describe_error(RuntimeError("boom"))

        assert report['error_code'] == "TG999"
        assert report['recoverable'] == False
        assert "Unexpected RuntimeError" in caplog.text

    def test_describe_own_error_is_not_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="organ_transplant_graph.core.error_handling"):
            describe_error(SnapshotError("x"))
        assert caplog.text == ""

    def test_describe_own_error(self):
        assert describe_error(SnapshotError("x", path="a.obj"))['details'] == {'path': "a.obj"}


class TestSettings:
    """Tests for TransplantSettings and load_settings"""

    def test_defaults(self):
        assert DEFAULT_SETTINGS.max_patients == MAX_PATIENTS == 100
        assert DEFAULT_SETTINGS.donor_file == "donors.txt"
        assert DEFAULT_SETTINGS.recipient_file == "recipients.txt"
        assert DEFAULT_SETTINGS.snapshot_file == "transplant.obj"

    def test_log_level_normalized(self):
        assert TransplantSettings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("value", [0, -3, "10", True])
    def test_invalid_capacity(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            TransplantSettings(max_patients=value)
        assert exc_info.value.details['config_key'] == "max_patients"

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError):
            TransplantSettings(log_level="LOUD")

    def test_with_overrides_skips_none(self):
        settings = DEFAULT_SETTINGS.with_overrides(max_patients=5, donor_file=None)

        assert settings.max_patients == 5
        assert settings.donor_file == "donors.txt"
        assert DEFAULT_SETTINGS.max_patients == 100

    def test_with_overrides_validates(self):
        with pytest.raises(ConfigurationError):
            DEFAULT_SETTINGS.with_overrides(max_patients=0)

    def test_load_from_mapping(self):
        settings = load_settings({
            'TRANSPLANT_MAX_PATIENTS': "25",
            'TRANSPLANT_DONOR_FILE': "d.txt",
            'TRANSPLANT_RECIPIENT_FILE': "r.txt",
            'TRANSPLANT_SNAPSHOT_FILE': "g.obj",
            'TRANSPLANT_LOG_LEVEL': "warning",
        })

        assert settings.to_dict() == {
            'max_patients': 25,
            'donor_file': "d.txt",
            'recipient_file': "r.txt",
            'snapshot_file': "g.obj",
            'log_level': "WARNING"
        }

    def test_load_ignores_blank_values(self):
        assert load_settings({'TRANSPLANT_MAX_PATIENTS': " "}).max_patients == 100

    def test_load_rejects_non_integer(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings({'TRANSPLANT_MAX_PATIENTS': "lots"})
        assert exc_info.value.details['config_key'] == "TRANSPLANT_MAX_PATIENTS"

    def test_load_from_environment(self, monkeypatch):
        monkeypatch.setenv("TRANSPLANT_MAX_PATIENTS", "7")
        assert load_settings().max_patients == 7


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
