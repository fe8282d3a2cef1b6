"""
Unit tests for virtscreen/config.py - ScreenConfig and password generation.
"""

import dataclasses

import pytest

from virtscreen import settings
from virtscreen.config import ScreenConfig, generate_password
from virtscreen.errors import ConfigurationError, VirtScreenError


class TestGeneratePassword:
    """Tests for generate_password()."""

    def test_default_length(self):
        assert len(generate_password()) == settings.VNC_PASSWORD_LENGTH

    def test_requested_length(self):
        assert len(generate_password(30)) == 30

    def test_only_lowercase_letters_and_digits(self):
        password = generate_password(200)
        assert set(password) <= set("abcdefghijklmnopqrstuvwxyz0123456789")

    def test_passwords_differ(self):
        assert generate_password() != generate_password()


class TestScreenConfigDefaults:
    """Tests for the default configuration."""

    def test_default_geometry(self):
        config = ScreenConfig.default()
        assert (config.width, config.height) == (640, 480)
        assert config.enable_vnc is False
        assert config.color_depth == 8

    def test_default_executables_come_from_settings(self):
        config = ScreenConfig()
        assert config.xvfb_executable == settings.XVFB_EXECUTABLE
        assert config.x11vnc_executable == settings.X11VNC_EXECUTABLE

    def test_is_immutable(self):
        config = ScreenConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.width = 10


class TestScreenConfigValidate:
    """Tests for ScreenConfig.validate()."""

    @pytest.mark.parametrize("width,height", [(0, 480), (640, 0), (-1, 480), (640, -20), (0, 0)])
    def test_rejects_non_positive_dimensions(self, width, height):
        with pytest.raises(ConfigurationError, match="invalid screen geometry"):
            ScreenConfig(width=width, height=height).validate()

    def test_rejects_non_integer_dimensions(self):
        with pytest.raises(ConfigurationError):
            ScreenConfig(width=640.5, height=480).validate()

    def test_rejects_bool_dimensions(self):
        with pytest.raises(ConfigurationError):
            ScreenConfig(width=True, height=480).validate()

    def test_rejects_bad_color_depth(self):
        with pytest.raises(ConfigurationError, match="color depth"):
            ScreenConfig(color_depth=0).validate()

    def test_accepts_valid_geometry(self):
        ScreenConfig(width=1, height=1).validate()

    def test_configuration_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            ScreenConfig(width=0).validate()
        assert issubclass(ConfigurationError, VirtScreenError)


class TestWithGeneratedPassword:
    """Tests for ScreenConfig.with_generated_password()."""

    def test_generates_when_vnc_enabled_and_blank(self):
        config = ScreenConfig(enable_vnc=True).with_generated_password()
        assert len(config.vnc_password) == settings.VNC_PASSWORD_LENGTH
        assert config.vnc_password.isalnum()
        assert config.vnc_password == config.vnc_password.lower()

    def test_whitespace_password_is_replaced(self):
        config = ScreenConfig(enable_vnc=True, vnc_password="   ").with_generated_password()
        assert config.vnc_password.strip() == config.vnc_password
        assert len(config.vnc_password) == settings.VNC_PASSWORD_LENGTH

    def test_supplied_password_is_kept(self):
        original = ScreenConfig(enable_vnc=True, vnc_password="hunter2")
        assert original.with_generated_password() is original

    def test_no_password_when_vnc_disabled(self):
        original = ScreenConfig(enable_vnc=False)
        config = original.with_generated_password()
        assert config is original
        assert config.vnc_password == ""
