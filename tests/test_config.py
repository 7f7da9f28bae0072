"""Tests for inplace_adjoint.config module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from inplace_adjoint.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        cfg = Settings(_env_file=None)
        assert cfg.inplace_suffix == "_"
        assert cfg.gradient_prefix == "dz_"
        assert cfg.register_decorator == "adjoint"
        assert cfg.secondary_entry == "autodiff"
        assert cfg.zero_literal == "0.0"
        assert cfg.return_activity is None
        assert cfg.return_annotation == "Const"

    def test_return_annotation_follows_inactive(self):
        assert Settings(_env_file=None, inactive_annotation="Frozen").return_annotation == "Frozen"

    def test_return_annotation_can_be_omitted(self):
        assert Settings(_env_file=None, return_activity="").return_annotation == ""

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("INPLACE_ADJOINT_INPLACE_SUFFIX", "_inplace")
        monkeypatch.setenv("INPLACE_ADJOINT_LOG_LEVEL", "debug")
        cfg = Settings(_env_file=None)
        assert cfg.inplace_suffix == "_inplace"
        assert cfg.log_level == "DEBUG"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("INPLACE_ADJOINT_SECONDARY_ENTRY=engine.gradient\n", encoding="utf-8")
        assert Settings(_env_file=env_file).secondary_entry == "engine.gradient"

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("gradient_prefix", "d-"),
            ("backward_prefix", "1back"),
            ("cotangent_name", ""),
            ("inplace_suffix", "!"),
            ("inplace_suffix", ""),
            ("indent", ""),
            ("indent", "ab"),
            ("densify_template", "np.array(x)"),
            ("no_gradient_template", "zeros_like({primal})"),
            ("log_level", "LOUD"),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
