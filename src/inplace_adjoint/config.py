"""Generator configuration.

Naming conventions and the target dialect of the emitted code, loaded with
pydantic-settings. Every field can be overridden through an environment
variable with the ``INPLACE_ADJOINT_`` prefix or a ``.env`` file.

Usage:
    from inplace_adjoint.config import settings

    settings.inplace_suffix        # "_"  ->  def f1_(...)
    settings.secondary_entry       # "autodiff"

    # Override per run
    custom = Settings(register_decorator="rules.adjoint", zero_literal="0")

The dialect fields describe the two AD collaborators:

    register_decorator   decorator binding a function to a custom
                         reverse rule returning (value, backward)
    secondary_entry      mutation-aware engine, called as
                         entry(fn, annotation(arg), ...)
    *_annotation         per-argument activity wrappers
    densify_template     expression materializing a fill cotangent
    no_gradient_template expression replacing the no-gradient sentinel
"""

from __future__ import annotations

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """inplace-adjoint settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INPLACE_ADJOINT_",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------
    inplace_suffix: str = "_"
    gradient_prefix: str = "dz_"
    backward_prefix: str = "back_"
    cotangent_name: str = "cotangents"
    indent: str = "    "

    # ------------------------------------------------------------------
    # Dialect
    # ------------------------------------------------------------------
    register_decorator: str = "adjoint"
    secondary_entry: str = "autodiff"
    shadow_annotation: str = "Duplicated"
    active_annotation: str = "Active"
    inactive_annotation: str = "Const"
    # None passes the inactive annotation as the return activity; "" omits it
    return_activity: str | None = None
    densify_template: str = "np.array({grad}) if isinstance({grad}, Fill) else {grad}"
    no_gradient_template: str = "np.zeros_like({primal}) if {grad} is None else {grad}"
    zero_literal: str = "0.0"

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = "INFO"

    @property
    def return_annotation(self) -> str:
        """Return activity passed ahead of the arguments, or "" for none."""
        if self.return_activity is None:
            return self.inactive_annotation
        return self.return_activity

    @field_validator("gradient_prefix", "backward_prefix", "cotangent_name")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"{value!r} is not a valid identifier")
        return value

    @field_validator("inplace_suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if not value or not ("f" + value).isidentifier():
            raise ValueError(f"{value!r} cannot be appended to a function name")
        return value

    @field_validator("indent")
    @classmethod
    def _check_indent(cls, value: str) -> str:
        if not value or value.strip():
            raise ValueError("indent must be non-empty whitespace")
        return value

    @field_validator("densify_template")
    @classmethod
    def _check_densify(cls, value: str) -> str:
        if "{grad}" not in value:
            raise ValueError("densify_template must reference {grad}")
        return value

    @field_validator("no_gradient_template")
    @classmethod
    def _check_no_gradient(cls, value: str) -> str:
        if "{grad}" not in value or "{primal}" not in value:
            raise ValueError("no_gradient_template must reference {grad} and {primal}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level


settings = Settings()
