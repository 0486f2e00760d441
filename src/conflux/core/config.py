"""Application state and configuration."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from conflux.conflict.model import Conflict, ConflictFile, Resolution
from conflux.conflict.registry import ConflictRegistry
from conflux.core.base import BaseConfig, BaseState
from conflux.core.keys import KeyBinding
from conflux.core.log import Logger
from conflux.core.yaml_settings import YamlWithIncludesSettingsSource
from conflux.workflow.tolerance import ErrorToleranceTracker

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class SessionConfig(BaseConfig):
    """How a resolution session behaves."""

    error_threshold: int = Field(
        default=3,
        ge=1,
        description=(
            "Consecutive unrecognized commands tolerated before the "
            "fallback resolution is applied"
        ),
    )
    fallback: Resolution = Field(
        default=Resolution.LOCAL,
        description="Resolution forced by the fallback: local, incoming or both",
    )
    orientation: Literal["horizontal", "vertical"] = Field(
        default="horizontal",
        description=(
            "Initial pane layout: 'horizontal' (side by side) or "
            "'vertical' (stacked)"
        ),
    )

    @field_validator("fallback")
    @classmethod
    def _fallback_picks_a_side(cls, value: Resolution) -> Resolution:
        if value in (Resolution.UNRESOLVED, Resolution.CUSTOM):
            raise ValueError("fallback must be local, incoming or both")
        return value


class EditorConfig(BaseConfig):
    """External editor used for free-form edits."""

    command: str | None = Field(
        default=None,
        description=(
            "Editor command line; the file path is appended. "
            "Defaults to $VISUAL, then $EDITOR, then vi"
        ),
    )

    def resolve_command(self) -> str:
        return (
            self.command
            or os.environ.get("VISUAL")
            or os.environ.get("EDITOR")
            or "vi"
        )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger | None = Field(
        default=None,
        description="Logger configuration and runtime instance",
    )
    keys: KeyBinding = Field(
        default_factory=KeyBinding,
        description="Prompt key bindings",
    )
    session: SessionConfig = Field(
        default_factory=SessionConfig,
        description="Session behaviour",
    )
    editor: EditorConfig = Field(
        default_factory=EditorConfig,
        description="External editor",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("conflux", appauthor=False))
        ),
        description="Root directory for log files",
    )
    session_name: str = Field(
        default_factory=lambda: Path.cwd().name or "conflux",
        description="Name of the log subdirectory for this working tree",
    )

    @model_validator(mode='after')
    def _setup_logger(self) -> Config:
        """Install the global logger once the configuration is known."""
        from conflux.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger()

        setup_logger(
            log_root=self.log_root,
            session_name=self.session_name,
            console=self.logger.console,
            file=self.logger.file,
            level=self.logger.level,
        )
        return self

    def close(self):
        """Close the global logger, then every closeable section."""
        from conflux.core.log import logger
        logger.close()
        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutable while the session runs)
# ============================================================

class Phase(str, Enum):
    """States of the session controller."""

    BOOTSTRAPPING = "bootstrapping"
    ACTIVE = "active"
    EDITOR_HANDOFF = "editor_handoff"
    QUITTING = "quitting"
    ABORTED = "aborted"


class SessionState(BaseState):
    """Per-run recovery state.

    Survives every UI context teardown; only the UI context itself is
    rebuilt after an editor handoff.
    """

    files: list = Field(
        default_factory=list,
        description="Files holding conflicts, in discovery order",
    )
    registry: Any = Field(
        default_factory=ConflictRegistry,
        description="Every conflict with the cursor on the active one",
    )
    tracker: ErrorToleranceTracker = Field(
        default_factory=ErrorToleranceTracker,
        description="Consecutive unknown-command counter",
    )
    orientation: str = Field(
        default="horizontal",
        description="Current pane layout, kept across UI contexts",
    )
    history: list[Phase] = Field(
        default_factory=list,
        description="Phases entered, in order",
    )
    interfaces_opened: int = Field(
        default=0, description="UI contexts created so far"
    )
    live_interfaces: int = Field(
        default=0, description="UI contexts currently alive"
    )
    handoffs: int = Field(default=0, description="Editor handoffs so far")
    pending_fallback: bool = Field(
        default=False,
        description="Apply the fallback when the next UI context starts",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def phase(self) -> Phase | None:
        return self.history[-1] if self.history else None

    def enter(self, phase: Phase) -> None:
        self.history.append(phase)

    def focus(self, conflict: Conflict) -> bool:
        """Move the cursor to conflict.

        Moving to a different conflict counts as entering the Active
        phase again.
        """
        moved = self.registry.select(conflict)
        if moved:
            self.enter(Phase.ACTIVE)
        return moved

    def load(self, files: list[ConflictFile]) -> None:
        """Populate the registry. Called once, before any UI context."""
        self.files = files
        self.registry = ConflictRegistry.from_files(files)


class Runtime(BaseModel):
    """All runtime state."""

    session: SessionState = Field(
        default_factory=SessionState,
        description="Resolution session state",
    )


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Complete application state: configuration and runtime.

    config is loaded from YAML, .env, environment and the CLI and does
    not change afterwards. runtime.session is created here, at process
    start, and threaded through every step of the session.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during the session)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="conflux.yaml",
        env_file=".env",
        env_prefix="CONFLUX_",
        env_nested_delimiter="__",
        cli_parse_args=True,
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority, highest first: init args, environment, .env,
        YAML layers, secrets.

        The packaged defaults set every key, so environment variables
        must rank above YAML to be able to override anything.
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            file_secret_settings,
        )

    def session_settings(self) -> dict[str, Any]:
        """Settings worth logging at session start."""
        return {
            "error_threshold": self.config.session.error_threshold,
            "fallback": self.config.session.fallback.value,
            "editor": self.config.editor.resolve_command(),
        }


__all__ = [
    "Config",
    "EditorConfig",
    "Phase",
    "Runtime",
    "SessionConfig",
    "SessionState",
    "State",
]
