# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/config/manager.py

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Optional, Sequence

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from aidocs.core.fingerprint import checksum
from aidocs.core.scanner import DEFAULT_PATTERN, ParseStrategy
from aidocs.system.exceptions import ConfigError


# ---- Constants ----

USER_CFG: Final = "aidocs.yml"
PROJECT_CFG: Final = ".aidocs.yml"
DEFAULT_OUT_NAME: Final = ".md"
DEFAULT_PROMPTS_DIR: Final = "prompts"
PROMPT_FILE_PREFIX: Final = "file:"

MODE_SUFFIXES: Final[dict[str, ParseStrategy]] = {
    "-folder": ParseStrategy.BY_FOLDER,
    "-all": ParseStrategy.ONE_SHOT,
}


def _get_user_config_search_paths() -> tuple[Path, ...]:
    """Get config file search paths (ordered by priority: lowest to highest).

    Evaluated at call time so environment changes are honored (test isolation).
    """
    return (
        Path("/etc/aidocs") / USER_CFG,  # System defaults
        Path.home() / ".config" / "aidocs" / USER_CFG,  # User config
        Path(os.getenv("XDG_CONFIG_HOME", "")) / "aidocs" / USER_CFG,  # XDG override
        Path(os.getenv("AIDOCS_CONFIG_HOME", "")) / USER_CFG,  # Explicit override (highest priority)
    )


def _load_merged_config_data(candidates: tuple[Path, ...]) -> dict:
    """Load and merge config data from candidate paths, later ones winning.

    Unlike a project config, a user config is optional: no file gives {}.
    """
    merged_data = {}
    found_configs = []

    for candidate in candidates:
        if candidate.is_file() and candidate != Path("") / USER_CFG:  # Skip empty env vars
            try:
                with candidate.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                if not isinstance(data, dict):
                    raise ConfigError(f"expected a mapping, found {type(data).__name__}")
                merged_data.update(data)
                found_configs.append(str(candidate))
                logger.debug(f"Loaded config from {candidate}")
            except (OSError, yaml.YAMLError, ConfigError) as e:
                logger.warning(f"Failed to load config from {candidate}: {e}")

    if found_configs:
        logger.debug(f"Merged config from: {', '.join(found_configs)}")
    return merged_data


# ---- Config Models ----

class UserConfig(BaseModel):
    """Per-user settings: logging and the default transformation command."""
    local_log: Optional[Path] = None
    command: Optional[str] = None
    timeout: Optional[float] = Field(default=None, gt=0)


class ProjectConfig(BaseModel):
    """Settings stored with a source tree in .aidocs.yml."""
    prompt: Optional[str] = None
    pattern: Optional[str] = None
    out_name: Optional[str] = None
    command: Optional[str] = None
    timeout: Optional[float] = Field(default=None, gt=0)
    prompts_dir: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Path) -> ProjectConfig:
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            raise ConfigError(f"Invalid {config_path}: {e}") from e


class RunConfig(BaseModel):
    """Everything one run needs, resolved from CLI, project and user settings."""
    sources: list[Path] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list)
    target_root: Path
    target_file: Optional[Path] = None
    prompt: str
    pattern: str = DEFAULT_PATTERN
    strategy: ParseStrategy = ParseStrategy.FILE_BY_FILE
    out_name: str = DEFAULT_OUT_NAME
    command: str
    timeout: Optional[float] = None
    index_name: str

    def target_name(self, name: str) -> str:
        return name + self.out_name


# ---- Loaders ----

def load_merged_user_config() -> UserConfig:
    """Load and merge user config from all locations (system defaults + user overrides)."""
    merged_data = _load_merged_config_data(_get_user_config_search_paths())
    try:
        return UserConfig.model_validate(merged_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid user config: {e}") from e


def find_project_config_path(start: Path | None = None) -> Optional[Path]:
    """Walk up from start path looking for .aidocs.yml. None when absent."""
    current = (start or Path.cwd()).resolve()
    for parent in [current] + list(current.parents):
        candidate = parent / PROJECT_CFG
        if candidate.is_file():
            return candidate
    return None


# ---- Helpers ----

def parse_pattern(pattern: Optional[str]) -> tuple[str, ParseStrategy]:
    """Split a '<glob> [-folder|-all]' pattern into glob and strategy."""
    if pattern is None or not pattern.strip():
        return DEFAULT_PATTERN, ParseStrategy.FILE_BY_FILE

    text = pattern.strip()
    for suffix, strategy in MODE_SUFFIXES.items():
        if text.lower().endswith(suffix):
            glob = text[:-len(suffix)].strip() or DEFAULT_PATTERN
            return glob, strategy
    return text, ParseStrategy.FILE_BY_FILE


def resolve_prompt(prompt: str, prompts_dir: Optional[Path] = None) -> str:
    """Return the prompt text; 'file:<name>' is read from prompts_dir."""
    if not prompt.lower().startswith(PROMPT_FILE_PREFIX):
        return prompt

    name = prompt[len(PROMPT_FILE_PREFIX):].strip()
    candidates = [Path(name)]
    if prompts_dir is not None:
        candidates.insert(0, prompts_dir / name)

    for candidate in candidates:
        if candidate.is_file():
            logger.debug(f"Prompt loaded from {candidate}")
            return candidate.read_text(encoding="utf-8")

    raise ConfigError(f"Prompt file not found: {name}")


def index_name_for(prompt: str) -> str:
    """Sidecar name bound to a prompt, so each prompt keeps its own ledger."""
    return f".{checksum(prompt)}.index.json"


def _looks_like_file(path: Path, out_name: str) -> bool:
    """An existing file, or a new path ending with the generated-file suffix."""
    if path.is_file():
        return True
    if path.is_dir():
        return False
    return path.name.lower().endswith(out_name.lower()) and path.name.lower() != out_name.lower()


def build_run_config(
    sources: Sequence[Path],
    target: Path,
    files: Sequence[Path] = (),
    prompt: Optional[str] = None,
    pattern: Optional[str] = None,
    out_name: Optional[str] = None,
    command: Optional[str] = None,
    timeout: Optional[float] = None,
    start_path: Optional[Path] = None,
) -> RunConfig:
    """Resolve one run's settings. Precedence: arguments > project > user > defaults.

    Raises:
        ConfigError: a required setting is missing or invalid
    """
    user_config = load_merged_user_config()

    project_path = find_project_config_path(start_path)
    project_config = ProjectConfig.load(project_path) if project_path else ProjectConfig()
    project_root = project_path.parent if project_path else (start_path or Path.cwd())

    sources = [Path(s) for s in sources]
    files = [Path(f) for f in files]
    if not sources and not files:
        raise ConfigError("At least one source folder or file is required")
    for source in sources:
        if not source.is_dir():
            raise ConfigError(f"Source folder does not exist: {source}")

    prompt = prompt or project_config.prompt
    if not prompt:
        raise ConfigError("A prompt is required (--prompt or 'prompt' in .aidocs.yml)")
    prompts_dir = project_config.prompts_dir or Path(DEFAULT_PROMPTS_DIR)
    if not prompts_dir.is_absolute():
        prompts_dir = project_root / prompts_dir
    prompt_text = resolve_prompt(prompt, prompts_dir)

    command = command or project_config.command or user_config.command
    if not command:
        raise ConfigError("A transformation command is required (--command or 'command' in config)")

    glob, strategy = parse_pattern(pattern or project_config.pattern)
    out_name = out_name or project_config.out_name or DEFAULT_OUT_NAME

    target = Path(target)
    target_file = None
    if _looks_like_file(target, out_name):
        target_file = target
        target_root = target.parent
        strategy = ParseStrategy.ONE_SHOT
    else:
        target_root = target
    if files and not sources:
        strategy = ParseStrategy.ONE_SHOT
    if files and strategy != ParseStrategy.ONE_SHOT:
        logger.warning("Explicit source files are only used in one-shot mode (-all)")

    return RunConfig(
        sources=sources,
        files=files,
        target_root=target_root,
        target_file=target_file,
        prompt=prompt_text,
        pattern=glob,
        strategy=strategy,
        out_name=out_name,
        command=command,
        timeout=timeout or project_config.timeout or user_config.timeout,
        index_name=index_name_for(prompt_text),
    )


# done.
