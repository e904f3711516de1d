# Author: PB
# Maintainer: PB
# Original date: 2026.10.19
# License: (c) HRDAG, 2026, GPL-2 or newer
#
# ------
# src/aidocs/system/logging_setup.py

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from aidocs.config.manager import load_merged_user_config
from aidocs.system.exceptions import ConfigError


def detect_run_name(target: Optional[Path] = None) -> str:
    """Name used for the log file: the target folder name, else 'global'."""
    if target is not None and target.name:
        return target.name
    return "global"


def setup_logging(debug: bool = False, target: Optional[Path] = None) -> None:
    """Setup loguru logging for the entire application.

    Configures:
    - Console output: WARNING+ only (DEBUG+ with debug=True)
    - File output: DEBUG+ if local_log is configured in user config
    """
    logger.remove()

    # Console handler: WARNING+ for clean output
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "WARNING",
        format="<level>{level}</level>: {message}",
        colorize=True
    )

    # File handler: DEBUG+ if configured
    try:
        user_config = load_merged_user_config()
        if user_config.local_log:
            log_dir = Path(user_config.local_log)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"aidocs-{detect_run_name(target)}.log"

            logger.add(
                log_file,
                level="DEBUG",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
                rotation="10 MB",
                retention="30 days",
                compression="gz"
            )
            logger.debug(f"File logging enabled: {log_file}")

    except (ConfigError, OSError) as e:
        # Don't fail the entire application if logging setup fails
        logger.warning(f"Failed to setup file logging: {e}")
