"""Environment utilities for resolving secret files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

# Only credentials are read from files; other *_FILE variables (LOG_FILE_PATH
# and friends) keep their literal meaning.
SECRET_VARIABLES = (
    "HOME_ASSISTANT_TOKEN",
    "CIRCLE_API_KEY",
    "CIRCLE_ENTITY_SECRET_HEX",
    "CIRCLE_ENTITY_SECRET",
)


def load_secret_file_variables(keys: Optional[Iterable[str]] = None) -> None:
    """
    Resolve credentials that follow Docker secret conventions.

    For every ``KEY_FILE`` entry whose ``KEY`` is unset, read the referenced
    file and expose its stripped contents via ``KEY``. Failures are logged
    and skipped; a missing credential simply disables its feature.
    """

    for target_key in keys or SECRET_VARIABLES:
        if os.environ.get(target_key):
            continue
        file_path = os.environ.get(f"{target_key}_FILE")
        if not file_path:
            continue
        try:
            os.environ[target_key] = Path(file_path).read_text(encoding="utf-8").strip()
        except FileNotFoundError as exc:
            logger.warning(
                "env.secret_file.missing",
                extra={"key": target_key, "path": file_path, "error": str(exc)},
            )
        except UnicodeDecodeError as exc:
            logger.warning(
                "env.secret_file.decode_failed",
                extra={"key": target_key, "path": file_path, "error": str(exc)},
            )
        except OSError as exc:
            logger.warning(
                "env.secret_file.load_failed",
                extra={"key": target_key, "path": file_path, "error": str(exc)},
            )


load_secret_file_variables()
