"""Options controlling which files get their modification time reset."""

import logging
from pathlib import Path, PurePosixPath
from typing import Any, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class WarpOptions(BaseModel):
    """Immutable options for a single ``reset_mtimes`` run."""

    model_config = ConfigDict(frozen=True)

    explicit_paths: Optional[FrozenSet[str]] = Field(
        default=None,
        description="Repository-relative paths to use instead of every tracked file",
    )
    include_dirty: bool = Field(
        default=False,
        description="Also touch files with staged or unstaged modifications",
    )
    include_ignored: bool = Field(
        default=False, description="Also touch files git considers ignored"
    )
    ignore_older: bool = Field(
        default=False,
        description="Only rewind files newer than their history",
    )
    verbose: bool = Field(
        default=False, description="Report touched and skipped files"
    )

    @field_validator("explicit_paths", mode="before")
    @classmethod
    def normalize_paths(cls, v: Any) -> Optional[FrozenSet[str]]:
        """Convert path-likes to normalized POSIX strings relative to the repo root."""
        if v is None:
            return None
        if isinstance(v, (str, Path)):
            v = [v]

        normalized = set()
        for item in v:
            if not isinstance(item, (str, Path)):
                raise ValueError(f"Expected str or Path, got {type(item)}")
            posix = PurePosixPath(Path(item).as_posix())
            if posix.is_absolute():
                raise ValueError(f"Path must be relative to the repository: {item}")
            normalized.add(str(posix))
        return frozenset(normalized)
