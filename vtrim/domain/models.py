from enum import Enum
from pathlib import Path
from typing import Dict
from pydantic import BaseModel, ConfigDict, Field, model_validator

class JobStatus(str, Enum):
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

class SkipReason(str, Enum):
    DIRECTORY = "directory"
    EXTENSION = "extension"
    OUTPUT_TREE = "output_tree"
    EXISTS = "exists"
    COLLISION = "collision"

class TrimJob(BaseModel):
    """One file to trim. Paths are relative to work_dir."""

    model_config = ConfigDict(frozen=True)

    work_dir: Path
    input_path: Path
    output_path: Path
    trim_offset_seconds: int = Field(default=7, ge=0)

    @model_validator(mode="after")
    def validate_paths(self):
        if not self.work_dir.is_absolute():
            raise ValueError(f"work_dir must be absolute: {self.work_dir}")
        if self.output_path == self.input_path:
            raise ValueError(f"output_path must differ from input_path: {self.input_path}")
        return self

class ScanStats(BaseModel):
    files_found: int = 0
    jobs_queued: int = 0
    skipped: Dict[SkipReason, int] = Field(default_factory=lambda: {reason: 0 for reason in SkipReason})

    def skip(self, reason: SkipReason):
        self.skipped[reason] += 1

class RunSummary(BaseModel):
    files_found: int = 0
    jobs_queued: int = 0
    jobs_completed: int = 0
    skipped: Dict[SkipReason, int] = Field(default_factory=dict)
    elapsed_seconds: float = 0.0
