from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_DENYLIST = ["'", ","]

class GeneralConfig(BaseModel):
    workers: int = Field(default=4, gt=0)
    queue_factor: int = Field(default=2, ge=1)
    trim_offset_seconds: int = Field(default=7, ge=0)
    extension: str = ".mp4"
    denylist: List[str] = Field(default_factory=lambda: list(DEFAULT_DENYLIST))
    log_path: Optional[str] = None
    debug: bool = False

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v or v == ".":
            raise ValueError("extension must not be empty")
        # Matching stays case-sensitive, only the leading dot is normalized
        return v if v.startswith(".") else f".{v}"

    @field_validator("denylist")
    @classmethod
    def validate_denylist(cls, v: List[str]) -> List[str]:
        for entry in v:
            if len(entry) != 1:
                raise ValueError(f"denylist entries must be single characters, got {entry!r}")
            if entry in {"/", "\\"}:
                raise ValueError("denylist must not contain path separators")
        return v

class PathsConfig(BaseModel):
    tool_path: str = "vlc"
    input_dir: str = "."
    output_dir: str = "out"

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)

    @property
    def queue_capacity(self) -> int:
        return self.general.queue_factor * self.general.workers
