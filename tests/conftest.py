import pytest
import threading
import yaml
from pathlib import Path
from typing import List
from vtrim.config.models import AppConfig
from vtrim.domain.models import TrimJob
from vtrim.infrastructure.event_bus import EventBus

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Returns a sample AppConfig object for testing."""
    return AppConfig(
        general={
            "workers": 2,
            "queue_factor": 2,
            "trim_offset_seconds": 7,
            "extension": ".mp4",
            "denylist": ["'", ","],
            "debug": False,
        },
        paths={
            "tool_path": "vlc",
            "input_dir": ".",
            "output_dir": "out",
        },
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "vtrim.yaml"

    content = {
        'general': {
            'workers': 3,
            'trim_offset_seconds': 12,
            'extension': 'mkv',
            'denylist': ["'", ",", "&"],
            'debug': True,
        },
        'paths': {
            'tool_path': '/opt/vlc/vlc',
            'input_dir': '/media/in',
            'output_dir': '/media/in/trimmed',
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def media_root(tmp_path):
    """Creates an input root with a small tree of media and non-media files."""
    root = tmp_path / "root"
    (root / "a").mkdir(parents=True)
    (root / "a" / "video.mp4").write_bytes(b"fake mp4")
    (root / "a" / "video.txt").write_text("notes")
    (root / "b" / "c").mkdir(parents=True)
    (root / "b" / "c" / "deep.mp4").write_bytes(b"fake mp4")
    (root / "b" / "upper.MP4").write_bytes(b"fake mp4")
    (root / "top.mp4").write_bytes(b"fake mp4")
    return root

@pytest.fixture
def make_job(tmp_path):
    """Factory for TrimJobs rooted in tmp_path."""
    def _make(name: str, offset: int = 7) -> TrimJob:
        return TrimJob(
            work_dir=tmp_path,
            input_path=Path(name),
            output_path=Path("out") / name,
            trim_offset_seconds=offset,
        )
    return _make

# ============================================================================
# Fake external tool
# ============================================================================

class RecordingProcessor:
    """Thread-safe stand-in for VlcAdapter that records every job it sees."""

    def __init__(self, fail_on: str = "", gate: threading.Event = None):
        self.fail_on = fail_on
        self.gate = gate
        self.calls: List[TrimJob] = []
        self._lock = threading.Lock()

    def locate(self) -> str:
        return "/usr/bin/vlc"

    def trim(self, job: TrimJob) -> str:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        with self._lock:
            self.calls.append(job)
        if self.fail_on and job.input_path.name == self.fail_on:
            raise RuntimeError(f"vlc exited with code 1 for {job.input_path}")
        return ""

@pytest.fixture
def recording_processor():
    return RecordingProcessor()

@pytest.fixture
def processor_factory():
    """Returns the RecordingProcessor class for tests needing custom behaviour."""
    return RecordingProcessor

# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
