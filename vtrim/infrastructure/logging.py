import logging
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "vtrim.log"
LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(threadName)s] %(message)s'

def setup_logging(output_dir: Path, debug: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    """Route every vtrim logger into one file for the run.

    The output root is created here, before the pipeline starts, so the log
    has somewhere to live. Worker threads share the root handler; the thread
    name in each line tells their output apart.

    Args:
        output_dir: Output root; holds vtrim.log unless log_path is given
        debug: Log tool command lines and per-job timings
        log_path: Explicit log file location
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    log_file = Path(log_path) if log_path else output_dir / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Tool output may carry replacement characters from undecodable bytes
    handler = logging.FileHandler(log_file, encoding="utf-8")
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True  # A second run in the same process gets a fresh handler
    )

    logger = logging.getLogger("vtrim")
    logger.info(f"Log file: {log_file} (debug={'ON' if debug else 'OFF'})")
    return logger
