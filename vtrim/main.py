import logging
import typer
from pathlib import Path
from typing import Optional

from vtrim.config.loader import load_config
from vtrim.config.models import AppConfig
from vtrim.domain.errors import VtrimError
from vtrim.infrastructure.logging import setup_logging
from vtrim.infrastructure.event_bus import EventBus
from vtrim.infrastructure.media_scanner import MediaScanner
from vtrim.infrastructure.vlc import VlcAdapter
from vtrim.pipeline.orchestrator import Orchestrator
from vtrim.ui.console import ConsoleReporter

app = typer.Typer(help="vtrim - cut the first seconds off every video in a tree")

@app.command()
def trim(
    tool_path: Optional[str] = typer.Option(None, "--vlc", help="Where vlc is installed (default: vlc on PATH)"),
    input_dir: Optional[Path] = typer.Option(None, "--in", help="Process folder including subfolders (default: .)"),
    output_dir: Optional[Path] = typer.Option(None, "--out", help="Output folder (default: out)"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Number of workers (default: 4)"),
    trim_offset: Optional[int] = typer.Option(None, "--trim", min=0, help="Seconds to cut from the start (default: 7)"),
    extension: Optional[str] = typer.Option(None, "--ext", help="Media extension, case-sensitive (default: .mp4)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    log_path: Optional[Path] = typer.Option(None, "--log-path", help="Path to log file (default: <out>/vtrim.log)"),
    debug: Optional[bool] = typer.Option(None, "--debug/--no-debug", help="Enable verbose debug logging (default: from config, off)"),
):
    """Trim every matching video under the input folder into the output folder."""
    try:
        config = load_config(config_path) if config_path else AppConfig()
        # Apply CLI overrides
        if tool_path is not None: config.paths.tool_path = tool_path
        if input_dir is not None: config.paths.input_dir = str(input_dir)
        if output_dir is not None: config.paths.output_dir = str(output_dir)
        if workers is not None: config.general.workers = workers
        if trim_offset is not None: config.general.trim_offset_seconds = trim_offset
        if extension is not None: config.general.extension = extension
        if log_path is not None: config.general.log_path = str(log_path)
        if debug is not None: config.general.debug = debug
        # Re-run validators on the overridden values
        config = AppConfig.model_validate(config.model_dump())

        input_root = Path(config.paths.input_dir)
        output_root = Path(config.paths.output_dir)
        log_path_value = Path(config.general.log_path) if config.general.log_path else None
        logger = setup_logging(output_root, debug=config.general.debug, log_path=log_path_value)
        logger.info(f"vtrim started: in={input_root}, out={output_root}, tool={config.paths.tool_path}")
        logger.info(
            f"Config: workers={config.general.workers}, trim={config.general.trim_offset_seconds}s, "
            f"ext={config.general.extension}, denylist={config.general.denylist}"
        )

        bus = EventBus()
        reporter = ConsoleReporter(bus, verbose=config.general.debug)

        scanner = MediaScanner(
            extension=config.general.extension,
            denylist=config.general.denylist,
            trim_offset_seconds=config.general.trim_offset_seconds,
            event_bus=bus,
        )
        vlc = VlcAdapter(tool_path=config.paths.tool_path, debug=config.general.debug)

        orchestrator = Orchestrator(
            config=config,
            event_bus=bus,
            media_scanner=scanner,
            vlc_adapter=vlc,
        )
        orchestrator.run(input_root, output_root)

    except KeyboardInterrupt:
        typer.secho("\nTrimming stopped by user (Ctrl+C)", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=130)

    except typer.Exit:
        raise

    except (VtrimError, FileNotFoundError, ValueError) as e:
        logging.getLogger(__name__).error(f"Fatal: {e}")
        typer.secho(f"Fatal Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    except Exception as e:
        logging.getLogger(__name__).exception("Unexpected error")
        typer.secho(f"Fatal Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

if __name__ == "__main__":
    app()
