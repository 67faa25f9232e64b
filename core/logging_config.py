from pathlib import Path
import logging
import sys
from typing import Optional
from datetime import datetime

from core.config import get_config  # type: ignore


def setup_logging(logs_dir: Optional[str | Path] = None, log_file_name: Optional[str] = None) -> logging.Logger:
    """Configure root logging to stderr and a file under `logs_dir`.

    Idempotent: calling multiple times won't add duplicate handlers.
    stdout is reserved for the MCP stdio transport, so console output goes to stderr.
    Directory, file name and level default to the `logging` section of config.yaml.
    Returns a module-level logger for callers to use.
    """
    log_cfg = get_config().get("logging") or {}
    if logs_dir is None:
        configured_dir = Path(log_cfg.get("dir") or "logs")
        if not configured_dir.is_absolute():
            configured_dir = Path(__file__).resolve().parent.parent / configured_dir
        logs_dir = configured_dir
    else:
        logs_dir = Path(logs_dir)
    if log_file_name is None:
        log_file_name = log_cfg.get("file_name") or "server.log"
    level = logging.getLevelName(str(log_cfg.get("level") or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    # Ensure logs directory exists
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # continue with stderr only if it cannot create logs dir
        pass

    # Add timestamp to the logfile name so each run writes to a timestamped file
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    base = Path(log_file_name).stem
    ext = Path(log_file_name).suffix or ".log"
    log_file = logs_dir / f"{base}_{timestamp}{ext}"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # formatter used by both handlers
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    file_handler_exists = any(isinstance(h, logging.FileHandler) for h in root_logger.handlers)
    if not file_handler_exists:
        try:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setFormatter(formatter)
            fh.setLevel(level)
            root_logger.addHandler(fh)
        except OSError:
            # If file handler cannot be created (permissions, etc), fall back to stderr only
            pass

    # Ensure a StreamHandler to stderr exists (don't duplicate)
    stream_stderr_exists = False
    for h in root_logger.handlers:
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            if getattr(h, 'stream', None) is sys.stderr:
                stream_stderr_exists = True
                break

    if not stream_stderr_exists:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(formatter)
        sh.setLevel(level)
        root_logger.addHandler(sh)

    # httpx logs every request at INFO; keep it quieter than our own records
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return logging.getLogger(__name__)

