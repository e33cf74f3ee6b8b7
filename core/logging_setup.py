from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Union

# top-level packages of this app
_APP_LOGGERS = ("app.", "controller.", "core.", "gui.", "services.", "storage.", "pb_bootstrap", "__main__")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - app logs pass through
    - captured Python warnings only at ERROR+
    - third-party libs (urllib3, charset_normalizer, ...) only at WARNING+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(_APP_LOGGERS):
            return True
        if name == "py.warnings":
            return record.levelno >= logging.ERROR
        return record.levelno >= logging.WARNING


def setup_logging(
    *,
    log_dir: Union[str, Path] = ".local/todo_pb",
    console_level: Union[int, str] = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler (filtered) + file handler (everything).
    Call once, before the first window is created. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "todo_pb.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
