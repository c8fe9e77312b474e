
import logging
import os

# third-party loggers that are noisy at INFO
_QUIET = ("multipart", "python_multipart", "uvicorn.access")

def _ours(handler: logging.Handler) -> bool:
    return getattr(handler, "_pinshare", False)

def configure_logging(log_dir: str = "logs", level: str = "INFO"):
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.abspath(os.path.join(log_dir, "app.log"))
    root = logging.getLogger()
    root.setLevel(level)

    current = [h for h in root.handlers if _ours(h)]
    if any(getattr(h, "baseFilename", None) == log_file for h in current):
        return
    # switching log_dir: replace the handlers installed for the previous one
    for h in current:
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(fmt)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    for h in (fh, ch):
        h._pinshare = True
        root.addHandler(h)

    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)
