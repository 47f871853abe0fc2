import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the desktop app."""
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT)
    # matplotlib is chatty at DEBUG (font cache, backends)
    logging.getLogger("matplotlib").setLevel(max(numeric, logging.WARNING))
    logging.getLogger("PIL").setLevel(max(numeric, logging.WARNING))
