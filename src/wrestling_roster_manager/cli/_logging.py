import logging
import sys

_STORE_LOGGER = "wrestling_roster_manager.repos"


def log_level(*, verbose: bool = False, quiet: bool = False) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Send log records to stderr so command output on stdout stays clean.

    Store commit traces are only shown with ``--verbose``.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level(verbose=verbose, quiet=quiet))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s — %(message)s", datefmt="%H:%M:%S"))
    root.addHandler(handler)

    logging.getLogger(_STORE_LOGGER).setLevel(logging.NOTSET if verbose else logging.WARNING)
