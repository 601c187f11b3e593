"""Logging setup.

Every module logs through a child of the 'bravia' logger. Records are
written to the terminal with click so colours match the CLI output.
"""

import logging

import click

ROOT_LOGGER = 'bravia'

_LEVEL_COLOURS = {
    logging.DEBUG: 'bright_black',
    logging.WARNING: 'yellow',
    logging.ERROR: 'red',
    logging.CRITICAL: 'red',
}


class ClickHandler(logging.Handler):
    """Logging handler that writes records with click.echo."""

    def emit(self, record: logging.LogRecord):
        try:
            message = self.format(record)
            colour = _LEVEL_COLOURS.get(record.levelno)
            if colour:
                message = click.style(message, fg=colour)
            click.echo(message, err=record.levelno >= logging.WARNING)
        except Exception:
            self.handleError(record)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the 'bravia' logger hierarchy.

    Safe to call more than once; the level is updated and the handler is
    only installed the first time.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if not any(isinstance(h, ClickHandler) for h in logger.handlers):
        handler = ClickHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s] [BraviaFavourites] %(message)s',
                                               datefmt='%H:%M:%S'))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
