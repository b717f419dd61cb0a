# This module configures the loggers used by the fmul harness
import os
import logging
import functools

import colorlog

TRACE = logging.DEBUG - 5


def _install_trace_level():
    if getattr(logging, "TRACE", None) == TRACE:
        return
    logging.TRACE = TRACE
    logging.addLevelName(TRACE, "TRACE")
    logging.Logger.trace = functools.partialmethod(logging.Logger.log, TRACE)
    logging.trace = functools.partial(logging.log, TRACE)


_install_trace_level()


class customFileFormat(logging.Formatter):
    def format(self, record):
        logformat = (
            "%(message)s"
            if record.levelno == TRACE
            else "[%(asctime)s][%(levelname)s] %(message)s"
        )
        formatter = logging.Formatter(logformat, "%Y-%m-%d %H:%M:%S")
        return formatter.format(record)


class customConsoleFormat(logging.Formatter):
    def format(self, record):
        traceformat = logging.Formatter("%(message)s", "%Y-%m-%d %H:%M:%S")
        colorformat = colorlog.ColoredFormatter(
            "%(log_color)s[%(asctime)s][%(levelname)s]%(reset)s"
            + " %(message_log_color)s%(message)s",
            "%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "red"}},
        )
        logformat = traceformat if record.levelno == TRACE else colorformat
        return logformat.format(record)


def getLogger(
    name: str, logFile: str = "", console: bool = True, level: int = logging.INFO
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Calling twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if logFile:
        if os.path.isfile(logFile):
            os.remove(logFile)
        fh = logging.FileHandler(logFile)
        fh.setFormatter(customFileFormat())
        fh.setLevel(TRACE)
        logger.addHandler(fh)

    if console:
        ch = logging.StreamHandler()
        ch.setFormatter(customConsoleFormat())
        ch.setLevel(TRACE)
        logger.addHandler(ch)
    return logger


def share_handlers(logger: logging.Logger, *names: str) -> None:
    """Route the named loggers through the handlers and level of `logger`."""
    for name in names:
        other = logging.getLogger(name)
        other.setLevel(logger.level)
        # Handlers are owned and closed by `logger`
        for handler in list(other.handlers):
            other.removeHandler(handler)
        for handler in logger.handlers:
            other.addHandler(handler)
