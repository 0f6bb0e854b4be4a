import os
import re
import sys

from loguru import logger

# Engine messages open with a component tag: "[ENGINE] ...", "[CIRCUIT] ..."
_TAG_RE = re.compile(r"^\[([A-Z_]+)\]\s*")


def _split_tag(record) -> None:
    """Move the leading [TAG] into extra["component"] so sinks can filter on it."""
    match = _TAG_RE.match(record["message"])
    if match:
        record["extra"].setdefault("component", match.group(1))
        record["message"] = record["message"][match.end():]
    else:
        record["extra"].setdefault("component", "-")


def setup_logger(
    *,
    json_logs: bool = False,
    level: str = "INFO",
    quiet_components: tuple[str, ...] = ("FACTORS",),
) -> None:
    """Configure loguru for the engine and its CLI.

    Console goes to stderr (stdout carries the CLI's JSON result); its level
    is LOG_LEVEL (default: INFO) and per-factor chatter is kept off it.
    The file sink always captures DEBUG for every component so a score can
    be replayed factor by factor.
    """
    console_level = os.getenv("LOG_LEVEL", level).upper()
    logger.remove()
    logger.configure(patcher=_split_tag)

    def console_filter(record) -> bool:
        return record["extra"].get("component") not in quiet_components

    if json_logs:
        logger.add(sys.stderr, serialize=True, level=console_level, filter=console_filter)
    else:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<magenta>{extra[component]: <9}</magenta> | "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
            filter=console_filter,
        )

    logger.add(
        "logs/riskradar_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[component]} | {name}:{function} - {message}",
        rotation="50 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
    )
