import json
import logging
from datetime import datetime, timezone

ROOT_LOGGER = "homealign_console"


def _package_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the console package; one stream handler serves them all."""
    root = _package_logger()
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return root.getChild(name)


def configure_logging(level: str = "INFO") -> None:
    _package_logger().setLevel(level.upper())


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    tenant_id: str | None,
    outcome: str,
    detail: str | None = None,
) -> None:
    level = logging.WARNING if outcome == "error" else logging.INFO
    record = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "effective_tenant_id": tenant_id,
        "outcome": outcome,
        "detail": detail,
    }
    logger.log(level, json.dumps(record))
