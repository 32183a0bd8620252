import logging
import re
from typing import Iterable


_KEY_MATERIAL = re.compile(
    r"\b(sk|secret|private_key|signing_key)=\S+", re.IGNORECASE
)


class RedactingFilter(logging.Filter):
    """Mask signing key material that ends up in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = str(record.getMessage())
            redacted = _KEY_MATERIAL.sub(r"\1=***", msg)
            if redacted != msg:
                record.msg = redacted
                record.args = None
        except Exception:
            pass
        return True


def setup_logging(
    level: int = logging.INFO,
    loggers: Iterable[str] = ("merkleproof_api", "uvicorn", "uvicorn.access"),
) -> None:
    logging.basicConfig(level=level)
    f = RedactingFilter()
    # logger filters skip records from child loggers; handlers see everything
    for h in logging.getLogger().handlers:
        h.addFilter(f)
    for name in loggers:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.addFilter(f)


def level_from_name(name: str) -> int:
    """Map a level name like 'debug' to its logging constant; unknown -> INFO."""
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO
