import logging

LOGGER_NAME = "app"

LoggerLike = logging.Logger | logging.LoggerAdapter

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class ReportLogAdapter(logging.LoggerAdapter):
    """Stamps report context onto every record.

    ``report_type`` is fixed per report request; ``invoice_id`` may be passed
    per call through ``extra`` and is merged with the adapter's context.
    """

    def process(self, msg, kwargs):
        context = dict(self.extra or {})
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = context
        prefix = f"[{context.get('report_type', 'report')}]"
        invoice_id = context.get("invoice_id")
        if invoice_id is not None:
            prefix = f"{prefix} invoice={invoice_id}"
        return f"{prefix} {msg}", kwargs
