import logging

logger = logging.getLogger("guestio")
# Without a handler, logging's last-resort handler writes to the current
# sys.stderr, which is the guest's stderr slot under redirect_stdio.
logger.addHandler(logging.NullHandler())


# Diagnostic logger shared by the context and the stream backends
class DiagnosticLogger:
    @staticmethod
    def warn(msg: str):
        logger.warning(f"[DIAG_WARN] {msg}")

    @staticmethod
    def debug(msg: str):
        logger.debug(f"[DIAG_DEBUG] {msg}")

    @staticmethod
    def error(msg: str):
        logger.error(f"[DIAG_ERROR] {msg}")

diagnostic_logger = DiagnosticLogger()


def configure_logging(level: str = "WARNING"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s"
    )

def log_slot_replaced(slot: str, previous: str, current: str):
    diagnostic_logger.debug(f"Slot {slot} replaced. {previous} -> {current}")

def log_write_rejected(reason: str, attempted: int, remaining: int):
    diagnostic_logger.warn(f"Write rejected ({reason}). Attempted: {attempted}B. Remaining: {remaining}B")
