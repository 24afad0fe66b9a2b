import logging
import sys

from pythonjsonlogger import jsonlogger


def setup_logging(level: int = logging.INFO):
    """
    Configures structured JSON logging for the application.

    Installs a JSON formatter (timestamp, level, logger name, message) on a
    stdout handler that replaces the root logger's handlers. The HTTP
    connection pool used by the MinIO client is kept at WARNING so transfers
    do not flood the output.

    Returns:
        logging.Logger: The configured root logger instance.
    """
    formatter = jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []
    root_logger.addHandler(stream_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return root_logger
