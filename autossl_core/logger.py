import logging, json, sys, time, os


class JsonFormatter(logging.Formatter):
    """One JSON object per line; the message is escaped by json.dumps."""

    converter = time.gmtime  # UTC timestamps across every node

    def format(self, record):
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def get_logger(name="autossl", level=logging.INFO, to_file=None):
    """Unified structured logger for all autossl_core components."""
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%SZ")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            dir_path = os.path.dirname(to_file)
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
