import logging
import logging.handlers
from pathlib import Path
from datetime import datetime

from shop_inventory.config import config

class Logger:
    """Logging manager for the Print Shop Inventory.

    Every named logger writes to its own rotating file under the [LOGGING]
    directory and, when enabled, to the console. Operations that change
    stock (printing a plate, resetting the database) are also traced in
    the shared ``operations`` log.
    """

    _instance = None
    _loggers = {}

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger if not already initialized."""
        if self._initialized:
            return

        self._log_config = config.log_config
        self._log_dir = Path(self._log_config['directory'])
        self._level = getattr(logging, self._log_config['level'].upper(), logging.INFO)
        self._formatter = logging.Formatter(self._log_config['format'])

        self._initialized = True

    def _handlers(self, name):
        handlers = []

        if self._log_config['file_output']:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                self._log_dir / f"{name}.log",
                maxBytes=self._log_config['max_size_mb'] * 1024 * 1024,
                backupCount=self._log_config['backup_count']
            ))

        if self._log_config['console_output']:
            handlers.append(logging.StreamHandler())

        for handler in handlers:
            handler.setFormatter(self._formatter)
        return handlers

    def get_logger(self, name):
        """Get a logger with the specified name.

        Handlers are attached once per name; the logger does not propagate,
        so each message is written exactly once.
        """
        if name in self._loggers:
            return self._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(self._level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        for handler in self._handlers(name):
            logger.addHandler(handler)
        logger.propagate = False

        self._loggers[name] = logger
        return logger

    def operation_start_log(self, operation_name, additional_info=None):
        """Log the start of a stock-changing operation.

        Returns:
            Token to pass to operation_end_log
        """
        ops_logger = self.get_logger('operations')
        if additional_info:
            ops_logger.info(f"Starting operation: {operation_name} {additional_info}")
        else:
            ops_logger.info(f"Starting operation: {operation_name}")

        return {'operation_name': operation_name, 'start_time': datetime.now()}

    def operation_end_log(self, log_info, success=True, result_info=None):
        """Log how an operation ended and how long it took."""
        ops_logger = self.get_logger('operations')
        duration = datetime.now() - log_info['start_time']

        outcome = 'Completed' if success else 'Did not complete'
        message = f"{outcome} operation: {log_info['operation_name']} in {duration.total_seconds():.3f}s"
        if result_info:
            message += f" {result_info}"

        if success:
            ops_logger.info(message)
        else:
            ops_logger.warning(message)

# Global logger instance
logger = Logger()

def get_logger(name):
    """Get a logger with the specified name."""
    return logger.get_logger(name)
