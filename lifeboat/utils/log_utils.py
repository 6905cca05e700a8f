import contextlib
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Generator, Optional, TYPE_CHECKING

if TYPE_CHECKING:
	from lifeboat.config.logging_config import LoggingConfig

LOG_FORMATTER = logging.Formatter('[%(asctime)s %(levelname)s] (%(funcName)s) %(message)s')
LOG_FORMATTER_NO_FUNC = logging.Formatter('[%(asctime)s %(levelname)s] %(message)s')
LOG_FORMATTER.default_msec_format = '%s.%03d'
LOG_FORMATTER_NO_FUNC.default_msec_format = '%s.%03d'


class FileLogger(logging.Logger):
	def __init__(self, name: str, logs_path: Path, level: int = logging.INFO):
		from lifeboat import constants
		super().__init__(f'{constants.PACKAGE_ID}-{name}', level)
		self.log_file = logs_path / f'{name}.log'
		self.log_file.parent.mkdir(parents=True, exist_ok=True)
		handler = RotatingFileHandler(
			self.log_file,
			maxBytes=10 * 1024 * 1024,
			backupCount=1,
			encoding='utf8'
		)
		handler.setFormatter(LOG_FORMATTER)
		self.addHandler(handler)


@contextlib.contextmanager
def open_file_logger(name: str, logs_path: Path, level: int = logging.INFO) -> Generator[FileLogger, None, None]:
	logger = FileLogger(name, logs_path, level)
	try:
		yield logger
	finally:
		for hdr in list(logger.handlers):
			logger.removeHandler(hdr)
			hdr.close()


def attach_file_handler(logger: logging.Logger, logging_config: 'LoggingConfig') -> Optional[logging.Handler]:
	"""
	Set the logger level, and write its records into the rotating log file configured in the given logging config

	:return: the added handler, or None if no log file is configured
	"""
	logger.setLevel(logging_config.get_log_level())
	if logging_config.path == '':
		return None
	log_file = Path(logging_config.path)
	log_file.parent.mkdir(parents=True, exist_ok=True)
	handler = RotatingFileHandler(
		log_file,
		maxBytes=logging_config.get_max_bytes(),
		backupCount=max(0, logging_config.max_files),
		encoding='utf8'
	)
	handler.setFormatter(LOG_FORMATTER)
	logger.addHandler(handler)
	return handler
