import functools
import logging
import sys

from lifeboat import constants


@functools.lru_cache
def get() -> logging.Logger:
	from lifeboat.utils.log_utils import LOG_FORMATTER
	logger = logging.Logger(constants.PACKAGE_ID)
	handler = logging.StreamHandler(sys.stdout)
	handler.setFormatter(LOG_FORMATTER)
	logger.addHandler(handler)
	logger.setLevel(logging.INFO)
	return logger
