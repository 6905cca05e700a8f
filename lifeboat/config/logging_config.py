import logging

from mcdreforged.api.utils import Serializable

from lifeboat.types.units import ByteCount


class LoggingConfig(Serializable):
	# empty -> no log file
	path: str = './logs/lifeboat.log'
	level: str = 'info'
	max_size: str = '10MB'
	max_files: int = 5

	def get_log_level(self) -> int:
		level = logging.getLevelName(self.level.upper())
		if isinstance(level, int):
			return level
		return logging.INFO

	def get_max_bytes(self) -> int:
		return ByteCount(self.max_size).value
