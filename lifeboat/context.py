import logging
from typing import Optional, Dict

from lifeboat.backend import CompressionBackend
from lifeboat.config.config import Config
from lifeboat.types.archive_format import ArchiveFormat
from lifeboat.utils.backup_id_utils import BackupIdGenerator


class LifeboatContext:
	"""
	Shared state of operations against one backup root. The compression backend is selected once, on first use
	"""

	def __init__(self, config: Config, *, logger: Optional[logging.Logger] = None, backend: Optional[CompressionBackend] = None):
		if logger is None:
			from lifeboat import logger as lifeboat_logger
			logger = lifeboat_logger.get()
		self.config = config
		self.logger = logger
		self.__backend = backend
		self.__format_backends: Dict[ArchiveFormat, CompressionBackend] = {}
		self.id_generator = BackupIdGenerator()
		if backend is not None:
			for fmt in backend.get_extractable_formats():
				self.__format_backends[fmt] = backend

	def get_backend(self) -> CompressionBackend:
		"""
		:raise BackendUnavailable: if no backend can run on this system
		"""
		if self.__backend is None:
			from lifeboat.backend.backend_selector import select_backend
			self.__backend = select_backend(self.config.compression, self.logger)
			self.logger.info('Using compression backend {} ({})'.format(self.__backend.NAME, self.__backend.get_format().extension))
		return self.__backend

	def get_backend_for_format(self, archive_format: ArchiveFormat) -> CompressionBackend:
		if (backend := self.__format_backends.get(archive_format)) is None:
			from lifeboat.backend.backend_selector import get_backend_for_format
			backend = get_backend_for_format(archive_format, self.config.compression, self.logger)
			self.__format_backends[archive_format] = backend
		return backend
