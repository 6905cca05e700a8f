import logging
from typing import Dict, Type, List

from lifeboat.backend import CompressionBackend
from lifeboat.backend.seven_zip_backend import SevenZipBackend
from lifeboat.backend.tar_stream_backend import TarStreamBackend
from lifeboat.backend.zip_backend import ZipBackend
from lifeboat.config.compression_config import CompressionConfig
from lifeboat.exceptions import BackendUnavailable, UnsupportedArchiveFormat
from lifeboat.types.archive_format import ArchiveFormat

# in probing priority order
_BACKEND_CLASSES: List[Type[CompressionBackend]] = [
	SevenZipBackend,
	TarStreamBackend,
	ZipBackend,
]
AUTO_BACKEND = 'auto'


def get_backend_names() -> List[str]:
	return [cls.NAME for cls in _BACKEND_CLASSES]


def create_backend(name: str, config: CompressionConfig, logger: logging.Logger) -> CompressionBackend:
	for cls in _BACKEND_CLASSES:
		if cls.NAME == name:
			return cls(config, logger)
	raise ValueError('unknown compression backend {!r}, should be one of {}'.format(name, get_backend_names()))


def select_backend(config: CompressionConfig, logger: logging.Logger) -> CompressionBackend:
	"""
	Probe the backends, and return the first available one

	The configured backend is tried first, then the rest in the fixed order 7-Zip, tar.zst, zip
	"""
	names = get_backend_names()
	if config.backend != AUTO_BACKEND:
		if config.backend not in names:
			raise ValueError('unknown compression backend {!r}, should be one of {}'.format(config.backend, [AUTO_BACKEND] + names))
		names.remove(config.backend)
		names.insert(0, config.backend)

	for name in names:
		backend = create_backend(name, config, logger)
		if backend.is_available():
			if config.backend not in (AUTO_BACKEND, name):
				logger.warning('Configured compression backend {} is not available, falling back to {}'.format(config.backend, name))
			logger.debug('Selected compression backend {}'.format(name))
			return backend
		logger.debug('Compression backend {} is not available'.format(name))
	raise BackendUnavailable(config.backend)


def get_backend_for_format(archive_format: ArchiveFormat, config: CompressionConfig, logger: logging.Logger) -> CompressionBackend:
	"""
	The backend that extracts archives of the given format
	"""
	for cls in _BACKEND_CLASSES:
		backend = cls(config, logger)
		if archive_format in backend.get_extractable_formats():
			return backend
	raise UnsupportedArchiveFormat(archive_format.extension)
