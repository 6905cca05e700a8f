"""
Compression backends. Each backend turns one unit into one archive, and extracts archives it understands
"""
import contextlib
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from lifeboat.collector import Collector
from lifeboat.config.compression_config import CompressionConfig
from lifeboat.exceptions import LifeboatError, ExtractError
from lifeboat.types.archive_format import ArchiveFormat
from lifeboat.types.compression_result import CompressionResult
from lifeboat.types.file_entry import FileEntry
from lifeboat.types.progress import ItemProgressCallback, noop_item_progress


class CompressionBackend(ABC):
	NAME: str

	def __init__(self, config: CompressionConfig, logger: logging.Logger):
		self.config = config
		self.logger = logger

	@abstractmethod
	def is_available(self) -> bool:
		...

	@abstractmethod
	def get_format(self) -> ArchiveFormat:
		"""
		The format of the archives created by this backend with the current config
		"""
		...

	@abstractmethod
	def get_extractable_formats(self) -> List[ArchiveFormat]:
		...

	def compress_unit(
			self, source_path: Path, archive_path: Path, progress: Optional[ItemProgressCallback] = None, *,
			entries: Optional[List[FileEntry]] = None,
	) -> CompressionResult:
		"""
		Compress the source into a single archive

		:param source_path: the directory or file to archive
		:param archive_path: path of the archive to create
		:param progress: called with (current item count, current item name)
		:param entries: if given, only these collected entries are archived, under their relative paths.
			Otherwise everything under source_path is archived, relative to source_path
		"""
		if progress is None:
			progress = noop_item_progress
		if entries is None:
			collection = Collector(self.logger).collect_all(source_path)
			entries = collection.files
			pre_errors = collection.errors
		else:
			pre_errors = []

		result = CompressionResult(archive_path, self.get_format())
		result.errors.extend(pre_errors)
		self.logger.info('Compressing {} ({} entries) to {} with {}'.format(source_path, len(entries), archive_path.name, self.NAME))
		try:
			self._compress(entries, archive_path, progress, result)
		except Exception:
			with contextlib.suppress(OSError):
				archive_path.unlink(missing_ok=True)
			raise

		result.compressed_size = archive_path.stat().st_size
		ratio = result.compression_ratio
		self.logger.info('Compressed {} files of {} ({} bytes -> {} bytes, ratio {}), errors: {}'.format(
			result.files_processed, source_path, result.original_size, result.compressed_size,
			'{:.1%}'.format(ratio) if ratio is not None else 'N/A', len(result.errors),
		))
		return result

	@abstractmethod
	def _compress(self, entries: List[FileEntry], archive_path: Path, progress: ItemProgressCallback, result: CompressionResult):
		...

	def extract(self, archive_path: Path, target_path: Path, progress: Optional[ItemProgressCallback] = None):
		"""
		Extract the archive into the target directory. The format is detected from the archive file name

		:raise UnsupportedArchiveFormat: the format cannot be handled by this backend
		:raise ExtractError: anything goes wrong during the extraction
		"""
		if progress is None:
			progress = noop_item_progress
		archive_format = self._detect_format(archive_path)
		self.logger.info('Extracting {} to {} with {}'.format(archive_path, target_path, self.NAME))
		try:
			target_path.mkdir(parents=True, exist_ok=True)
			self._extract(archive_path, archive_format, target_path, progress)
		except LifeboatError:
			raise
		except Exception as e:
			self.logger.error('Extract {} failed: {}'.format(archive_path, e))
			raise ExtractError(archive_path, str(e)) from e

	def _detect_format(self, archive_path: Path) -> ArchiveFormat:
		from lifeboat.exceptions import UnsupportedArchiveFormat
		archive_format = ArchiveFormat.from_file_name(archive_path)
		if archive_format is None or archive_format not in self.get_extractable_formats():
			raise UnsupportedArchiveFormat(archive_path)
		return archive_format

	@abstractmethod
	def _extract(self, archive_path: Path, archive_format: ArchiveFormat, target_path: Path, progress: ItemProgressCallback):
		...
