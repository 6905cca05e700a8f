import os
import shutil
import zipfile
from pathlib import Path
from typing import List

from typing_extensions import override

from lifeboat import constants
from lifeboat.backend import CompressionBackend
from lifeboat.types.archive_format import ArchiveFormat
from lifeboat.types.compression_result import CompressionResult
from lifeboat.types.file_entry import FileEntry
from lifeboat.types.progress import ItemProgressCallback
from lifeboat.utils import file_utils


class ZipBackend(CompressionBackend):
	"""
	Deflate zip with the standard library only. Always available
	"""
	NAME = 'zip'

	@override
	def is_available(self) -> bool:
		return True

	@override
	def get_format(self) -> ArchiveFormat:
		return ArchiveFormat.zip

	@override
	def get_extractable_formats(self) -> List[ArchiveFormat]:
		return [ArchiveFormat.zip]

	def __add_entry(self, zf: zipfile.ZipFile, entry: FileEntry, result: CompressionResult):
		if entry.is_dir:
			try:
				zf.write(entry.source_path, arcname=entry.relative_path)
			except OSError as e:
				self.logger.warning('Failed to add directory {!r}: {}'.format(str(entry.source_path), e))
				result.errors.append('header error: {}'.format(entry.relative_path))
			return

		if self.config.should_compress(entry.source_path.name):
			compress_type = zipfile.ZIP_DEFLATED
		else:
			compress_type = zipfile.ZIP_STORED
		try:
			zf.write(entry.source_path, arcname=entry.relative_path, compress_type=compress_type, compresslevel=self.config.level)
		except OSError as e:
			self.logger.warning('Failed to add file {!r}: {}'.format(str(entry.source_path), e))
			result.errors.append('read error: {}'.format(entry.relative_path))
			return

		result.original_size += entry.size
		result.files_processed += 1

	@override
	def _compress(self, entries: List[FileEntry], archive_path: Path, progress: ItemProgressCallback, result: CompressionResult):
		with zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=self.config.level, strict_timestamps=False) as zf:
			for i, entry in enumerate(entries):
				progress(i + 1, entry.relative_path)
				self.__add_entry(zf, entry, result)

	@override
	def _extract(self, archive_path: Path, archive_format: ArchiveFormat, target_path: Path, progress: ItemProgressCallback):
		with zipfile.ZipFile(archive_path, 'r') as zf:
			for i, info in enumerate(zf.infolist()):
				progress(i + 1, info.filename)
				path = file_utils.safe_member_path(target_path, info.filename)
				if info.is_dir():
					path.mkdir(parents=True, exist_ok=True)
					continue

				path.parent.mkdir(parents=True, exist_ok=True)
				with zf.open(info, 'r') as src, open(path, 'wb') as dst:
					shutil.copyfileobj(src, dst, constants.STREAM_BUFFER_SIZE)
				if (mode := (info.external_attr >> 16) & 0o7777) != 0:
					try:
						os.chmod(path, mode)
					except OSError as e:
						self.logger.warning('Failed to set permissions of {!r}: {}'.format(str(path), e))
