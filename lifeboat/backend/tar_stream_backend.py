import contextlib
import os
import shutil
import tarfile
from pathlib import Path
from typing import ContextManager, List, Optional

from typing_extensions import override

from lifeboat import constants
from lifeboat.backend import CompressionBackend
from lifeboat.compressors import Compressor, ZstdCompressor
from lifeboat.types.archive_format import ArchiveFormat
from lifeboat.types.compression_result import CompressionResult
from lifeboat.types.file_entry import FileEntry
from lifeboat.types.progress import ItemProgressCallback
from lifeboat.types.tar_format import TarFormat
from lifeboat.utils import file_utils
from lifeboat.utils.peek_reader import PeekReader


class _PaddedReader:
	"""
	Feeds exactly size bytes to TarFile.addfile. Once the source fails or ends early, the rest is zeros,
	so the archive stays well-formed
	"""

	def __init__(self, reader: PeekReader, size: int):
		self.reader = reader
		self.remaining = size
		self.error: Optional[str] = None

	def read(self, n: int = -1) -> bytes:
		if n < 0 or n > self.remaining:
			n = self.remaining
		data = b''
		if self.error is None:
			try:
				data = self.reader.read(n)
			except OSError as e:
				self.error = str(e)
			else:
				if len(data) < n:
					self.error = 'file shrank by {} bytes'.format(self.remaining - len(data))
		if len(data) < n:
			data += b'\x00' * (n - len(data))
		self.remaining -= n
		return data


class TarStreamBackend(CompressionBackend):
	"""
	Streams files one by one into a zstd compressed tar, without an intermediate copy
	"""
	NAME = 'tar_zst'
	LOG_FILE_CREATION = False

	@override
	def is_available(self) -> bool:
		return ZstdCompressor.is_lib_available()

	@override
	def get_format(self) -> ArchiveFormat:
		if self.config.enabled:
			return ArchiveFormat.tar_zst
		return ArchiveFormat.tar

	@override
	def get_extractable_formats(self) -> List[ArchiveFormat]:
		return [ArchiveFormat.tar_zst, ArchiveFormat.tar_gz, ArchiveFormat.tar]

	@contextlib.contextmanager
	def __open_tar(self, archive_path: Path, tar_format: TarFormat) -> ContextManager[tarfile.TarFile]:
		with open(archive_path, 'wb') as f:
			compressor = Compressor.create(tar_format.value.compress_method, level=self.config.level)
			with compressor.compress_stream(f) as f_compressed:
				with tarfile.open(fileobj=f_compressed, mode=tar_format.value.mode_w) as tar:
					yield tar

	def __add_entry(self, tar: tarfile.TarFile, entry: FileEntry, result: CompressionResult):
		try:
			info = tar.gettarinfo(name=str(entry.source_path), arcname=entry.relative_path)
		except OSError as e:
			self.logger.warning('Failed to read file info of {!r}: {}'.format(str(entry.source_path), e))
			result.errors.append('header error: {}'.format(entry.relative_path))
			return

		if info is None:
			# sockets and other special files
			self.logger.warning('Skipping {!r}, unsupported file type'.format(str(entry.source_path)))
			result.errors.append('unsupported file type: {}'.format(entry.relative_path))
			return

		if not info.isreg():
			if self.LOG_FILE_CREATION:
				self.logger.debug('add {} {} to tarfile'.format('dir' if info.isdir() else 'entry', entry.relative_path))
			tar.addfile(tarinfo=info)
			return

		try:
			f = open(entry.source_path, 'rb')
		except OSError as e:
			self.logger.warning('Failed to open {!r}: {}'.format(str(entry.source_path), e))
			result.errors.append('open error: {}'.format(entry.relative_path))
			return

		with f:
			# A failed read in TarFile.addfile leaves a broken member in the archive
			# Read the first chunk in advance, so most read errors happen before the header is written
			reader = PeekReader(f, constants.STREAM_BUFFER_SIZE)
			try:
				reader.peek()
			except OSError as e:
				self.logger.warning('Failed to read {!r}: {}'.format(str(entry.source_path), e))
				result.errors.append('read error: {}'.format(entry.relative_path))
				return

			if self.LOG_FILE_CREATION:
				self.logger.debug('add file {} to tarfile'.format(entry.relative_path))
			padded = _PaddedReader(reader, info.size)
			tar.addfile(tarinfo=info, fileobj=padded)

		if padded.error is not None:
			self.logger.warning('Failed to read {!r} after its header was written, member padded with zeros: {}'.format(str(entry.source_path), padded.error))
			result.errors.append('read error: {}'.format(entry.relative_path))
			return

		result.original_size += info.size
		result.files_processed += 1

	@override
	def _compress(self, entries: List[FileEntry], archive_path: Path, progress: ItemProgressCallback, result: CompressionResult):
		tar_format = self.get_format().tar_format
		with self.__open_tar(archive_path, tar_format) as tar:
			for i, entry in enumerate(entries):
				progress(i + 1, entry.relative_path)
				self.__add_entry(tar, entry, result)

	def __extract_member(self, tar: tarfile.TarFile, member: tarfile.TarInfo, target_path: Path):
		path = file_utils.safe_member_path(target_path, member.name)
		if member.isdir():
			path.mkdir(parents=True, exist_ok=True)
		elif member.isreg():
			path.parent.mkdir(parents=True, exist_ok=True)
			src = tar.extractfile(member)
			with src, open(path, 'wb') as dst:
				shutil.copyfileobj(src, dst, constants.STREAM_BUFFER_SIZE)
			try:
				os.chmod(path, member.mode & 0o7777)
			except OSError as e:
				self.logger.warning('Failed to set permissions of {!r}: {}'.format(str(path), e))
		elif member.issym():
			path.parent.mkdir(parents=True, exist_ok=True)
			if not os.path.lexists(path):
				os.symlink(member.linkname, path)
		else:
			self.logger.warning('Skipping unsupported tar member {!r} (type {!r})'.format(member.name, member.type))

	@override
	def _extract(self, archive_path: Path, archive_format: ArchiveFormat, target_path: Path, progress: ItemProgressCallback):
		tar_format = archive_format.tar_format
		compressor = Compressor.create(tar_format.value.compress_method)
		with compressor.open_decompressed(archive_path) as f:
			with tarfile.open(fileobj=f, mode=tar_format.value.mode_r_stream) as tar:
				for i, member in enumerate(tar):
					progress(i + 1, member.name)
					self.__extract_member(tar, member, target_path)
