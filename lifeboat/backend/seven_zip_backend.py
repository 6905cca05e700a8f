import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from typing_extensions import override

from lifeboat.backend import CompressionBackend
from lifeboat.exceptions import BackendUnavailable, ArchiverProcessError, ExtractError
from lifeboat.types.archive_format import ArchiveFormat
from lifeboat.types.compression_result import CompressionResult
from lifeboat.types.file_entry import FileEntry
from lifeboat.types.progress import ItemProgressCallback
from lifeboat.utils import file_utils, path_utils

if sys.platform == 'win32':
	_COMMON_EXECUTABLE_PATHS = [
		r'C:\Program Files\7-Zip\7z.exe',
		r'C:\Program Files (x86)\7-Zip\7z.exe',
	]
else:
	_COMMON_EXECUTABLE_PATHS = [
		'/usr/bin/7z',
		'/usr/local/bin/7z',
		'/opt/homebrew/bin/7z',
	]
_EXECUTABLE_NAMES = ['7z', '7za', '7zz']


class SevenZipBackend(CompressionBackend):
	"""
	Archives with an external 7-Zip executable

	Sources are copied into a temporary directory first, and 7-Zip only reads the copy.
	Files held open by a live process fail individually during the copy, instead of failing the whole archive
	"""
	NAME = 'seven_zip'

	def __init__(self, *args, **kwargs):
		super().__init__(*args, **kwargs)
		self.__executable: Optional[str] = None
		self.__executable_searched = False

	def find_executable(self) -> Optional[str]:
		if not self.__executable_searched:
			self.__executable = self.__search_executable()
			self.__executable_searched = True
			if self.__executable is not None:
				self.logger.debug('Found 7-Zip executable at {!r}'.format(self.__executable))
		return self.__executable

	def __search_executable(self) -> Optional[str]:
		if self.config.seven_zip.path:
			path = path_utils.normalize_path(self.config.seven_zip.path)
			if path.is_file():
				return str(path)
			self.logger.warning('Configured 7-Zip executable {!r} does not exist'.format(self.config.seven_zip.path))

		for name in _EXECUTABLE_NAMES:
			if (found := shutil.which(name)) is not None:
				return found
		for path in _COMMON_EXECUTABLE_PATHS:
			if os.path.isfile(path):
				return path
		return None

	@override
	def is_available(self) -> bool:
		return self.find_executable() is not None

	@override
	def get_format(self) -> ArchiveFormat:
		return ArchiveFormat.seven_zip

	@override
	def get_extractable_formats(self) -> List[ArchiveFormat]:
		return [ArchiveFormat.seven_zip]

	def __get_executable_or_raise(self) -> str:
		executable = self.find_executable()
		if executable is None:
			raise BackendUnavailable(self.NAME)
		return executable

	def _get_compress_args(self, archive_path: Path, source_dir: Path) -> List[str]:
		level = self.config.seven_zip.get_effective_level() if self.config.enabled else 0
		threads = self.config.seven_zip.threads
		args = [
			self.__get_executable_or_raise(),
			'a',
			'-mx{}'.format(level),
			'-mmt{}'.format(threads) if threads > 0 else '-mmt',
			'-y',
		]
		if sys.platform != 'win32':
			# store symbolic links as links
			args.append('-snl')
		args.extend([str(archive_path), str(source_dir / '*')])
		return args

	def _run_archiver(self, args: List[str]):
		self.logger.info('Running 7-Zip: {}'.format(' '.join(args)))
		proc = subprocess.run(args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, stdin=subprocess.DEVNULL)
		output = proc.stdout.decode('utf8', errors='replace')
		if proc.returncode != 0:
			self.logger.error('7-Zip failed with return code {}, output:\n{}'.format(proc.returncode, output))
			raise ArchiverProcessError(args, proc.returncode, output)
		self.logger.debug('7-Zip output:\n{}'.format(output))

	def _copy_file(self, src_path: Path, dst_path: Path):
		file_utils.copy_file_with_mode(src_path, dst_path)

	def _copy_to_temp(self, entries: List[FileEntry], temp_path: Path, progress: ItemProgressCallback, result: CompressionResult):
		temp_path.mkdir(parents=True, exist_ok=True)
		for i, entry in enumerate(entries):
			dst_path = temp_path / entry.relative_path
			if entry.is_dir:
				dst_path.mkdir(parents=True, exist_ok=True)
				try:
					shutil.copymode(entry.source_path, dst_path)
				except OSError as e:
					self.logger.debug('Failed to copy mode of directory {!r}: {}'.format(str(entry.source_path), e))
				continue

			progress(i + 1, entry.relative_path)
			dst_path.parent.mkdir(parents=True, exist_ok=True)
			try:
				if entry.source_path.is_symlink():
					# keep links as links, their targets may be directories or missing
					os.symlink(os.readlink(entry.source_path), dst_path)
				else:
					self._copy_file(entry.source_path, dst_path)
			except OSError as e:
				self.logger.warning('Failed to copy file {!r}: {}'.format(str(entry.source_path), e))
				result.errors.append('copy error: {}'.format(entry.relative_path))
				continue

			result.original_size += entry.size
			result.files_processed += 1

	@override
	def _compress(self, entries: List[FileEntry], archive_path: Path, progress: ItemProgressCallback, result: CompressionResult):
		# 7z appends to existing archives
		archive_path.unlink(missing_ok=True)
		temp_path = archive_path.with_name(archive_path.name + '.tmp')
		try:
			self._copy_to_temp(entries, temp_path, progress, result)
			self._run_archiver(self._get_compress_args(archive_path, temp_path))
		finally:
			try:
				file_utils.rm_rf(temp_path, missing_ok=True)
			except OSError as e:
				self.logger.warning('Failed to remove temp folder {!r}: {}'.format(str(temp_path), e))
				result.errors.append('failed to clean temp folder: {}'.format(e))

	@override
	def _extract(self, archive_path: Path, archive_format: ArchiveFormat, target_path: Path, progress: ItemProgressCallback):
		args = [
			self.__get_executable_or_raise(),
			'x',
			str(archive_path),
			'-o{}'.format(target_path),
			'-y',
		]
		progress(0, archive_path.name)
		try:
			self._run_archiver(args)
		except ArchiverProcessError as e:
			raise ExtractError(archive_path, e.output) from e
