import logging
import os
from pathlib import Path
from typing import Iterable, Optional

import pathspec

from lifeboat.types.backup_unit import BackupUnit, UnitKind
from lifeboat.types.file_entry import FileEntry, CollectionResult


class Collector:
	"""
	Enumerates the files of backup units. Never modifies anything
	"""

	def __init__(self, logger: logging.Logger):
		self.logger = logger

	def collect(self, units: Iterable[BackupUnit]) -> CollectionResult:
		result = CollectionResult()
		for unit in units:
			self.collect_unit(unit, result)
		self.logger.debug('Collected {} files ({} entries in total), errors: {}'.format(result.total_count, len(result.files), len(result.errors)))
		return result

	def collect_unit(self, unit: BackupUnit, result: Optional[CollectionResult] = None) -> CollectionResult:
		if result is None:
			result = CollectionResult()

		if not os.path.lexists(unit.path):
			if unit.required:
				result.errors.append(unit.get_missing_error())
			else:
				self.logger.warning('Optional {} {!r} not found at {!r}, skipped'.format(unit.kind.value, unit.name, str(unit.path)))
			return result

		self.collect_path(unit.path, unit.member_root, unit.kind, result, include=unit.include, exclude=unit.exclude)
		return result

	def collect_path(
			self, src_path: Path, rel_base: str, category: UnitKind, result: CollectionResult, *,
			include: Iterable[str] = (), exclude: Iterable[str] = (),
	):
		"""
		Walk the given path, and add the entries into result. Relative paths of the entries are prefixed with rel_base

		Include patterns only apply to files. Exclude patterns apply to files and directories,
		an excluded directory is not walked into
		"""
		include = list(include)
		exclude = list(exclude)
		include_spec = pathspec.GitIgnoreSpec.from_lines(include) if len(include) > 0 else None
		exclude_spec = pathspec.GitIgnoreSpec.from_lines(exclude) if len(exclude) > 0 else None

		try:
			root_st = src_path.stat()
		except OSError as e:
			result.errors.append('failed to stat path {}: {}'.format(src_path, e))
			return

		if not src_path.is_dir():
			result.add(FileEntry(src_path, rel_base, root_st.st_size, False, category))
			return

		def scan(full_path: Path, rel_path: Path):
			try:
				st = full_path.lstat()
			except OSError as e:
				self.logger.warning('Error accessing path {!r}: {}'.format(str(full_path), e))
				result.errors.append('access error: {}'.format(full_path))
				return
			is_dir = full_path.is_dir() and not full_path.is_symlink()

			if len(rel_path.parts) > 0:
				rel_posix = rel_path.as_posix()
				if include_spec is not None and not is_dir and not include_spec.match_file(rel_posix):
					return
				if exclude_spec is not None and exclude_spec.match_file(rel_posix + '/' if is_dir else rel_posix):
					return

			member_name = (Path(rel_base) / rel_path).as_posix()
			result.add(FileEntry(full_path, member_name, 0 if is_dir else st.st_size, is_dir, category))

			if is_dir:
				try:
					children = sorted(os.listdir(full_path))
				except OSError as e:
					self.logger.warning('Error listing directory {!r}: {}'.format(str(full_path), e))
					result.errors.append('access error: {}'.format(full_path))
					return
				for child in children:
					scan(full_path / child, rel_path / child)

		scan(src_path, Path())

	def collect_all(self, src_path: Path, category: UnitKind = UnitKind.custom) -> CollectionResult:
		"""
		Collect everything under the given path, with relative paths rooted at the path itself
		"""
		result = CollectionResult()
		if src_path.is_dir():
			for child in sorted(os.listdir(src_path)):
				self.collect_path(src_path / child, child, category, result)
		else:
			self.collect_path(src_path, src_path.name, category, result)
		return result
