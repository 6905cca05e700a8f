import datetime
import os
from pathlib import Path
from typing import Optional, List

from lifeboat import constants
from lifeboat.action import Action
from lifeboat.action.helpers.unit_resolver import UnitResolver
from lifeboat.backend import CompressionBackend
from lifeboat.collector import Collector
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import BackendUnavailable, BackupDirectoryError
from lifeboat.types.backup_metadata import BackupMetadata, FileStats
from lifeboat.types.backup_result import BackupOptions, BackupResult
from lifeboat.types.backup_unit import BackupUnit, UnitKind
from lifeboat.types.index_entry import IndexEntry
from lifeboat.types.progress import ProgressCallback, ProgressPhase, noop_progress
from lifeboat.types.units import format_size
from lifeboat.utils import conversion_utils, path_utils
from lifeboat.utils.timer import Timer


class CreateBackupAction(Action[BackupResult]):
	"""
	Backup the selected units, one archive per unit, then write the metadata and commit the backup into the index

	Only a missing backend or a failed destination directory creation aborts the backup.
	Everything else is recorded into the result errors, and the backup goes on with what it has
	"""

	def __init__(self, ctx: LifeboatContext, options: BackupOptions, progress: Optional[ProgressCallback] = None):
		super().__init__(ctx)
		self.options = options
		self.__progress = progress or noop_progress

	def __get_backup_path(self, start: datetime.datetime) -> Path:
		date_folder = start.strftime(constants.DATE_FOLDER_FORMAT)
		if self.options.checkpoint:
			safe_name = path_utils.sanitize_folder_name(self.options.note) or constants.DEFAULT_CHECKPOINT_NAME
			path = self.config.backup_root / '{}_{}'.format(date_folder, safe_name)
		else:
			path = self.config.backup_root / date_folder / start.strftime(constants.TIME_FOLDER_FORMAT)

		# never write into the directory of another backup
		candidate = path
		n = 1
		while candidate.exists():
			n += 1
			candidate = path.with_name('{}_{}'.format(path.name, n))
		return candidate

	def __get_delete_after(self, start: datetime.datetime) -> str:
		retention = self.config.retention
		if self.options.checkpoint or not retention.enabled or retention.days <= 0:
			return ''
		return conversion_utils.date_to_delete_after(start.date() + datetime.timedelta(days=retention.days))

	def __resolve_units(self, result: BackupResult) -> List[BackupUnit]:
		resolver = UnitResolver(self.config, self.logger)
		try:
			webapps = resolver.resolve_webapps(self.options.selected_webapps)
		except OSError as e:
			self.logger.error('Failed to read webapps directory {}: {}'.format(self.config.webapps_path, e))
			result.errors.append('failed to read webapps directory: {}'.format(e))
			webapps = []
		return webapps + resolver.resolve_custom_folders(self.options.selected_custom)

	def __backup_unit(self, backend: CompressionBackend, unit: BackupUnit, backup_path: Path, result: BackupResult, phase: ProgressPhase, current: int, total: int):
		if not os.path.lexists(unit.path):
			if unit.required:
				self.logger.warning('Required {} {!r} not found at {}'.format(unit.kind.value, unit.name, unit.path))
				result.errors.append(unit.get_missing_error())
			else:
				self.logger.info('Optional {} {!r} not found at {}, skipped'.format(unit.kind.value, unit.name, unit.path))
			return

		self.__progress(phase, current, total, 'Backing up {}...'.format(unit.name))
		self.logger.info('Processing {} {!r}, source {}'.format(unit.kind.value, unit.name, unit.path))
		timer = Timer()

		collection = Collector(self.logger).collect_unit(unit)
		result.files_collected += collection.total_count
		result.errors.extend(collection.errors)

		def compress_progress(count: int, name: str):
			self.__progress(ProgressPhase.compress, count, len(collection.files), name)

		archive_path = backup_path / (unit.archive_base_name + backend.get_format().extension)
		try:
			comp_result = backend.compress_unit(unit.path, archive_path, compress_progress, entries=collection.files)
		except Exception as e:
			self.logger.error('Failed to backup {} {!r}: {}'.format(unit.kind.value, unit.name, e))
			result.errors.append('{}: {}'.format(unit.name, e))
			return

		result.files_processed += comp_result.files_processed
		result.original_size += comp_result.original_size
		result.compressed_size += comp_result.compressed_size
		result.errors.extend(comp_result.errors)
		self.logger.info('Backed up {} {!r} to {} in {:.2f}s'.format(unit.kind.value, unit.name, archive_path.name, timer.get_elapsed()))

	def __write_metadata(self, backup_path: Path, result: BackupResult):
		self.__progress(ProgressPhase.metadata, 0, 0, 'Saving metadata...')
		meta = BackupMetadata(
			id=result.id,
			created_at=result.start_time,
			duration_seconds=int(result.duration.total_seconds()),
			files=FileStats(
				count=result.files_processed,
				original_size=format_size(result.original_size),
				compressed_size=format_size(result.compressed_size),
			),
			note=self.options.note,
		)
		try:
			meta.save(backup_path / constants.METADATA_FILE_NAME)
		except OSError as e:
			self.logger.error('Failed to save metadata: {}'.format(e))
			result.errors.append('metadata error: {}'.format(e))

	def __commit_index(self, backup_path: Path, result: BackupResult):
		self.__progress(ProgressPhase.index, 0, 0, 'Updating index...')
		index = self._load_index(fallback_to_empty=True)
		entry = IndexEntry(
			id=result.id,
			date=result.start_time,
			path=backup_path.relative_to(self.config.backup_root).as_posix(),
			size=format_size(result.compressed_size),
			delete_after=self.__get_delete_after(result.start_time),
			checkpoint=self.options.checkpoint,
			note=self.options.note,
		)
		try:
			index.add_entry(entry)
			self._save_index(index)
		except (OSError, ValueError) as e:
			self.logger.error('Failed to save index: {}'.format(e))
			result.errors.append('index error: {}'.format(e))

	def run(self) -> BackupResult:
		start = conversion_utils.now()
		backend = self.ctx.get_backend()
		if not backend.is_available():
			raise BackendUnavailable(backend.NAME)

		existing_ids = [entry.id for entry in self._load_index(fallback_to_empty=True)]
		result = BackupResult(id=self.ctx.id_generator.next_id(start, existing_ids), start_time=start)
		self.logger.info('Starting backup {}, checkpoint {}, dry run {}'.format(result.id, self.options.checkpoint, self.options.dry_run))

		self.__progress(ProgressPhase.init, 0, 0, 'Creating backup directory...')
		backup_path = self.__get_backup_path(start)
		result.path = backup_path

		units = self.__resolve_units(result)
		result.units = [unit.name for unit in units]

		if self.options.dry_run:
			self.logger.info('Dry run, would backup {} units to {}: {}'.format(len(units), backup_path, result.units))
			result.end_time = conversion_utils.now()
			result.success = len(result.errors) == 0
			return result

		try:
			backup_path.mkdir(parents=True, exist_ok=False)
		except OSError as e:
			raise BackupDirectoryError(backup_path, e) from e

		webapps = [unit for unit in units if unit.kind == UnitKind.webapp]
		customs = [unit for unit in units if unit.kind == UnitKind.custom]
		for i, unit in enumerate(webapps):
			self.__backup_unit(backend, unit, backup_path, result, ProgressPhase.copy, i + 1, len(webapps))
		for i, unit in enumerate(customs):
			self.__backup_unit(backend, unit, backup_path, result, ProgressPhase.custom, i + 1, len(customs))

		result.end_time = conversion_utils.now()
		self.__write_metadata(backup_path, result)
		self.__commit_index(backup_path, result)

		result.success = len(result.errors) == 0
		self.logger.info('Backup {} completed in {:.1f}s, path {}, files {}, size {}, errors {}'.format(
			result.id, result.duration.total_seconds(), backup_path, result.files_processed,
			format_size(result.compressed_size), len(result.errors),
		))
		return result
