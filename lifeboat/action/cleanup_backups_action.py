import dataclasses
import datetime
import logging
from typing import List, Optional

from lifeboat import constants
from lifeboat.action import Action
from lifeboat.config.retention_config import RetentionConfig
from lifeboat.context import LifeboatContext
from lifeboat.index.backup_index import BackupIndex
from lifeboat.types.cleanup_result import CleanupResult
from lifeboat.types.index_entry import IndexEntry
from lifeboat.types.units import format_size
from lifeboat.utils import conversion_utils, file_utils, log_utils


@dataclasses.dataclass(frozen=True)
class CleanupMark:
	keep: bool
	reason: str

	@classmethod
	def create_keep(cls, reason: str) -> 'CleanupMark':
		return CleanupMark(True, reason)

	@classmethod
	def create_checkpoint(cls) -> 'CleanupMark':
		return CleanupMark(True, 'checkpoint')

	@classmethod
	def create_remove(cls, reason: str) -> 'CleanupMark':
		return CleanupMark(False, reason)


@dataclasses.dataclass(frozen=True)
class CleanupPlanItem:
	backup: IndexEntry
	mark: CleanupMark


class CleanupPlan(List[CleanupPlanItem]):
	def get_to_delete(self) -> List[IndexEntry]:
		return [item.backup for item in self if not item.mark.keep]


class CleanupBackupsAction(Action[CleanupResult]):
	"""
	Delete expired backups, while keeping at least min_keep regular backups around. Checkpoints are never touched
	"""

	def __init__(self, ctx: LifeboatContext, dry_run: bool = False, *, now: Optional[datetime.datetime] = None):
		super().__init__(ctx)
		self.dry_run = dry_run
		self.now = now

	@classmethod
	def calc_cleanup_plan(cls, backups: List[IndexEntry], retention: RetentionConfig, now: datetime.datetime) -> CleanupPlan:
		"""
		Expired candidates are handled from the oldest one. A candidate is removed only if
		the remaining regular backups are still more than min_keep afterward
		"""
		# walk oldest first, not in the newest-first index order, so the floor keeps the newest expired ones
		backups = sorted(backups, key=lambda b: b.date)  # old -> new
		regular_count = len([b for b in backups if not b.checkpoint])
		remove_count = 0

		plan = CleanupPlan()
		for backup in backups:
			if backup.checkpoint:
				mark = CleanupMark.create_checkpoint()
			elif not backup.is_expired(now):
				mark = CleanupMark.create_keep('not expired')
			elif regular_count - remove_count > retention.min_keep:
				mark = CleanupMark.create_remove('expired after {}'.format(backup.delete_after))
				remove_count += 1
			else:
				mark = CleanupMark.create_keep('expired, but min_keep {} reached'.format(retention.min_keep))
			plan.append(CleanupPlanItem(backup, mark))
		return plan

	def __delete_backups(self, index: BackupIndex, plan: CleanupPlan, result: CleanupResult, cleanup_logger: logging.Logger):
		for item in plan:
			cleanup_logger.info('{} {} ({}): {}'.format('Keep' if item.mark.keep else 'Delete', item.backup.id, item.backup.path, item.mark.reason))

		for entry in plan.get_to_delete():
			try:
				backup_dir = self._get_backup_dir(entry)
				size = file_utils.get_dir_size(backup_dir) if backup_dir.exists() else 0
				if not self.dry_run:
					file_utils.rm_rf(backup_dir, missing_ok=True)
					index.remove_entry(entry.id)
			except (OSError, ValueError) as e:
				cleanup_logger.error('Failed to delete backup {}: {}'.format(entry.id, e))
				result.errors.append('failed to delete {}: {}'.format(entry.id, e))
				continue

			cleanup_logger.info('{} backup {}, size {}'.format('Would delete' if self.dry_run else 'Deleted', entry.id, format_size(size)))
			result.backups_deleted += 1
			result.space_freed += size
			result.deleted_ids.append(entry.id)

		if self.dry_run:
			return

		for path in file_utils.remove_empty_dirs(self.config.backup_root, skip_names={constants.LOGS_DIR_NAME}):
			cleanup_logger.info('Removed empty directory {}'.format(path))
		if result.backups_deleted > 0:
			try:
				self._save_index(index)
			except OSError as e:
				cleanup_logger.error('Failed to save index: {}'.format(e))
				result.errors.append('failed to update index: {}'.format(e))

	def run(self) -> CleanupResult:
		result = CleanupResult()
		retention = self.config.retention
		if not retention.enabled:
			self.logger.info('Retention is disabled, nothing to clean up')
			return result

		index = self._load_index()
		total_count = len(index)
		now = self.now or conversion_utils.now()
		plan = self.calc_cleanup_plan(index.backups, retention, now)
		self.logger.info('Cleanup started, dry run {}, {} backups in total, {} to delete'.format(self.dry_run, total_count, len(plan.get_to_delete())))

		if self.dry_run:
			self.__delete_backups(index, plan, result, self.logger)
		else:
			with log_utils.open_file_logger('cleanup', self.config.logs_path) as cleanup_logger:
				cleanup_logger.info('Cleanup started, {} backups in total'.format(total_count))
				self.__delete_backups(index, plan, result, cleanup_logger)
				cleanup_logger.info('Cleanup done, deleted {}, freed {}, errors {}'.format(result.backups_deleted, format_size(result.space_freed), len(result.errors)))

		result.backups_kept = total_count - result.backups_deleted
		self.logger.info('Cleanup done, deleted {} backups, freed {}, kept {}'.format(result.backups_deleted, format_size(result.space_freed), result.backups_kept))
		return result
