from pathlib import Path
from typing import List, Optional

from lifeboat.action.cleanup_backups_action import CleanupBackupsAction
from lifeboat.action.create_backup_action import CreateBackupAction
from lifeboat.action.delete_backup_action import DeleteBackupAction
from lifeboat.action.extend_retention_action import ExtendRetentionAction
from lifeboat.action.get_backup_action import GetLatestBackupAction, GetBackupAction
from lifeboat.action.get_backup_stats_action import GetBackupStatsAction
from lifeboat.action.list_backup_action import ListBackupAction
from lifeboat.action.list_units_action import ListUnitsAction
from lifeboat.action.mark_checkpoint_action import MarkCheckpointAction
from lifeboat.action.restore_backup_action import RestoreBackupAction
from lifeboat.context import LifeboatContext
from lifeboat.types.backup_result import BackupOptions, BackupResult
from lifeboat.types.backup_unit import UnitInfo
from lifeboat.types.cleanup_result import CleanupResult, BackupStats
from lifeboat.types.index_entry import IndexEntry
from lifeboat.types.progress import ProgressCallback


class BackupEngine:
	"""
	One method per operation, each running a fresh action against the same context
	"""

	def __init__(self, ctx: LifeboatContext):
		self.ctx = ctx

	def run(self, options: Optional[BackupOptions] = None, progress: Optional[ProgressCallback] = None) -> BackupResult:
		return CreateBackupAction(self.ctx, options or BackupOptions(), progress).run()

	def list(self) -> List[IndexEntry]:
		return ListBackupAction(self.ctx).run()

	def get(self, backup_id: str) -> IndexEntry:
		return GetBackupAction(self.ctx, backup_id).run()

	def get_latest(self) -> Optional[IndexEntry]:
		return GetLatestBackupAction(self.ctx).run()

	def restore(self, backup_id: str, target_path: Path, progress: Optional[ProgressCallback] = None) -> IndexEntry:
		return RestoreBackupAction(self.ctx, backup_id, target_path, progress).run()

	def mark_checkpoint(self, backup_id: str, note: str = '') -> IndexEntry:
		return MarkCheckpointAction(self.ctx, backup_id, note).run()

	def cleanup(self, dry_run: bool = False) -> CleanupResult:
		return CleanupBackupsAction(self.ctx, dry_run).run()

	def force_delete(self, backup_id: str) -> IndexEntry:
		return DeleteBackupAction(self.ctx, backup_id).run()

	def extend_retention(self, backup_id: str, days: int) -> IndexEntry:
		return ExtendRetentionAction(self.ctx, backup_id, days).run()

	def get_stats(self) -> BackupStats:
		return GetBackupStatsAction(self.ctx).run()

	def get_available_units(self) -> List[UnitInfo]:
		return ListUnitsAction(self.ctx).run()
