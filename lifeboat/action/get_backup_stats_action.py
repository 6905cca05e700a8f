from lifeboat.action import Action
from lifeboat.types.cleanup_result import BackupStats
from lifeboat.types.units import parse_size
from lifeboat.utils import conversion_utils


class GetBackupStatsAction(Action[BackupStats]):
	def run(self) -> BackupStats:
		index = self._load_index()
		backups = index.get_sorted()

		total_size = 0
		for entry in backups:
			try:
				total_size += parse_size(entry.size)
			except ValueError:
				self.logger.debug('Bad size {!r} of backup {}, ignored'.format(entry.size, entry.id))

		checkpoint_count = len([entry for entry in backups if entry.checkpoint])
		return BackupStats(
			total_backups=len(backups),
			checkpoint_backups=checkpoint_count,
			regular_backups=len(backups) - checkpoint_count,
			expired_backups=len(index.get_expired(conversion_utils.now())),
			total_size=total_size,
			oldest_backup=backups[-1] if len(backups) > 0 else None,
			newest_backup=backups[0] if len(backups) > 0 else None,
		)
