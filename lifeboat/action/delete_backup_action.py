from lifeboat import constants
from lifeboat.action import Action
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import BackupNotFound
from lifeboat.types.index_entry import IndexEntry
from lifeboat.utils import file_utils


class DeleteBackupAction(Action[IndexEntry]):
	"""
	Delete a backup regardless of its retention, checkpoints included
	"""

	def __init__(self, ctx: LifeboatContext, backup_id: str):
		super().__init__(ctx)
		self.backup_id = backup_id

	def run(self) -> IndexEntry:
		"""
		:raise BackupNotFound: no backup with the given id
		:return: the deleted index entry
		"""
		index = self._load_index()
		entry = index.get_by_id(self.backup_id)
		if entry is None:
			raise BackupNotFound(self.backup_id)

		backup_dir = self._get_backup_dir(entry)
		self.logger.info('Deleting backup {} at {}'.format(entry.id, backup_dir))
		file_utils.rm_rf(backup_dir, missing_ok=True)
		index.remove_entry(entry.id)
		self._save_index(index)
		file_utils.remove_empty_dirs(self.config.backup_root, skip_names={constants.LOGS_DIR_NAME})

		self.logger.info('Deleted backup {}, checkpoint {}'.format(entry.id, entry.checkpoint))
		return entry
