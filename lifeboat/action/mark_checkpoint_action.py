from lifeboat.action import Action
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import BackupNotFound
from lifeboat.types.index_entry import IndexEntry


class MarkCheckpointAction(Action[IndexEntry]):
	def __init__(self, ctx: LifeboatContext, backup_id: str, note: str = ''):
		"""
		:param note: replaces the current note of the backup, if not empty
		"""
		super().__init__(ctx)
		self.backup_id = backup_id
		self.note = note

	def run(self) -> IndexEntry:
		index = self._load_index()
		if not index.mark_as_checkpoint(self.backup_id, self.note):
			raise BackupNotFound(self.backup_id)
		self._save_index(index)

		entry = index.get_by_id(self.backup_id)
		self.logger.info('Marked backup {} as checkpoint, note {!r}'.format(entry.id, entry.note))
		return entry
