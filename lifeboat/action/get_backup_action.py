from typing import Optional

from lifeboat import constants
from lifeboat.action import Action
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import BackupNotFound, NoBackupFound
from lifeboat.types.index_entry import IndexEntry


class GetBackupAction(Action[IndexEntry]):
	def __init__(self, ctx: LifeboatContext, backup_id: str):
		"""
		:param backup_id: a backup id, or "latest" for the newest backup
		"""
		super().__init__(ctx)
		self.backup_id = backup_id

	def run(self) -> IndexEntry:
		"""
		:raise NoBackupFound: "latest" is requested, but there's no backup at all
		:raise BackupNotFound: no backup with the given id
		"""
		index = self._load_index()
		if self.backup_id == constants.LATEST_BACKUP_ALIAS:
			entry = index.get_latest()
			if entry is None:
				raise NoBackupFound()
			return entry

		entry = index.get_by_id(self.backup_id)
		if entry is None:
			raise BackupNotFound(self.backup_id)
		return entry


class GetLatestBackupAction(Action[Optional[IndexEntry]]):
	def run(self) -> Optional[IndexEntry]:
		return self._load_index().get_latest()
