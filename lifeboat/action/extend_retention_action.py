import dataclasses
import datetime

from lifeboat.action import Action
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import BackupNotFound, CheckpointRetentionError
from lifeboat.types.index_entry import IndexEntry
from lifeboat.utils import conversion_utils


class ExtendRetentionAction(Action[IndexEntry]):
	"""
	Push the delete_after date of a regular backup further by the given days.
	A backup without a valid delete_after date is extended from today
	"""

	def __init__(self, ctx: LifeboatContext, backup_id: str, days: int):
		super().__init__(ctx)
		self.backup_id = backup_id
		self.days = days

	def run(self) -> IndexEntry:
		index = self._load_index()
		entry = index.get_by_id(self.backup_id)
		if entry is None:
			raise BackupNotFound(self.backup_id)
		if entry.checkpoint:
			raise CheckpointRetentionError(entry.id)

		base_date = entry.get_delete_after_date()
		if base_date is None:
			base_date = conversion_utils.now().date()
		new_entry = dataclasses.replace(entry, delete_after=conversion_utils.date_to_delete_after(base_date + datetime.timedelta(days=self.days)))
		index.replace_entry(new_entry)
		self._save_index(index)

		self.logger.info('Extended retention of backup {} by {} days: {!r} -> {!r}'.format(entry.id, self.days, entry.delete_after, new_entry.delete_after))
		return new_entry
