from typing import List

from lifeboat.action import Action
from lifeboat.types.index_entry import IndexEntry


class ListBackupAction(Action[List[IndexEntry]]):
	"""
	All backups in the index, newest first. Read only
	"""

	def run(self) -> List[IndexEntry]:
		return self._load_index().get_sorted()
