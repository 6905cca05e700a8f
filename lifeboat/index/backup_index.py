"""
The durable registry of all backups under a backup root

The whole index lives in a single json file, which is loaded fresh at the start of an operation,
and rewritten in full, sorted newest first, on every save
"""
import dataclasses
import datetime
import json
import os
from pathlib import Path
from typing import List, Optional, Iterator

from lifeboat.types.index_entry import IndexEntry


class BackupIndex:
	def __init__(self, backups: Optional[List[IndexEntry]] = None):
		self.backups: List[IndexEntry] = list(backups) if backups is not None else []

	def __len__(self) -> int:
		return len(self.backups)

	def __iter__(self) -> Iterator[IndexEntry]:
		return iter(self.backups)

	# ==================== Persistence ====================

	@classmethod
	def load(cls, path: Path) -> 'BackupIndex':
		"""
		A missing index file is treated as an empty index

		:raise OSError: if the file cannot be read
		:raise ValueError: if the file content is not a valid index
		"""
		if not path.exists():
			return BackupIndex()
		with open(path, 'r', encoding='utf8') as f:
			data = json.load(f)
		if not isinstance(data, dict) or not isinstance(data.get('backups', []), list):
			raise ValueError('bad index file {}'.format(path))
		try:
			backups = [IndexEntry.from_dict(item) for item in data.get('backups') or []]
		except (KeyError, TypeError) as e:
			raise ValueError('bad index entry in {}: {}'.format(path, e)) from e
		return BackupIndex(backups)

	def save(self, path: Path):
		self.sort()
		data = {'backups': [entry.to_dict() for entry in self.backups]}
		path.parent.mkdir(parents=True, exist_ok=True)
		tmp_path = path.with_name(path.name + '.tmp')
		with open(tmp_path, 'w', encoding='utf8') as f:
			json.dump(data, f, indent=2, ensure_ascii=False)
		os.replace(tmp_path, path)

	# ==================== Queries ====================

	def sort(self):
		self.backups.sort(key=lambda e: e.date, reverse=True)

	def get_sorted(self) -> List[IndexEntry]:
		return sorted(self.backups, key=lambda e: e.date, reverse=True)

	def get_latest(self) -> Optional[IndexEntry]:
		if len(self.backups) == 0:
			return None
		return max(self.backups, key=lambda e: e.date)

	def get_by_id(self, backup_id: str) -> Optional[IndexEntry]:
		for entry in self.backups:
			if entry.id == backup_id:
				return entry
		return None

	def contains(self, backup_id: str) -> bool:
		return self.get_by_id(backup_id) is not None

	def get_expired(self, now: datetime.datetime) -> List[IndexEntry]:
		"""
		Non-checkpoint backups whose delete_after date has passed, in index order
		"""
		return [entry for entry in self.backups if entry.is_expired(now)]

	# ==================== Mutations ====================

	def add_entry(self, entry: IndexEntry):
		if self.contains(entry.id):
			raise ValueError('duplicated backup id {}'.format(entry.id))
		self.backups.append(entry)

	def replace_entry(self, entry: IndexEntry) -> bool:
		for i, existed in enumerate(self.backups):
			if existed.id == entry.id:
				self.backups[i] = entry
				return True
		return False

	def mark_as_checkpoint(self, backup_id: str, note: str) -> bool:
		"""
		Mark a backup as a checkpoint, so it never expires. A non-empty note replaces the existing one
		"""
		entry = self.get_by_id(backup_id)
		if entry is None:
			return False
		entry = dataclasses.replace(entry, checkpoint=True, delete_after='', note=note if note != '' else entry.note)
		return self.replace_entry(entry)

	def remove_entry(self, backup_id: str) -> bool:
		for i, entry in enumerate(self.backups):
			if entry.id == backup_id:
				self.backups.pop(i)
				return True
		return False
