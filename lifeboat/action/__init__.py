"""
Actions for all kinds of backup operations. Each action loads what it needs fresh, and runs once
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TypeVar, Generic

from lifeboat.config.config import Config
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import IndexLoadError
from lifeboat.index.backup_index import BackupIndex
from lifeboat.types.index_entry import IndexEntry
from lifeboat.utils import file_utils

_T = TypeVar('_T')


class Action(Generic[_T], ABC):
	def __init__(self, ctx: LifeboatContext):
		self.ctx = ctx
		self.logger: logging.Logger = ctx.logger
		self.config: Config = ctx.config

	@abstractmethod
	def run(self) -> _T:
		...

	def _load_index(self, *, fallback_to_empty: bool = False) -> BackupIndex:
		"""
		:raise IndexLoadError: the index exists but cannot be read, and fallback_to_empty is False
		"""
		index_path = self.config.index_path
		try:
			return BackupIndex.load(index_path)
		except (OSError, ValueError) as e:
			if fallback_to_empty:
				self.logger.warning('Failed to load index {}, creating new: {}'.format(index_path, e))
				return BackupIndex()
			raise IndexLoadError(index_path, e) from e

	def _save_index(self, index: BackupIndex):
		index.save(self.config.index_path)

	def _get_backup_dir(self, entry: IndexEntry) -> Path:
		"""
		:raise ValueError: the entry path does not point to a directory inside the backup root
		"""
		path = file_utils.safe_member_path(self.config.backup_root, entry.path)
		if path == self.config.backup_root.resolve():
			raise ValueError('backup {} has no directory of its own: {!r}'.format(entry.id, entry.path))
		return path
