from pathlib import Path
from typing import List, Optional, Tuple

from lifeboat.action import Action
from lifeboat.action.get_backup_action import GetBackupAction
from lifeboat.context import LifeboatContext
from lifeboat.exceptions import NoArchiveFound
from lifeboat.types.archive_format import ArchiveFormat
from lifeboat.types.index_entry import IndexEntry
from lifeboat.types.progress import ProgressCallback, ProgressPhase, noop_progress


class RestoreBackupAction(Action[IndexEntry]):
	"""
	Extract every archive of a backup into the target directory

	Any failure aborts the restore. Files already extracted into the target are left there
	"""

	def __init__(self, ctx: LifeboatContext, backup_id: str, target_path: Path, progress: Optional[ProgressCallback] = None):
		"""
		:param backup_id: a backup id, or "latest" for the newest backup
		"""
		super().__init__(ctx)
		self.backup_id = backup_id
		self.target_path = Path(target_path)
		self.__progress = progress or noop_progress

	@classmethod
	def scan_archives(cls, backup_dir: Path) -> List[Tuple[Path, ArchiveFormat]]:
		archives = []
		try:
			children = sorted(backup_dir.iterdir())
		except OSError:
			return archives
		for child in children:
			if (archive_format := ArchiveFormat.from_file_name(child.name)) is not None and child.is_file():
				archives.append((child, archive_format))
		return archives

	def run(self) -> IndexEntry:
		"""
		:raise NoBackupFound: "latest" is requested, but there's no backup at all
		:raise BackupNotFound: no backup with the given id
		:raise NoArchiveFound: the backup directory contains no archive
		:raise ExtractError: an archive failed to extract
		"""
		entry = GetBackupAction(self.ctx, self.backup_id).run()
		backup_dir = self._get_backup_dir(entry)
		self.logger.info('Restoring backup {} from {} to {}'.format(entry.id, backup_dir, self.target_path))

		self.target_path.mkdir(parents=True, exist_ok=True)
		archives = self.scan_archives(backup_dir)
		if len(archives) == 0:
			raise NoArchiveFound(backup_dir)

		for i, (archive_path, archive_format) in enumerate(archives):
			self.__progress(ProgressPhase.extract, i + 1, len(archives), 'Extracting {}...'.format(archive_path.name))
			backend = self.ctx.get_backend_for_format(archive_format)
			backend.extract(archive_path, self.target_path)

		self.logger.info('Restored backup {} to {}, {} archives extracted'.format(entry.id, self.target_path, len(archives)))
		return entry
