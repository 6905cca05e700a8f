from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from lifeboat.config.config import ValidationResult


class LifeboatError(Exception):
	pass


class BackupNotFound(LifeboatError):
	def __init__(self, backup_id: str):
		super().__init__('backup not found: {}'.format(backup_id))
		self.backup_id = backup_id


class NoBackupFound(LifeboatError):
	def __init__(self):
		super().__init__('no backups found')


class BackendUnavailable(LifeboatError):
	def __init__(self, backend_name: str):
		super().__init__('compression backend {} is not available'.format(backend_name))
		self.backend_name = backend_name


class BackupDirectoryError(LifeboatError):
	def __init__(self, path: Path, reason: Exception):
		super().__init__('failed to create backup directory {}: {}'.format(path, reason))
		self.path = path


class IndexLoadError(LifeboatError):
	def __init__(self, path: Path, reason: Exception):
		super().__init__('failed to load index {}: {}'.format(path, reason))
		self.path = path


class UnsupportedArchiveFormat(LifeboatError):
	def __init__(self, path: Path):
		super().__init__('unsupported archive format: {}'.format(path))
		self.path = path


class NoArchiveFound(LifeboatError):
	def __init__(self, path: Path):
		super().__init__('no archive found in {}'.format(path))
		self.path = path


class ExtractError(LifeboatError):
	def __init__(self, path: Path, message: str):
		super().__init__('failed to extract {}: {}'.format(path, message))
		self.path = path


class CheckpointRetentionError(LifeboatError):
	def __init__(self, backup_id: str):
		super().__init__('checkpoint backup {} does not have an expiration date'.format(backup_id))
		self.backup_id = backup_id


class ConfigValidationError(LifeboatError):
	def __init__(self, result: 'ValidationResult'):
		super().__init__('invalid config: {}'.format('; '.join(map(str, result.errors))))
		self.result = result


class ArchiverProcessError(LifeboatError):
	def __init__(self, args: list, return_code: int, output: str):
		super().__init__('archiver exited with code {}: {}'.format(return_code, output.strip()))
		self.args_ = args
		self.return_code = return_code
		self.output = output
