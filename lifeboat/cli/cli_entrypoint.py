import argparse
from pathlib import Path
from typing import Optional

from lifeboat.cli.return_codes import ErrorReturnCodes
from lifeboat.config.config import Config
from lifeboat.context import LifeboatContext
from lifeboat.engine import BackupEngine
from lifeboat.exceptions import BackupNotFound, NoBackupFound, BackendUnavailable, NoArchiveFound, UnsupportedArchiveFormat, ExtractError, LifeboatError, ConfigValidationError
from lifeboat.logger import get as get_logger
from lifeboat.types.backup_result import BackupOptions
from lifeboat.types.index_entry import IndexEntry
from lifeboat.types.progress import ProgressPhase
from lifeboat.types.units import format_size
from lifeboat.utils import log_utils, conversion_utils

__all__ = ['cli_entry']

DEFAULT_CONFIG_FILE = 'lifeboat.yaml'


def __prepare_logger():
	logger = get_logger()
	assert len(logger.handlers) == 1
	logger.handlers[0].setFormatter(log_utils.LOG_FORMATTER_NO_FUNC)


__prepare_logger()
logger = get_logger()


def print_progress(phase: ProgressPhase, current: int, total: int, message: str):
	if phase == ProgressPhase.compress:
		logger.debug('[{}] {}/{} {}'.format(phase.value, current, total, message))
	else:
		logger.info('[{}] {}'.format(phase.value, message))


def format_entry(entry: IndexEntry) -> str:
	values = {
		'id': entry.id,
		'date': repr(conversion_utils.datetime_to_str(entry.date)),
		'size': repr(entry.size),
		'delete_after': repr(entry.delete_after),
		'checkpoint': entry.checkpoint,
		'note': repr(entry.note),
	}
	return ' '.join([f'{k}={v}' for k, v in values.items()])


class CliHandler:
	def __init__(self, args: argparse.Namespace):
		self.args = args
		self.config: Optional[Config] = None

	def create_engine(self, *, validate: bool = False) -> BackupEngine:
		config_path = Path(self.args.config)
		try:
			self.config = Config.load(config_path)
		except (OSError, ValueError) as e:
			logger.error('Failed to load config {!r}: {}'.format(config_path.as_posix(), e))
			ErrorReturnCodes.invalid_config.sys_exit()

		if validate:
			result = self.config.validate()
			for warning in result.warnings:
				logger.warning('Config warning: {}'.format(warning))
			if not result.valid:
				raise ConfigValidationError(result)

		log_utils.attach_file_handler(logger, self.config.logging)
		return BackupEngine(LifeboatContext(self.config, logger=logger))

	def cmd_backup(self):
		engine = self.create_engine(validate=True)
		options = BackupOptions(
			note=self.args.note,
			checkpoint=self.args.checkpoint,
			dry_run=self.args.dry_run,
			selected_webapps=self.args.webapp or [],
			selected_custom=self.args.custom or [],
		)
		result = engine.run(options, print_progress)
		logger.info('Backup {} {}, units: {}'.format(result.id, 'succeeded' if result.success else 'finished with errors', ', '.join(result.units)))
		logger.info('Path: {}'.format(result.path))
		if not options.dry_run:
			logger.info('Files: {}, size: {} -> {}'.format(result.files_processed, format_size(result.original_size), format_size(result.compressed_size)))
		for error in result.errors:
			logger.warning('  {}'.format(error))
		if not result.success:
			ErrorReturnCodes.action_failed.sys_exit()

	def cmd_list(self):
		backups = self.create_engine().list()
		logger.info('Backup amount: {}'.format(len(backups)))
		for entry in backups:
			logger.info('%s', format_entry(entry))

	def cmd_restore(self):
		entry = self.create_engine().restore(self.args.backup_id, Path(self.args.target), print_progress)
		logger.info('Restored backup {} to {}'.format(entry.id, self.args.target))

	def cmd_checkpoint(self):
		entry = self.create_engine().mark_checkpoint(self.args.backup_id, self.args.note)
		logger.info('%s', format_entry(entry))

	def cmd_cleanup(self):
		result = self.create_engine().cleanup(self.args.dry_run)
		logger.info('{} {} backups, {} freed, {} kept'.format(
			'Would delete' if self.args.dry_run else 'Deleted',
			result.backups_deleted, format_size(result.space_freed), result.backups_kept,
		))
		for backup_id in result.deleted_ids:
			logger.info('  {}'.format(backup_id))
		for error in result.errors:
			logger.warning('  {}'.format(error))
		if len(result.errors) > 0:
			ErrorReturnCodes.action_failed.sys_exit()

	def cmd_delete(self):
		entry = self.create_engine().force_delete(self.args.backup_id)
		logger.info('Deleted backup {}'.format(entry.id))

	def cmd_extend(self):
		entry = self.create_engine().extend_retention(self.args.backup_id, self.args.days)
		logger.info('Backup {} now expires after {}'.format(entry.id, entry.delete_after))

	def cmd_stats(self):
		stats = self.create_engine().get_stats()
		logger.info('Total backups: {}'.format(stats.total_backups))
		logger.info('Checkpoints: {}'.format(stats.checkpoint_backups))
		logger.info('Regular backups: {}'.format(stats.regular_backups))
		logger.info('Expired backups: {}'.format(stats.expired_backups))
		logger.info('Total size: {}'.format(format_size(stats.total_size)))
		if stats.oldest_backup is not None:
			logger.info('Oldest: {}'.format(format_entry(stats.oldest_backup)))
		if stats.newest_backup is not None:
			logger.info('Newest: {}'.format(format_entry(stats.newest_backup)))

	def cmd_units(self):
		for unit in self.create_engine().get_available_units():
			logger.info('{} {!r}: path={!r} size={} exists={} required={}{}'.format(
				unit.kind.value, unit.name, str(unit.path), format_size(unit.size), unit.exists, unit.required,
				' (war)' if unit.is_war else '',
			))

	def cmd_validate(self):
		self.create_engine(validate=True)
		logger.info('Config {!r} is valid'.format(self.args.config))

	@classmethod
	def entrypoint(cls):
		parser = argparse.ArgumentParser(description='Lifeboat backup CLI', formatter_class=argparse.ArgumentDefaultsHelpFormatter)
		parser.add_argument('-c', '--config', default=DEFAULT_CONFIG_FILE, help='Path to the yaml config file')
		subparsers = parser.add_subparsers(title='Command', help='Available commands', dest='command')

		desc = 'Create a backup'
		parser_backup = subparsers.add_parser('backup', help=desc, description=desc)
		parser_backup.add_argument('-n', '--note', default='', help='Note of the backup')
		parser_backup.add_argument('--checkpoint', action='store_true', help='Create a checkpoint backup, which never expires')
		parser_backup.add_argument('--dry-run', action='store_true', help='Only show what would be backed up')
		parser_backup.add_argument('--webapp', action='append', help='Webapp to backup, can be given multiple times. Default: the configured ones, or all of them')
		parser_backup.add_argument('--custom', action='append', help='Title of the custom folder to backup, can be given multiple times. Default: all')

		desc = 'List backups, newest first'
		subparsers.add_parser('list', help=desc, description=desc)

		desc = 'Restore a backup into the given directory'
		parser_restore = subparsers.add_parser('restore', help=desc, description=desc)
		parser_restore.add_argument('backup_id', help='The ID of the backup to restore, or "latest"')
		parser_restore.add_argument('target', help='The directory to restore into')

		desc = 'Mark a backup as checkpoint, so it never expires'
		parser_checkpoint = subparsers.add_parser('checkpoint', help=desc, description=desc)
		parser_checkpoint.add_argument('backup_id', help='The ID of the backup')
		parser_checkpoint.add_argument('-n', '--note', default='', help='New note of the backup')

		desc = 'Delete expired backups'
		parser_cleanup = subparsers.add_parser('cleanup', help=desc, description=desc)
		parser_cleanup.add_argument('--dry-run', action='store_true', help='Only show what would be deleted')

		desc = 'Delete a backup, even if it is a checkpoint'
		parser_delete = subparsers.add_parser('delete', help=desc, description=desc)
		parser_delete.add_argument('backup_id', help='The ID of the backup to delete')

		desc = 'Extend the retention of a backup'
		parser_extend = subparsers.add_parser('extend', help=desc, description=desc)
		parser_extend.add_argument('backup_id', help='The ID of the backup')
		parser_extend.add_argument('days', type=int, help='Days to extend')

		desc = 'Show backup statistics'
		subparsers.add_parser('stats', help=desc, description=desc)

		desc = 'List webapps and custom folders that can be backed up'
		subparsers.add_parser('units', help=desc, description=desc)

		desc = 'Validate the config file'
		subparsers.add_parser('validate', help=desc, description=desc)

		args = parser.parse_args()
		if args.command is None:
			parser.print_help()
			return

		handler = cls(args)
		func = getattr(handler, 'cmd_' + args.command, None)
		if func is None:
			logger.error('Unknown command {!r}'.format(args.command))
			ErrorReturnCodes.invalid_argument.sys_exit()

		try:
			func()
		except ConfigValidationError as e:
			for error in e.result.errors:
				logger.error('Config error: {}'.format(error))
			ErrorReturnCodes.invalid_config.sys_exit()
		except (BackupNotFound, NoBackupFound) as e:
			logger.error('{}'.format(e))
			ErrorReturnCodes.backup_not_found.sys_exit()
		except BackendUnavailable as e:
			logger.error('{}'.format(e))
			ErrorReturnCodes.backend_unavailable.sys_exit()
		except (NoArchiveFound, UnsupportedArchiveFormat, ExtractError) as e:
			logger.error('Restore failed: {}'.format(e))
			ErrorReturnCodes.restore_failed.sys_exit()
		except LifeboatError as e:
			logger.error('{}'.format(e))
			ErrorReturnCodes.action_failed.sys_exit()


def cli_entry():
	CliHandler.entrypoint()
