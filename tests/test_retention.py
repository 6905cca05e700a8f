import datetime
import itertools
import tempfile
import unittest
from pathlib import Path
from typing import List
from unittest import mock

from lifeboat import logger
from lifeboat.action.cleanup_backups_action import CleanupBackupsAction
from lifeboat.backend.zip_backend import ZipBackend
from lifeboat.config.config import Config
from lifeboat.config.retention_config import RetentionConfig
from lifeboat.context import LifeboatContext
from lifeboat.engine import BackupEngine
from lifeboat.exceptions import BackupNotFound, CheckpointRetentionError, IndexLoadError
from lifeboat.index.backup_index import BackupIndex
from lifeboat.types.index_entry import IndexEntry
from lifeboat.utils import conversion_utils, file_utils

_FILE_SIZE = 1000


class RetentionTestCase(unittest.TestCase):
	def setUp(self):
		temp_dir = tempfile.TemporaryDirectory()
		self.addCleanup(temp_dir.cleanup)
		self.backup_root = Path(temp_dir.name) / 'backups'
		self.backup_root.mkdir()
		self.index_path = self.backup_root / 'index.json'
		self.now = conversion_utils.now()

	def create_engine(self, **retention) -> BackupEngine:
		config = Config.deserialize({
			'backup_path': str(self.backup_root),
			'retention': retention,
			'logging': {'path': ''},
		})
		return BackupEngine(LifeboatContext(config, logger=logger.get(), backend=ZipBackend(config.compression, logger.get())))

	def add_backups(self, prefix: str, count: int, age_days: int, *, retention_days: int = 30, checkpoint: bool = False, note: str = '') -> List[IndexEntry]:
		index = BackupIndex.load(self.index_path)
		entries = []
		for i in range(count):
			date = self.now - datetime.timedelta(days=age_days, minutes=i)
			backup_id = '{}-{}'.format(prefix, i)
			path = '{}/{}'.format(date.strftime('%Y%m%d'), backup_id)
			backup_dir = self.backup_root / path
			backup_dir.mkdir(parents=True)
			(backup_dir / 'shop.zip').write_bytes(b'\x00' * _FILE_SIZE)
			entry = IndexEntry(
				id=backup_id,
				date=date,
				path=path,
				size='1000 B',
				delete_after='' if checkpoint else conversion_utils.date_to_delete_after(date.date() + datetime.timedelta(days=retention_days)),
				checkpoint=checkpoint,
				note=note,
			)
			index.add_entry(entry)
			entries.append(entry)
		index.save(self.index_path)
		return entries

	def test_0_dry_run_respects_min_keep(self):
		entries = self.add_backups('old', 10, 40)
		raw = self.index_path.read_bytes()

		result = self.create_engine(days=30, min_keep=5).cleanup(dry_run=True)
		self.assertEqual(5, result.backups_deleted)
		self.assertEqual(5 * _FILE_SIZE, result.space_freed)
		self.assertEqual(5, result.backups_kept)
		self.assertEqual([], result.errors)
		# oldest first
		self.assertEqual([e.id for e in entries[-5:]][::-1], result.deleted_ids)

		self.assertEqual(raw, self.index_path.read_bytes())
		for entry in entries:
			self.assertTrue((self.backup_root / entry.path).is_dir())
		self.assertFalse((self.backup_root / 'logs').exists())

	def test_1_cleanup_deletes(self):
		old = self.add_backups('old', 10, 40)
		fresh = self.add_backups('fresh', 2, 1)

		result = self.create_engine(days=30, min_keep=5).cleanup()
		# 12 regular backups, 10 expired, min_keep 5 -> 7 can go
		self.assertEqual(7, result.backups_deleted)
		self.assertEqual(5, result.backups_kept)
		self.assertEqual([], result.errors)

		index = BackupIndex.load(self.index_path)
		self.assertEqual(5, len(index))
		for entry in fresh:
			self.assertTrue(index.contains(entry.id))
		for entry in old[-7:]:
			self.assertFalse(index.contains(entry.id))
			self.assertFalse((self.backup_root / entry.path).exists())
		for entry in old[:3]:
			self.assertTrue((self.backup_root / entry.path).is_dir())

		self.assertTrue((self.backup_root / 'logs' / 'cleanup.log').is_file())

	def test_2_empty_date_dirs_are_removed(self):
		old = self.add_backups('old', 1, 40)
		self.add_backups('fresh', 1, 0)
		date_dir = (self.backup_root / old[0].path).parent

		result = self.create_engine(days=30, min_keep=0).cleanup()
		self.assertEqual(1, result.backups_deleted)
		self.assertFalse(date_dir.exists())
		self.assertTrue((self.backup_root / 'logs').is_dir())

	def test_3_checkpoint_survives(self):
		checkpoint = self.add_backups('cp', 1, 100, checkpoint=True, note='release')[0]
		regular = self.add_backups('old', 3, 40)

		result = self.create_engine(days=30, min_keep=0).cleanup()
		self.assertEqual(3, result.backups_deleted)
		self.assertNotIn(checkpoint.id, result.deleted_ids)
		self.assertEqual(sorted(e.id for e in regular), sorted(result.deleted_ids))
		self.assertEqual(1, result.backups_kept)

		index = BackupIndex.load(self.index_path)
		self.assertEqual([checkpoint.id], [e.id for e in index])
		self.assertEqual('release', index.get_by_id(checkpoint.id).note)
		self.assertTrue((self.backup_root / checkpoint.path).is_dir())

	def test_4_min_keep_floor(self):
		now = self.now
		for n_expired, n_fresh, n_checkpoint, min_keep in itertools.product([0, 1, 3, 8], [0, 2], [0, 1], [0, 1, 2, 5, 20]):
			backups = []
			for i in range(n_expired):
				date = now - datetime.timedelta(days=50, hours=i)
				backups.append(IndexEntry('e{}'.format(i), date, 'e{}'.format(i), '1 B', delete_after=conversion_utils.date_to_delete_after(date.date() + datetime.timedelta(days=30))))
			for i in range(n_fresh):
				date = now - datetime.timedelta(hours=i)
				backups.append(IndexEntry('f{}'.format(i), date, 'f{}'.format(i), '1 B', delete_after=conversion_utils.date_to_delete_after(date.date() + datetime.timedelta(days=30))))
			for i in range(n_checkpoint):
				backups.append(IndexEntry('c{}'.format(i), now - datetime.timedelta(days=500), 'c{}'.format(i), '1 B', checkpoint=True))

			retention = RetentionConfig.deserialize({'days': 30, 'min_keep': min_keep})
			plan = CleanupBackupsAction.calc_cleanup_plan(backups, retention, now)
			to_delete = plan.get_to_delete()
			n_regular = n_expired + n_fresh
			msg = 'expired={} fresh={} checkpoint={} min_keep={}'.format(n_expired, n_fresh, n_checkpoint, min_keep)

			self.assertEqual(len(backups), len(plan), msg)
			self.assertGreaterEqual(n_regular - len(to_delete), min(min_keep, n_regular), msg)
			self.assertEqual(min(n_expired, max(0, n_regular - min_keep)), len(to_delete), msg)
			self.assertTrue(all(e.id.startswith('e') for e in to_delete), msg)
			# the oldest expired ones go first
			self.assertEqual(sorted(to_delete, key=lambda e: e.date), to_delete, msg)
			if len(to_delete) > 0:
				self.assertEqual('e{}'.format(n_expired - 1), to_delete[0].id, msg)

	def test_5_retention_disabled(self):
		self.index_path.write_text('{broken', encoding='utf8')
		result = self.create_engine(enabled=False).cleanup()
		self.assertEqual(0, result.backups_deleted)
		self.assertEqual(0, result.backups_kept)
		self.assertEqual([], result.errors)

	def test_6_unreadable_index(self):
		self.index_path.write_text('{broken', encoding='utf8')
		with self.assertRaises(IndexLoadError):
			self.create_engine().cleanup()

	def test_7_deletion_failure_continues(self):
		old = self.add_backups('old', 3, 40)
		failing_dir = self.backup_root / old[1].path
		rm_rf = file_utils.rm_rf

		def fake_rm_rf(path: Path, **kwargs):
			if path.name == failing_dir.name:
				raise PermissionError(13, 'Permission denied', str(path))
			rm_rf(path, **kwargs)

		with mock.patch.object(file_utils, 'rm_rf', side_effect=fake_rm_rf):
			result = self.create_engine(days=30, min_keep=0).cleanup()

		self.assertEqual(2, result.backups_deleted)
		self.assertEqual(1, len(result.errors))
		self.assertTrue(result.errors[0].startswith('failed to delete {}: '.format(old[1].id)))
		index = BackupIndex.load(self.index_path)
		self.assertEqual([old[1].id], [e.id for e in index])
		self.assertTrue(failing_dir.is_dir())

	def test_8_force_delete(self):
		checkpoint = self.add_backups('cp', 1, 1, checkpoint=True)[0]
		engine = self.create_engine()
		deleted = engine.force_delete(checkpoint.id)
		self.assertEqual(checkpoint.id, deleted.id)
		self.assertEqual(0, len(BackupIndex.load(self.index_path)))
		self.assertFalse((self.backup_root / checkpoint.path).exists())
		self.assertFalse((self.backup_root / checkpoint.path).parent.exists())

		with self.assertRaises(BackupNotFound):
			engine.force_delete(checkpoint.id)

	def test_9_extend_retention(self):
		regular = self.add_backups('old', 1, 40)[0]
		checkpoint = self.add_backups('cp', 1, 1, checkpoint=True)[0]
		engine = self.create_engine()

		entry = engine.extend_retention(regular.id, 10)
		expected = regular.get_delete_after_date() + datetime.timedelta(days=10)
		self.assertEqual(conversion_utils.date_to_delete_after(expected), entry.delete_after)
		self.assertEqual(entry, BackupIndex.load(self.index_path).get_by_id(regular.id))

		with self.assertRaises(CheckpointRetentionError):
			engine.extend_retention(checkpoint.id, 10)
		with self.assertRaises(BackupNotFound):
			engine.extend_retention('nope', 10)

	def test_10_extend_retention_without_date(self):
		entry = self.add_backups('old', 1, 1)[0]
		index = BackupIndex.load(self.index_path)
		index.replace_entry(IndexEntry(entry.id, entry.date, entry.path, entry.size, delete_after='garbage'))
		index.save(self.index_path)

		extended = self.create_engine().extend_retention(entry.id, 3)
		today = conversion_utils.now().date()
		self.assertIn(extended.delete_after, [
			conversion_utils.date_to_delete_after(today + datetime.timedelta(days=3)),
			conversion_utils.date_to_delete_after(today + datetime.timedelta(days=4)),
		])

	def test_11_mark_checkpoint(self):
		regular = self.add_backups('old', 1, 40, note='before')[0]
		engine = self.create_engine(days=30, min_keep=0)
		entry = engine.mark_checkpoint(regular.id, 'release')
		self.assertTrue(entry.checkpoint)
		self.assertEqual('', entry.delete_after)
		self.assertEqual('release', entry.note)

		# a checkpoint is no longer expired
		self.assertEqual(0, engine.cleanup().backups_deleted)
		with self.assertRaises(BackupNotFound):
			engine.mark_checkpoint('nope')

	def test_12_stats(self):
		self.add_backups('old', 3, 40)
		self.add_backups('fresh', 2, 1)
		self.add_backups('cp', 1, 100, checkpoint=True)

		stats = self.create_engine().get_stats()
		self.assertEqual(6, stats.total_backups)
		self.assertEqual(1, stats.checkpoint_backups)
		self.assertEqual(5, stats.regular_backups)
		self.assertEqual(3, stats.expired_backups)
		self.assertEqual(6000, stats.total_size)
		self.assertEqual('cp-0', stats.oldest_backup.id)
		self.assertEqual('fresh-0', stats.newest_backup.id)


if __name__ == '__main__':
	unittest.main()
