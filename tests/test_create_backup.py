import datetime
import tempfile
import unittest
from pathlib import Path
from typing import List
from unittest import mock

from lifeboat import logger
from lifeboat.backend import CompressionBackend
from lifeboat.backend.tar_stream_backend import TarStreamBackend
from lifeboat.backend.zip_backend import ZipBackend
from lifeboat.config.config import Config
from lifeboat.context import LifeboatContext
from lifeboat.engine import BackupEngine
from lifeboat.exceptions import BackendUnavailable
from lifeboat.index.backup_index import BackupIndex
from lifeboat.types.backup_metadata import BackupMetadata
from lifeboat.types.backup_result import BackupOptions
from lifeboat.types.progress import ProgressPhase


def _create_engine(config: Config, backend: CompressionBackend) -> BackupEngine:
	return BackupEngine(LifeboatContext(config, logger=logger.get(), backend=backend))


class CreateBackupTestCase(unittest.TestCase):
	def setUp(self):
		temp_dir = tempfile.TemporaryDirectory()
		self.addCleanup(temp_dir.cleanup)
		self.root = Path(temp_dir.name)

		self.webapps = self.root / 'webapps'
		(self.webapps / 'shop' / 'WEB-INF').mkdir(parents=True)
		(self.webapps / 'shop' / 'index.html').write_text('<html>shop</html>')
		(self.webapps / 'shop' / 'WEB-INF' / 'web.xml').write_text('<web-app/>')
		(self.webapps / 'api.war').write_bytes(b'PK\x03\x04' + b'\x00' * 100)
		(self.webapps / 'README.txt').write_text('not a webapp')

		self.conf = self.root / 'conf'
		self.conf.mkdir()
		(self.conf / 'server.xml').write_text('<Server/>')
		(self.conf / 'app.properties').write_text('a=1')
		(self.conf / 'cache.tmp').write_text('tmp')

		self.backup_root = self.root / 'backups'

	def create_engine(self, **kwargs) -> BackupEngine:
		data = {
			'name': 'test',
			'webapps_path': str(self.webapps),
			'backup_path': str(self.backup_root),
			'custom_folders': [
				{'title': 'Config Files', 'path': str(self.conf), 'required': True, 'exclude': ['*.tmp']},
			],
			'retention': {'days': 30, 'min_keep': 5},
			'logging': {'path': ''},
		}
		data.update(kwargs)
		config = Config.deserialize(data)
		backend = TarStreamBackend(config.compression, logger.get())
		return _create_engine(config, backend)

	def load_index(self) -> BackupIndex:
		return BackupIndex.load(self.backup_root / 'index.json')

	def test_0_backup_layout(self):
		result = self.create_engine().run(BackupOptions(note='nightly'))

		self.assertTrue(result.success, result.errors)
		self.assertEqual([], result.errors)
		self.assertEqual(['api.war', 'shop', 'Config Files'], result.units)
		self.assertEqual(5, result.files_collected)
		self.assertEqual(5, result.files_processed)
		self.assertTrue(result.id.startswith('backup-' + result.start_time.strftime('%Y%m%d-%H%M%S')))

		expected_path = self.backup_root / result.start_time.strftime('%Y%m%d') / result.start_time.strftime('%H%M')
		self.assertEqual(expected_path, result.path)
		self.assertEqual(
			['api.war.tar.zst', 'config_files.tar.zst', 'metadata.json', 'shop.tar.zst'],
			sorted(p.name for p in result.path.iterdir()),
		)
		self.assertEqual(
			sum((result.path / name).stat().st_size for name in ['api.war.tar.zst', 'config_files.tar.zst', 'shop.tar.zst']),
			result.compressed_size,
		)

		meta = BackupMetadata.load(result.path / 'metadata.json')
		self.assertEqual(result.id, meta.id)
		self.assertEqual(5, meta.files.count)
		self.assertEqual('nightly', meta.note)

		entry = self.load_index().get_by_id(result.id)
		self.assertIsNotNone(entry)
		self.assertEqual(result.path.relative_to(self.backup_root).as_posix(), entry.path)
		self.assertFalse(entry.checkpoint)
		self.assertEqual('nightly', entry.note)
		self.assertEqual((result.start_time.date() + datetime.timedelta(days=30)).strftime('%Y-%m-%d'), entry.delete_after)

	def test_1_dry_run_writes_nothing(self):
		before = sorted(self.root.rglob('*'))
		result = self.create_engine().run(BackupOptions(dry_run=True))
		self.assertTrue(result.success)
		self.assertEqual(['api.war', 'shop', 'Config Files'], result.units)
		self.assertEqual(0, result.files_processed)
		self.assertFalse(self.backup_root.exists())
		self.assertEqual(before, sorted(self.root.rglob('*')))

	def test_2_checkpoint(self):
		engine = self.create_engine()
		result = engine.run(BackupOptions(note='Release 1.0', checkpoint=True))
		self.assertTrue(result.success, result.errors)
		self.assertEqual(self.backup_root / (result.start_time.strftime('%Y%m%d') + '_release_1.0'), result.path)

		entry = self.load_index().get_by_id(result.id)
		self.assertTrue(entry.checkpoint)
		self.assertEqual('', entry.delete_after)

		# same note again, the first checkpoint must not be touched
		result2 = engine.run(BackupOptions(note='Release 1.0', checkpoint=True))
		self.assertNotEqual(result.id, result2.id)
		self.assertNotEqual(result.path, result2.path)
		self.assertTrue(result.path.is_dir())

		result3 = engine.run(BackupOptions(checkpoint=True))
		self.assertEqual(result3.start_time.strftime('%Y%m%d') + '_checkpoint', result3.path.name)

	def test_3_unique_ids_and_paths(self):
		engine = self.create_engine()
		results = [engine.run(BackupOptions()) for _ in range(3)]
		self.assertEqual(3, len({r.id for r in results}))
		self.assertEqual(3, len({r.path for r in results}))
		index = self.load_index()
		self.assertEqual(3, len(index))
		for r in results:
			self.assertTrue(r.success, r.errors)
			self.assertTrue(index.contains(r.id))

	def test_4_missing_units(self):
		engine = self.create_engine(
			webapps=['shop', 'ghost'],
			custom_folders=[
				{'title': 'needed', 'path': str(self.root / 'nope1'), 'required': True},
				{'title': 'optional', 'path': str(self.root / 'nope2'), 'required': False},
			],
		)
		result = engine.run(BackupOptions())
		self.assertFalse(result.success)
		self.assertEqual(['webapp not found: ghost', 'required folder not found: needed'], result.errors)

		# everything produced is kept
		self.assertTrue((result.path / 'shop.tar.zst').is_file())
		self.assertTrue((result.path / 'metadata.json').is_file())
		self.assertTrue(self.load_index().contains(result.id))

	def test_5_retention_disabled(self):
		result = self.create_engine(retention={'enabled': False}).run(BackupOptions())
		self.assertEqual('', self.load_index().get_by_id(result.id).delete_after)

	def test_6_selected_units(self):
		result = self.create_engine().run(BackupOptions(selected_webapps=['shop'], selected_custom=['Config Files']))
		self.assertEqual(['shop', 'Config Files'], result.units)
		result = self.create_engine().run(BackupOptions(selected_webapps=['shop'], selected_custom=['unknown']))
		self.assertEqual(['shop'], result.units)

	def test_7_compression_failure_is_recorded(self):
		engine = self.create_engine()
		backend = engine.ctx.get_backend()
		with mock.patch.object(backend, 'compress_unit', side_effect=OSError('disk full')):
			result = engine.run(BackupOptions())
		self.assertFalse(result.success)
		self.assertEqual(['api.war: disk full', 'shop: disk full', 'Config Files: disk full'], result.errors)
		self.assertTrue((result.path / 'metadata.json').is_file())
		self.assertTrue(self.load_index().contains(result.id))

	def test_8_unreadable_index_is_replaced(self):
		self.backup_root.mkdir()
		(self.backup_root / 'index.json').write_text('{broken', encoding='utf8')
		result = self.create_engine().run(BackupOptions())
		self.assertTrue(result.success, result.errors)
		self.assertEqual([result.id], [e.id for e in self.load_index()])

	def test_9_backend_unavailable(self):
		config = Config.deserialize({'webapps_path': str(self.webapps), 'backup_path': str(self.backup_root)})
		backend = ZipBackend(config.compression, logger.get())
		engine = _create_engine(config, backend)
		with mock.patch.object(ZipBackend, 'is_available', return_value=False):
			with self.assertRaises(BackendUnavailable):
				engine.run(BackupOptions())
		self.assertFalse(self.backup_root.exists())

	def test_10_progress(self):
		phases: List[ProgressPhase] = []

		def progress(phase: ProgressPhase, current: int, total: int, message: str):
			if len(phases) == 0 or phases[-1] != phase:
				phases.append(phase)

		self.create_engine().run(BackupOptions(), progress)
		self.assertEqual(ProgressPhase.init, phases[0])
		self.assertEqual([ProgressPhase.metadata, ProgressPhase.index], phases[-2:])
		for phase in [ProgressPhase.copy, ProgressPhase.compress, ProgressPhase.custom]:
			self.assertIn(phase, phases)
		self.assertLess(phases.index(ProgressPhase.copy), phases.index(ProgressPhase.custom))

	def test_11_list_is_read_only(self):
		engine = self.create_engine()
		first = engine.run(BackupOptions())
		second = engine.run(BackupOptions(note='second'))
		index_file = self.backup_root / 'index.json'
		raw = index_file.read_bytes()
		mtime = index_file.stat().st_mtime_ns

		backups = engine.list()
		self.assertEqual([second.id, first.id], [e.id for e in backups])
		self.assertEqual(second.id, engine.get_latest().id)
		self.assertEqual(raw, index_file.read_bytes())
		self.assertEqual(mtime, index_file.stat().st_mtime_ns)

	def test_12_available_units(self):
		units = self.create_engine().get_available_units()
		by_name = {u.name: u for u in units}
		self.assertEqual({'api.war', 'shop', 'Config Files'}, set(by_name.keys()))
		self.assertTrue(by_name['api.war'].is_war)
		self.assertFalse(by_name['shop'].is_war)
		self.assertEqual(104, by_name['api.war'].size)
		self.assertTrue(by_name['Config Files'].exists)
		self.assertTrue(by_name['Config Files'].required)


if __name__ == '__main__':
	unittest.main()
