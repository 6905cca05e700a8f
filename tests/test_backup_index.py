import datetime
import json
import tempfile
import unittest
from pathlib import Path

from lifeboat.index.backup_index import BackupIndex
from lifeboat.types.index_entry import IndexEntry

_TZ = datetime.timezone(datetime.timedelta(hours=8))


def _entry(backup_id: str, day: int, **kwargs) -> IndexEntry:
	return IndexEntry(
		id=backup_id,
		date=datetime.datetime(2024, 5, day, 12, 0, 0, tzinfo=_TZ),
		path='202405{:02d}/1200'.format(day),
		size='1.0 MB',
		**kwargs,
	)


class BackupIndexTestCase(unittest.TestCase):
	def setUp(self):
		temp_dir = tempfile.TemporaryDirectory()
		self.addCleanup(temp_dir.cleanup)
		self.index_path = Path(temp_dir.name) / 'index.json'

	def test_0_missing_file_is_empty(self):
		index = BackupIndex.load(self.index_path)
		self.assertEqual(0, len(index))
		self.assertIsNone(index.get_latest())
		self.assertFalse(self.index_path.exists())

	def test_1_save_sorted_newest_first(self):
		index = BackupIndex()
		index.add_entry(_entry('b2', 2, delete_after='2024-06-01'))
		index.add_entry(_entry('b3', 3, checkpoint=True, note='release'))
		index.add_entry(_entry('b1', 1))
		index.save(self.index_path)

		with open(self.index_path, 'r', encoding='utf8') as f:
			data = json.load(f)
		self.assertEqual(['b3', 'b2', 'b1'], [item['id'] for item in data['backups']])
		self.assertEqual('2024-06-01', data['backups'][1]['delete_after'])
		self.assertNotIn('delete_after', data['backups'][0])
		self.assertTrue(data['backups'][0]['checkpoint'])
		self.assertEqual('release', data['backups'][0]['note'])
		self.assertFalse(self.index_path.with_name('index.json.tmp').exists())

		loaded = BackupIndex.load(self.index_path)
		self.assertEqual(index.get_sorted(), loaded.get_sorted())
		self.assertEqual('b3', loaded.get_latest().id)

	def test_2_lookup_and_mutations(self):
		index = BackupIndex([_entry('b1', 1, delete_after='2024-06-01'), _entry('b2', 2)])
		self.assertTrue(index.contains('b1'))
		self.assertIsNone(index.get_by_id('nope'))
		with self.assertRaises(ValueError):
			index.add_entry(_entry('b1', 5))

		self.assertTrue(index.mark_as_checkpoint('b1', 'keep me'))
		entry = index.get_by_id('b1')
		self.assertTrue(entry.checkpoint)
		self.assertEqual('', entry.delete_after)
		self.assertEqual('keep me', entry.note)

		# empty note keeps the existing one
		self.assertTrue(index.mark_as_checkpoint('b1', ''))
		self.assertEqual('keep me', index.get_by_id('b1').note)
		self.assertFalse(index.mark_as_checkpoint('nope', ''))

		self.assertTrue(index.remove_entry('b2'))
		self.assertFalse(index.remove_entry('b2'))
		self.assertEqual(['b1'], [e.id for e in index])

	def test_3_expiration(self):
		entry = _entry('b1', 1, delete_after='2024-06-01')
		self.assertFalse(entry.is_expired(datetime.datetime(2024, 5, 31, 23, 59, tzinfo=_TZ)))
		self.assertTrue(entry.is_expired(datetime.datetime(2024, 6, 1, 0, 1, tzinfo=_TZ)))

		self.assertFalse(_entry('b2', 1).is_expired(datetime.datetime(2099, 1, 1, tzinfo=_TZ)))
		self.assertFalse(_entry('b3', 1, delete_after='garbage').is_expired(datetime.datetime(2099, 1, 1, tzinfo=_TZ)))
		self.assertFalse(_entry('b4', 1, checkpoint=True).is_expired(datetime.datetime(2099, 1, 1, tzinfo=_TZ)))

		index = BackupIndex([entry, _entry('b2', 2, checkpoint=True), _entry('b3', 3, delete_after='2024-07-01')])
		self.assertEqual(['b1'], [e.id for e in index.get_expired(datetime.datetime(2024, 6, 15, tzinfo=_TZ))])

	def test_4_checkpoint_has_no_delete_after(self):
		with self.assertRaises(ValueError):
			_entry('b1', 1, checkpoint=True, delete_after='2024-06-01')

		# a hand edited index is repaired on load
		self.index_path.write_text(json.dumps({'backups': [{
			'id': 'b1', 'date': '2024-05-01T12:00:00+08:00', 'path': '20240501/1200', 'size': '1 KB',
			'delete_after': '2024-06-01', 'checkpoint': True,
		}]}), encoding='utf8')
		entry = BackupIndex.load(self.index_path).get_by_id('b1')
		self.assertTrue(entry.checkpoint)
		self.assertEqual('', entry.delete_after)

	def test_5_bad_file(self):
		self.index_path.write_text('{not json', encoding='utf8')
		with self.assertRaises(ValueError):
			BackupIndex.load(self.index_path)

		self.index_path.write_text('[1, 2, 3]', encoding='utf8')
		with self.assertRaises(ValueError):
			BackupIndex.load(self.index_path)

		self.index_path.write_text('{"backups": [{"path": "x"}]}', encoding='utf8')
		with self.assertRaises(ValueError):
			BackupIndex.load(self.index_path)


if __name__ == '__main__':
	unittest.main()
