import dataclasses
import datetime
import json
from pathlib import Path

from lifeboat.utils import conversion_utils


@dataclasses.dataclass(frozen=True)
class FileStats:
	count: int
	original_size: str
	compressed_size: str


@dataclasses.dataclass(frozen=True)
class BackupMetadata:
	id: str
	created_at: datetime.datetime
	duration_seconds: int
	files: FileStats
	note: str = ''

	def to_dict(self) -> dict:
		data = {
			'id': self.id,
			'created_at': conversion_utils.datetime_to_json(self.created_at),
			'duration_seconds': self.duration_seconds,
			'files': dataclasses.asdict(self.files),
		}
		if self.note != '':
			data['note'] = self.note
		return data

	@classmethod
	def from_dict(cls, data: dict) -> 'BackupMetadata':
		files = data.get('files', {})
		return BackupMetadata(
			id=str(data['id']),
			created_at=conversion_utils.datetime_from_json(data['created_at']),
			duration_seconds=int(data.get('duration_seconds', 0)),
			files=FileStats(
				count=int(files.get('count', 0)),
				original_size=str(files.get('original_size', '')),
				compressed_size=str(files.get('compressed_size', '')),
			),
			note=str(data.get('note', '')),
		)

	def save(self, path: Path):
		with open(path, 'w', encoding='utf8') as f:
			json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

	@classmethod
	def load(cls, path: Path) -> 'BackupMetadata':
		with open(path, 'r', encoding='utf8') as f:
			return cls.from_dict(json.load(f))
