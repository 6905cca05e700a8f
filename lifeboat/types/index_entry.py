import dataclasses
import datetime
from typing import Optional

from lifeboat.utils import conversion_utils


@dataclasses.dataclass(frozen=True)
class IndexEntry:
	id: str
	date: datetime.datetime
	path: str  # relative to the backup root
	size: str  # human-readable compressed size
	delete_after: str = ''  # YYYY-MM-DD, empty means never expires
	checkpoint: bool = False
	note: str = ''

	def __post_init__(self):
		if self.checkpoint and self.delete_after != '':
			raise ValueError('checkpoint backup {} should not have delete_after {!r}'.format(self.id, self.delete_after))

	def get_delete_after_date(self) -> Optional[datetime.date]:
		return conversion_utils.parse_delete_after(self.delete_after)

	def is_expired(self, now: datetime.datetime) -> bool:
		if self.checkpoint:
			return False
		date = self.get_delete_after_date()
		if date is None:
			return False
		# midnight in the timezone of now
		deadline = datetime.datetime.combine(date, datetime.time.min, tzinfo=now.tzinfo)
		return now > deadline

	def to_dict(self) -> dict:
		data = {
			'id': self.id,
			'date': conversion_utils.datetime_to_json(self.date),
			'path': self.path,
			'size': self.size,
		}
		if self.delete_after != '':
			data['delete_after'] = self.delete_after
		data['checkpoint'] = self.checkpoint
		if self.note != '':
			data['note'] = self.note
		return data

	@classmethod
	def from_dict(cls, data: dict) -> 'IndexEntry':
		return IndexEntry(
			id=str(data['id']),
			date=conversion_utils.datetime_from_json(data['date']),
			path=str(data.get('path', '')),
			size=str(data.get('size', '')),
			delete_after='' if data.get('checkpoint') else str(data.get('delete_after', '')),
			checkpoint=bool(data.get('checkpoint', False)),
			note=str(data.get('note', '')),
		)
