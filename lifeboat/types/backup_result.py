import dataclasses
import datetime
from pathlib import Path
from typing import List, Optional


@dataclasses.dataclass(frozen=True)
class BackupOptions:
	note: str = ''
	checkpoint: bool = False
	dry_run: bool = False

	# empty means all
	selected_webapps: List[str] = dataclasses.field(default_factory=list)
	selected_custom: List[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class BackupResult:
	id: str
	start_time: datetime.datetime
	path: Optional[Path] = None
	end_time: Optional[datetime.datetime] = None
	units: List[str] = dataclasses.field(default_factory=list)
	files_collected: int = 0
	files_processed: int = 0
	original_size: int = 0
	compressed_size: int = 0
	errors: List[str] = dataclasses.field(default_factory=list)
	success: bool = False

	@property
	def duration(self) -> datetime.timedelta:
		if self.end_time is None:
			return datetime.timedelta(0)
		return self.end_time - self.start_time
