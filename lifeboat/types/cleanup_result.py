import dataclasses
from typing import List, Optional

from lifeboat.types.index_entry import IndexEntry


@dataclasses.dataclass
class CleanupResult:
	backups_deleted: int = 0
	space_freed: int = 0
	backups_kept: int = 0
	errors: List[str] = dataclasses.field(default_factory=list)
	deleted_ids: List[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass(frozen=True)
class BackupStats:
	total_backups: int = 0
	checkpoint_backups: int = 0
	regular_backups: int = 0
	expired_backups: int = 0
	total_size: int = 0
	oldest_backup: Optional[IndexEntry] = None
	newest_backup: Optional[IndexEntry] = None
