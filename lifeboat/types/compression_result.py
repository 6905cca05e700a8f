import dataclasses
from pathlib import Path
from typing import List, Optional

from lifeboat.types.archive_format import ArchiveFormat


@dataclasses.dataclass
class CompressionResult:
	archive_path: Path
	format: ArchiveFormat
	original_size: int = 0
	compressed_size: int = 0
	files_processed: int = 0
	errors: List[str] = dataclasses.field(default_factory=list)

	@property
	def compression_ratio(self) -> Optional[float]:
		"""
		compressed / original, None if nothing was archived
		"""
		if self.original_size == 0:
			return None
		return self.compressed_size / self.original_size

	@property
	def savings(self) -> int:
		return self.original_size - self.compressed_size
