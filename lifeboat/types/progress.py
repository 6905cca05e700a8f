import enum
from typing import Callable


class ProgressPhase(str, enum.Enum):
	init = 'init'
	copy = 'copy'
	compress = 'compress'
	custom = 'custom'
	metadata = 'metadata'
	index = 'index'
	extract = 'extract'


# (phase, current, total, message), total is 0 if unknown
ProgressCallback = Callable[[ProgressPhase, int, int, str], None]

# (current item count, current item name)
ItemProgressCallback = Callable[[int, str], None]


def noop_progress(phase: ProgressPhase, current: int, total: int, message: str):
	pass


def noop_item_progress(current: int, name: str):
	pass
