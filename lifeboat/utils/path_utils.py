import os
from pathlib import Path
from lifeboat.types.common import PathLike


def normalize_path(path: PathLike) -> Path:
	"""
	Expand "~" and environment variables in the given path
	"""
	return Path(os.path.expandvars(os.path.expanduser(str(path))))


def resolve_against(path: PathLike, base: Path) -> Path:
	path = normalize_path(path)
	if path.is_absolute():
		return path
	return base / path

def sanitize_folder_name(title: str) -> str:
	"""
	Make a title safe to be used as a file or folder name. Results are lower-cased
	"""
	for c in (' ', '/', '\\', ':'):
		title = title.replace(c, '_')
	return title.lower()
