import errno
import os
import shutil
import stat
from pathlib import Path
from typing import Collection, List

HAS_COPY_FILE_RANGE = callable(getattr(os, 'copy_file_range', None))


def __is_cow_not_supported_error(e: int) -> bool:
	# https://github.com/coreutils/coreutils/blob/c343bee1b5de6087b70fe80db9e1f81bb1fc535c/src/copy.c#L292
	return e in (
		errno.ENOSYS, errno.ENOTTY, errno.EOPNOTSUPP, errno.ENOTSUP,
		errno.EINVAL, errno.EBADF,
		errno.EXDEV, errno.ETXTBSY,
		errno.EPERM, errno.EACCES,
	)


def copy_file_fast(src_path: Path, dst_path: Path):
	# https://man7.org/linux/man-pages/man2/copy_file_range.2.html
	if HAS_COPY_FILE_RANGE:
		total_read = 0
		try:
			with open(src_path, 'rb') as f_src, open(dst_path, 'wb+') as f_dst:
				while n := os.copy_file_range(f_src.fileno(), f_dst.fileno(), 2 ** 30):
					total_read += n
			return
		except OSError as e:
			# unsupported or read nothing -> retry with shutil.copyfile
			if __is_cow_not_supported_error(e.errno) and total_read == 0:
				pass
			else:
				raise

	shutil.copyfile(src_path, dst_path, follow_symlinks=False)


def copy_file_with_mode(src_path: Path, dst_path: Path):
	copy_file_fast(src_path, dst_path)
	shutil.copymode(src_path, dst_path)


def rm_rf(path: Path, *, missing_ok: bool = False):
	"""
	Does not follow symlink
	"""
	try:
		is_dir = stat.S_ISDIR(path.lstat().st_mode)
	except FileNotFoundError:
		if not missing_ok:
			raise
	else:
		if is_dir:
			shutil.rmtree(path)
		else:
			path.unlink(missing_ok=missing_ok)


def get_dir_size(path: Path) -> int:
	"""
	Total size of all regular files under the given path. Unreadable entries are ignored
	"""
	if path.is_file():
		return path.stat().st_size
	total = 0
	for dir_path, _, file_names in os.walk(path):
		for name in file_names:
			try:
				total += os.lstat(os.path.join(dir_path, name)).st_size
			except OSError:
				pass
	return total


def remove_empty_dirs(root: Path, *, skip_names: Collection[str] = ()) -> List[Path]:
	"""
	Remove empty directories directly under the given root

	:return: the removed directories
	"""
	removed = []
	try:
		children = list(root.iterdir())
	except OSError:
		return removed
	for child in children:
		if child.name in skip_names or child.is_symlink() or not child.is_dir():
			continue
		try:
			if not any(child.iterdir()):
				child.rmdir()
				removed.append(child)
		except OSError:
			pass
	return removed


def safe_member_path(target_root: Path, member_name: str) -> Path:
	"""
	Resolve an archive member name into a path inside the target root

	:raise ValueError: if the member escapes the target root
	"""
	root = target_root.resolve()
	path = (root / member_name).resolve()
	if path != root and root not in path.parents:
		raise ValueError('archive member {!r} escapes the target directory'.format(member_name))
	return path
