import contextlib
import enum
from abc import abstractmethod, ABC
from typing import BinaryIO, Union, ContextManager, Optional

from typing_extensions import Protocol

from lifeboat.types.common import PathLike


class Compressor(ABC):
	def __init__(self, level: Optional[int] = None):
		self.level = level

	@classmethod
	def create(cls, method: Union[str, 'CompressMethod'], *, level: Optional[int] = None) -> 'Compressor':
		if not isinstance(method, CompressMethod):
			if method in CompressMethod.__members__:
				method = CompressMethod[method]
			else:
				raise ValueError(f'Unknown compression method: {method}')
		return method.value(level)

	@classmethod
	@abstractmethod
	def ensure_lib(cls):
		"""
		:raise ImportError: if the library of the compressor is not installed
		"""
		...

	@classmethod
	def is_lib_available(cls) -> bool:
		try:
			cls.ensure_lib()
		except ImportError:
			return False
		return True

	@contextlib.contextmanager
	def open_decompressed(self, source_path: PathLike) -> ContextManager[BinaryIO]:
		"""
		source_path --[decompress]--> (reader)
		"""
		with open(source_path, 'rb') as f:
			with self.decompress_stream(f) as f_decompressed:
				yield f_decompressed

	@abstractmethod
	def compress_stream(self, f_out: BinaryIO) -> ContextManager[BinaryIO]:
		"""
		Open a stream from compressing write
		"""
		...

	@abstractmethod
	def decompress_stream(self, f_in: BinaryIO) -> ContextManager[BinaryIO]:
		"""
		Open a stream from decompressing read
		"""
		...


class PlainCompressor(Compressor):
	@classmethod
	def ensure_lib(cls):
		pass

	@contextlib.contextmanager
	def compress_stream(self, f_out: BinaryIO) -> ContextManager[BinaryIO]:
		yield f_out

	@contextlib.contextmanager
	def decompress_stream(self, f_in: BinaryIO) -> ContextManager[BinaryIO]:
		yield f_in


class _StreamLibrary(Protocol):
	def open(self, file_obj: BinaryIO, mode: str, **kwargs) -> BinaryIO:
		...


class _StreamLibraryCompressorBase(Compressor, ABC):
	@classmethod
	def _lib(cls) -> _StreamLibrary:
		...

	@classmethod
	def ensure_lib(cls):
		cls._lib()

	def _write_kwargs(self) -> dict:
		return {}

	@contextlib.contextmanager
	def compress_stream(self, f_out: BinaryIO) -> ContextManager[BinaryIO]:
		with self._lib().open(f_out, 'wb', **self._write_kwargs()) as compressed_out:
			yield compressed_out

	@contextlib.contextmanager
	def decompress_stream(self, f_in: BinaryIO) -> ContextManager[BinaryIO]:
		with self._lib().open(f_in, 'rb') as compressed_in:
			yield compressed_in


class ZstdCompressor(_StreamLibraryCompressorBase):
	@classmethod
	def _lib(cls):
		import zstandard
		return zstandard

	def _write_kwargs(self) -> dict:
		if self.level is None:
			return {}
		return {'cctx': self._lib().ZstdCompressor(level=self.level)}


class CompressMethod(enum.Enum):
	plain = PlainCompressor
	zstd = ZstdCompressor

	def __repr__(self) -> str:
		return '{}({!r})'.format(self.__class__.__name__, self.name)
