import os
from pathlib import Path
from typing import Union

PathLike = Union[str, Path, os.PathLike]
