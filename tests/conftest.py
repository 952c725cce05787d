from pathlib import Path

import pytest

from dirview.browser import Browser
from dirview.config import Config


@pytest.fixture
def root(tmp_path: Path) -> Path:
	"""A small tree to browse:

	```
	a.txt         100 bytes
	sub/          empty
	photos/
	  cat.jpg
	  deep/
	    dog.png
	```
	"""
	(tmp_path / "a.txt").write_bytes(b"x" * 100)
	(tmp_path / "sub").mkdir()
	(tmp_path / "photos" / "deep").mkdir(parents=True)
	(tmp_path / "photos" / "cat.jpg").write_bytes(b"\xff\xd8\xff")
	(tmp_path / "photos" / "deep" / "dog.png").write_bytes(b"\x89PNG")
	return tmp_path


@pytest.fixture
def browser(root: Path) -> Browser:
	return Browser(Config.Make(root, logRequests=False))


# EOF
