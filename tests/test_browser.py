import os
import re
from pathlib import Path
from typing import Any, Mapping

import pytest

from dirview.browser import Browser, IOFailure
from dirview.config import Config
from dirview.http import cleanPath
from dirview.model import Entity, FileType

RE_ROW_HREF = re.compile(r'<td class="name"><a href="([^"]*)">')


def rows(html: str) -> list[str]:
	return RE_ROW_HREF.findall(html)


# --
# Resolution


def test_resolve_missing(browser: Browser):
	assert browser.resolve("/missing") is None
	assert browser.resolve("/sub/missing.txt") is None


def test_resolve_file(browser: Browser):
	e = browser.resolve("/a.txt")
	assert e is not None
	assert e.path == "/a.txt"
	assert e.name == "a.txt"
	assert e.fileType is FileType.Txt
	assert e.size == 100
	assert e.modTime is not None


def test_resolve_keeps_request_path(browser: Browser, root: Path):
	e = browser.resolve("/photos/cat.jpg")
	assert e is not None
	assert e.path == "/photos/cat.jpg"
	assert str(root) not in e.path


def test_resolve_root(browser: Browser):
	e = browser.resolve("/")
	assert e is not None
	assert e.fileType is FileType.Directory
	assert e.parent is None


def test_resolve_through_file(browser: Browser):
	# A file used as a directory is just as missing as any other path
	assert browser.resolve("/a.txt/other.txt") is None
	for path in ("/a.txt/other.txt", "/photos/cat.jpg/deep/dog.png"):
		res = browser.process("GET", path)
		assert res.status == 404
		assert res.body == b""


def test_resolve_failure(browser: Browser, monkeypatch: pytest.MonkeyPatch):
	def stat(path: str) -> os.stat_result:
		raise PermissionError(13, "Permission denied", path)

	monkeypatch.setattr(os, "stat", stat)
	with pytest.raises(IOFailure) as info:
		browser.resolve("/a.txt")
	assert isinstance(info.value.__cause__, PermissionError)
	res = browser.process("GET", "/a.txt")
	assert res.status == 500
	assert res.body == b"Internal Server Error"


# --
# Scenario


def test_scenario(browser: Browser):
	res = browser.process("GET", "/a.txt")
	assert res.status == 200
	assert res.contentType == "text/plain"
	assert len(res.body) == 100

	res = browser.process("GET", "/sub")
	assert res.status == 200
	assert res.contentType == "text/html"
	assert rows(res.body.decode("utf8")) == []

	res = browser.process("GET", "/missing")
	assert res.status == 404
	assert res.body == b""


@pytest.mark.parametrize(
	"path", ["/missing", "/missing/", "/sub/missing", "/photos/deep/cat.jpg", "/x.png"]
)
def test_not_found(browser: Browser, path: str):
	res = browser.process("GET", path)
	assert res.status == 404
	assert res.body == b""


# --
# Files


@pytest.mark.parametrize(
	"name,expected",
	[
		("photo.jpg", "image/jpeg"),
		("photo.jpeg", "image/jpeg"),
		("PHOTO.JPG", "image/jpeg"),
		("image.png", "image/png"),
		("readme.txt", "text/plain"),
		("data.json", "application/json"),
		("archive.tar.gz", "application/octet-stream"),
		("program.bin", "application/octet-stream"),
		("trailing.", "application/octet-stream"),
		(".hidden", "application/octet-stream"),
	],
)
def test_serve_content_type(root: Path, browser: Browser, name: str, expected: str):
	(root / name).write_bytes(b"payload")
	res = browser.process("GET", f"/{name}")
	assert res.status == 200
	assert res.contentType == expected
	assert res.body == b"payload"


def test_serve_nested(browser: Browser):
	res = browser.process("GET", "/photos/deep/dog.png")
	assert res.status == 200
	assert res.contentType == "image/png"
	assert res.body == b"\x89PNG"


# --
# Listings


def test_list_root(browser: Browser):
	res = browser.process("GET", "/")
	assert res.status == 200
	assert res.contentType == "text/html"
	html = res.body.decode("utf8")
	assert rows(html) == ["/a.txt", "/photos", "/sub"]
	# There is no parent for the root
	assert 'class="parent"' not in html


def test_list_immediate_children(browser: Browser):
	html = browser.process("GET", "/photos").body.decode("utf8")
	assert rows(html) == ["/photos/cat.jpg", "/photos/deep"]
	assert "dog.png" not in html
	assert '<a href="/" class="parent">..</a>' in html


def test_list_trailing_slash(browser: Browser):
	html = browser.process("GET", "/photos/").body.decode("utf8")
	assert rows(html) == ["/photos/cat.jpg", "/photos/deep"]


def test_list_sorted(root: Path, browser: Browser):
	for name in ("zeta.txt", "Alpha.txt", "beta.txt", "_x.txt"):
		(root / "sub" / name).write_bytes(b"")
	html = browser.process("GET", "/sub").body.decode("utf8")
	assert rows(html) == [
		"/sub/Alpha.txt",
		"/sub/_x.txt",
		"/sub/beta.txt",
		"/sub/zeta.txt",
	]


def test_list_display(root: Path, browser: Browser):
	(root / "sub" / "big.json").write_bytes(b"0" * 1536)
	html = browser.process("GET", "/sub").body.decode("utf8")
	assert '<td class="size">1.5KB</td>' in html
	html = browser.process("GET", "/").body.decode("utf8")
	assert '<td class="size">100B</td>' in html
	assert '<td class="size">-</td>' in html
	assert ">sub/</a>" in html


def test_list_escapes_names(root: Path, browser: Browser):
	(root / "sub" / "<b>&.txt").write_bytes(b"")
	html = browser.process("GET", "/sub").body.decode("utf8")
	assert "<b>" not in html
	assert "&lt;b&gt;&amp;.txt" in html
	assert rows(html) == ["/sub/%3Cb%3E%26.txt"]


def test_list_dangling_symlink(root: Path, browser: Browser):
	os.symlink(root / "nowhere.txt", root / "sub" / "broken.txt")
	res = browser.process("GET", "/sub")
	assert res.status == 200
	assert rows(res.body.decode("utf8")) == ["/sub/broken.txt"]
	# The link itself resolves to nothing
	assert browser.process("GET", "/sub/broken.txt").status == 404


def test_list_renderer(root: Path):
	captured: list[Mapping[str, Any]] = []

	def renderer(data: Mapping[str, Any]) -> str:
		captured.append(data)
		return "OK"

	browser = Browser(Config.Make(root), renderer=renderer)
	res = browser.process("GET", "/photos")
	assert res.body == b"OK"
	assert res.contentType == "text/html"
	(data,) = captured
	assert set(data.keys()) == {"entity", "entities"}
	assert data["entity"].path == "/photos"
	assert [_.path for _ in data["entities"]] == ["/photos/cat.jpg", "/photos/deep"]
	assert [_.fileType for _ in data["entities"]] == [
		FileType.Jpeg,
		FileType.Directory,
	]


def test_round_trip(root: Path, browser: Browser):
	for name in ("a b.txt", "c#d.json", "e?f.png", "100%.txt", "é.txt"):
		(root / "sub" / name).write_bytes(name.encode("utf8"))
	for directory in ("/", "/sub", "/photos"):
		listing = browser.process("GET", directory).body.decode("utf8")
		children = {_.name: _ for _ in os.scandir(browser.localPath(directory))}
		hrefs = rows(listing)
		assert len(hrefs) == len(children)
		for href in hrefs:
			entity = browser.resolve(cleanPath(href))
			assert entity is not None
			assert entity.name in children
			assert entity.path.startswith(directory.rstrip("/") + "/")


def test_list_undecodable_name(root: Path, browser: Browser):
	with open(os.path.join(os.fsencode(root / "sub"), b"caf\xe9.txt"), "wb") as f:
		f.write(b"latin-1")
	res = browser.process("GET", "/sub")
	assert res.status == 200
	html = res.body.decode("utf8")
	assert "caf\ufffd.txt" in html
	assert rows(html) == ["/sub/caf%E9.txt"]
	# The link leads back to the same file
	(href,) = rows(html)
	res = browser.process("GET", cleanPath(href))
	assert res.status == 200
	assert res.body == b"latin-1"


def test_list_undecodable_directory(root: Path, browser: Browser):
	os.mkdir(os.path.join(os.fsencode(root), b"d\xe9j\xe0"))
	path = cleanPath("/d%E9j%E0")
	res = browser.process("GET", path)
	assert res.status == 200
	assert "<h1>Listing for /d\ufffdj\ufffd</h1>" in res.body.decode("utf8")


# --
# Dispatch


def test_dispatch(browser: Browser):
	assert browser.dispatch(Entity.FromPath("/sub")).contentType == "text/html"
	assert browser.dispatch(Entity.FromPath("/a.txt")).contentType == "text/plain"


# --
# Failures


def test_extensionless_file_is_listed_as_directory(root: Path, browser: Browser):
	(root / "notes").write_bytes(b"not a directory")
	entity = browser.resolve("/notes")
	assert entity is not None
	assert entity.fileType is FileType.Directory
	with pytest.raises(IOFailure):
		browser.list(entity)
	with pytest.raises(IOFailure):
		browser.handle("/notes")
	res = browser.process("GET", "/notes")
	assert res.status == 500
	assert res.body == b"Internal Server Error"


def test_dotted_directory_is_served_as_file(root: Path, browser: Browser):
	(root / "photos.2020").mkdir()
	entity = browser.resolve("/photos.2020")
	assert entity is not None
	assert entity.fileType is FileType.Unknown
	with pytest.raises(IOFailure):
		browser.serve(entity)
	res = browser.process("GET", "/photos.2020")
	assert res.status == 500
	assert str(root).encode("utf8") not in res.body


def test_serve_deleted(root: Path, browser: Browser):
	entity = browser.resolve("/a.txt")
	assert entity is not None
	(root / "a.txt").unlink()
	with pytest.raises(IOFailure) as info:
		browser.serve(entity)
	assert info.value.path == "/a.txt"


def test_unexpected_failure(root: Path):
	def renderer(data: Mapping[str, Any]) -> str:
		raise RuntimeError("template error")

	browser = Browser(Config.Make(root), renderer=renderer)
	assert browser.process("GET", "/").status == 500
	assert browser.process("GET", "/a.txt").status == 200


def test_methods(browser: Browser):
	assert browser.process("HEAD", "/a.txt").status == 200
	for method in ("POST", "PUT", "DELETE", "PATCH"):
		res = browser.process(method, "/a.txt")
		assert res.status == 405
		assert res.body == b""


# EOF
