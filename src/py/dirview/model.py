import os
import posixpath
import time
from enum import Enum
from typing import NamedTuple
from urllib.parse import quote

# -----------------------------------------------------------------------------
#
# FILE TYPES
#
# -----------------------------------------------------------------------------


class FileType(Enum):
	"""Coarse category of a filesystem node, derived from its extension."""

	Directory = "directory"
	Jpeg = "jpeg"
	Png = "png"
	Txt = "txt"
	Json = "json"
	Unknown = "unknown"


FILE_TYPES: dict[str, FileType] = {
	"jpg": FileType.Jpeg,
	"jpeg": FileType.Jpeg,
	"png": FileType.Png,
	"txt": FileType.Txt,
	"json": FileType.Json,
}

CONTENT_TYPES: dict[FileType, str] = {
	FileType.Jpeg: "image/jpeg",
	FileType.Png: "image/png",
	FileType.Txt: "text/plain",
	FileType.Json: "application/json",
}

CONTENT_TYPE_DEFAULT: str = "application/octet-stream"


def extension(path: str) -> str | None:
	"""Returns the lowercased extension of the last segment of `path`,
	`None` when the segment has no `.` at all. A trailing dot yields an
	empty (but present) extension."""
	name = path.rsplit("/", 1)[-1]
	i = name.rfind(".")
	return None if i == -1 else name[i + 1 :].lower()


def classify(path: str) -> FileType:
	"""Classifies the path based on its extension only: anything without
	an extension is considered a directory. This is a naming heuristic and
	does not look at the filesystem, so an extension-less file is reported
	as a `Directory`."""
	ext = extension(path)
	if ext is None:
		return FileType.Directory
	else:
		return FILE_TYPES.get(ext, FileType.Unknown)


def contentType(fileType: FileType) -> str:
	return CONTENT_TYPES.get(fileType, CONTENT_TYPE_DEFAULT)


# -----------------------------------------------------------------------------
#
# FORMATTING
#
# -----------------------------------------------------------------------------

KiB: int = 1024
MiB: int = 1024 * KiB
GiB: int = 1024 * MiB

TIME_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def formatSize(size: int) -> str:
	"""Formats a byte count the way listings display it: `512B`, `1.5KB`,
	`2KB`, `3MB`, `4GB`."""
	if size < KiB:
		return f"{size}B"
	elif size < MiB:
		kb = f"{size / KiB:.1f}"
		return f"{kb[:-2] if kb.endswith('.0') else kb}KB"
	elif size < GiB:
		return f"{size // MiB}MB"
	else:
		return f"{size // GiB}GB"


def formatTime(timestamp: float) -> str:
	return time.strftime(TIME_FORMAT, time.localtime(timestamp))


def printable(text: str) -> str:
	"""Returns the text with undecodable filename bytes replaced, so that
	it can be encoded as UTF-8."""
	return os.fsencode(text).decode("utf8", "replace")


# --
# Icons are inlined as data URIs, so that they never shadow a path that
# would exist under the browsed root.
ICON_SVG: str = (
	"data:image/svg+xml,"
	"%3Csvg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 16 16'%3E"
	"%3Cpath fill='{color}' d='{shape}'/%3E%3C/svg%3E"
)
ICON_SHAPE_FILE: str = "M3 1h7l3 3v11H3z"
ICON_SHAPE_DIRECTORY: str = "M1 3h5l2 2h7v9H1z"

ICONS: dict[FileType, str] = {
	FileType.Directory: ICON_SVG.format(color="%23E8B04B", shape=ICON_SHAPE_DIRECTORY),
	FileType.Jpeg: ICON_SVG.format(color="%2352A35B", shape=ICON_SHAPE_FILE),
	FileType.Png: ICON_SVG.format(color="%2347A3A3", shape=ICON_SHAPE_FILE),
	FileType.Txt: ICON_SVG.format(color="%23707070", shape=ICON_SHAPE_FILE),
	FileType.Json: ICON_SVG.format(color="%23C27A2C", shape=ICON_SHAPE_FILE),
	FileType.Unknown: ICON_SVG.format(color="%23A0A0A0", shape=ICON_SHAPE_FILE),
}


# -----------------------------------------------------------------------------
#
# ENTITY
#
# -----------------------------------------------------------------------------


class Entity(NamedTuple):
	"""A file or directory relative to the browsing root, as seen by
	a single request. The `path` is always the request path (starting
	with `/`), never the local absolute path."""

	name: str
	path: str
	fileType: FileType
	size: int | None = None
	modTime: float | None = None

	@staticmethod
	def FromPath(path: str) -> "Entity":
		return Entity(
			name=path.rsplit("/", 1)[-1],
			path=path,
			fileType=classify(path),
		)

	@staticmethod
	def FromStat(path: str, stat: os.stat_result) -> "Entity":
		return Entity.FromPath(path)._replace(
			size=stat.st_size, modTime=stat.st_mtime
		)

	@property
	def isDirectory(self) -> bool:
		return self.fileType is FileType.Directory

	@property
	def displaySize(self) -> str:
		if self.isDirectory or self.size is None:
			return "-"
		else:
			return formatSize(self.size)

	@property
	def displayTime(self) -> str:
		return "-" if self.modTime is None else formatTime(self.modTime)

	@property
	def icon(self) -> str:
		return ICONS[self.fileType]

	@property
	def href(self) -> str:
		# Quoting the raw bytes keeps non-UTF-8 names reachable
		return quote(os.fsencode(self.path), safe="/")

	@property
	def displayName(self) -> str:
		return printable(self.name)

	@property
	def displayPath(self) -> str:
		return printable(self.path)

	@property
	def parent(self) -> str | None:
		path = self.path.rstrip("/")
		if not path:
			return None
		else:
			return posixpath.dirname(path) or "/"


# EOF
