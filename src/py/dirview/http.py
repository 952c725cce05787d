import posixpath
from typing import NamedTuple
from urllib.parse import unquote

HTTP_STATUS: dict[int, str] = {
	200: "OK",
	400: "Bad Request",
	404: "Not Found",
	405: "Method Not Allowed",
	500: "Internal Server Error",
}

EOL: bytes = b"\r\n"
END_OF_HEAD: bytes = b"\r\n\r\n"


def headername(name: str) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	return "-".join(_.capitalize() for _ in name.split("-"))


# -----------------------------------------------------------------------------
#
# REQUEST
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""Raised when a request head cannot be parsed."""

	def __init__(self, message: str, status: int = 400):
		super().__init__(message)
		self.message: str = message
		self.status: int = status


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line"""

	method: str
	path: str
	query: str
	protocol: str


class HTTPRequest(NamedTuple):
	line: HTTPRequestLine
	headers: dict[str, str]

	@property
	def method(self) -> str:
		return self.line.method

	@property
	def path(self) -> str:
		return self.line.path

	@property
	def protocol(self) -> str:
		return self.line.protocol

	@staticmethod
	def Parse(head: bytes) -> "HTTPRequest":
		"""Parses a request head (everything up to the empty line)."""
		lines = head.split(EOL)
		try:
			ln = lines[0].decode("ascii")
		except UnicodeDecodeError as e:
			raise HTTPRequestError("Request line is not ASCII") from e
		i = ln.find(" ")
		j = ln.rfind(" ")
		if i <= 0 or j <= i:
			raise HTTPRequestError(f"Malformed request line: {ln!r}")
		p: list[str] = ln[i + 1 : j].split("?", 1)
		headers: dict[str, str] = {}
		for raw in lines[1:]:
			if not raw:
				continue
			header = raw.decode("latin-1")
			k = header.find(":")
			if k <= 0:
				raise HTTPRequestError(f"Malformed header: {header!r}")
			headers[headername(header[:k].strip())] = header[k + 1 :].strip()
		return HTTPRequest(
			HTTPRequestLine(
				ln[0:i].upper(),
				cleanPath(p[0]),
				p[1] if len(p) > 1 else "",
				ln[j + 1 :],
			),
			headers,
		)


def cleanPath(path: str) -> str:
	"""Decodes the URL path and collapses `.` and `..` segments, anchored
	at `/` so that the result never goes above the root."""
	decoded = unquote(path, errors="surrogateescape")
	cleaned = posixpath.normpath("/" + decoded.lstrip("/"))
	# POSIX keeps a leading `//`, we don't.
	cleaned = "/" + cleaned.lstrip("/")
	if decoded.endswith("/") and cleaned != "/":
		cleaned += "/"
	return cleaned


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse(NamedTuple):
	"""An HTTP response, fully buffered in memory."""

	status: int
	contentType: str | None = None
	body: bytes = b""
	protocol: str = "HTTP/1.1"

	@staticmethod
	def Create(
		content: str | bytes | None = None,
		contentType: str | None = None,
		status: int = 200,
	) -> "HTTPResponse":
		payload: bytes = (
			b""
			if content is None
			else content.encode("utf8")
			if isinstance(content, str)
			else content
		)
		return HTTPResponse(status=status, contentType=contentType, body=payload)

	@property
	def message(self) -> str:
		return HTTP_STATUS.get(self.status, "Unknown status")

	@property
	def headers(self) -> dict[str, str]:
		headers: dict[str, str] = {}
		if self.contentType:
			headers["Content-Type"] = self.contentType
		headers["Content-Length"] = str(len(self.body))
		headers["Connection"] = "close"
		return headers

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		lines: list[str] = [f"{k}: {v}" for k, v in self.headers.items()]
		lines.insert(0, f"{self.protocol} {self.status} {self.message}")
		lines.append("")
		lines.append("")
		return "\r\n".join(lines).encode("ascii")


# EOF
