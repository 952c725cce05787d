from os import getenv
from pathlib import Path
from typing import NamedTuple

ROOT: str = getenv("DIRVIEW_ROOT", ".")

PORT: int = int(getenv("PORT", 8000))

# The browser is meant to be reached from other machines on the network
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

LOG_REQUESTS: bool = getenv("DIRVIEW_LOG_REQUESTS", "1") == "1"


class ConfigError(Exception):
	pass


class Config(NamedTuple):
	"""Process-wide settings, fixed at startup and passed explicitly
	to the components that need them."""

	root: Path
	host: str = HOST
	port: int = PORT
	logRequests: bool = LOG_REQUESTS

	@staticmethod
	def Make(
		root: str | Path | None = None,
		*,
		host: str | None = None,
		port: int | None = None,
		logRequests: bool | None = None,
	) -> "Config":
		path = (root if isinstance(root, Path) else Path(root or ROOT)).absolute()
		if not path.exists():
			raise ConfigError(f"Root directory does not exist: {path}")
		if not path.is_dir():
			raise ConfigError(f"Root path is not a directory: {path}")
		if port is not None and not (0 <= port <= 65535):
			raise ConfigError(f"Port out of range: {port}")
		return Config(
			root=path,
			host=HOST if host is None else host,
			port=PORT if port is None else port,
			logRequests=LOG_REQUESTS if logRequests is None else logRequests,
		)


# EOF
