import os
import posixpath
from pathlib import Path

from .config import Config
from .http import HTTPResponse
from .model import Entity, FileType, contentType
from .templates import Renderer, listing
from .utils.logging import debug, exception


class IOFailure(Exception):
	"""A filesystem failure (other than a missing path) while handling
	a request. The original `OSError` is the cause."""

	def __init__(self, path: str, message: str):
		super().__init__(f"{message}: {path}")
		self.path: str = path


class Browser:
	"""Serves the contents of the configured root: directories are
	rendered as HTML listings, files are returned as-is."""

	METHODS: tuple[str, ...] = ("GET", "HEAD")

	def __init__(self, config: Config, renderer: Renderer = listing):
		self.config: Config = config
		self.renderer: Renderer = renderer

	@property
	def root(self) -> Path:
		return self.config.root

	def localPath(self, path: str) -> str:
		"""Returns the local path for the given request path, joined
		with the root and normalized."""
		return os.path.normpath(os.path.join(self.root, path.lstrip("/")))

	# =========================================================================
	# CORE
	# =========================================================================

	def resolve(self, path: str) -> Entity | None:
		"""Resolves the request path to an entity, returning `None` when
		nothing exists at that path."""
		local_path = self.localPath(path)
		try:
			stat = os.stat(local_path)
		except (FileNotFoundError, NotADirectoryError):
			# A path going through a file does not exist either
			return None
		except OSError as e:
			raise IOFailure(path, "Could not stat path") from e
		return Entity.FromStat(path, stat)

	def dispatch(self, entity: Entity) -> HTTPResponse:
		match entity.fileType:
			case FileType.Directory:
				return self.list(entity)
			case _:
				return self.serve(entity)

	def list(self, entity: Entity) -> HTTPResponse:
		"""Renders the listing of the immediate children of the entity,
		sorted by name."""
		local_path = self.localPath(entity.path)
		entities: list[Entity] = []
		try:
			with os.scandir(local_path) as children:
				for child in children:
					entities.append(
						Entity.FromStat(
							posixpath.join(entity.path, child.name),
							child.stat(follow_symlinks=False),
						)
					)
		except OSError as e:
			raise IOFailure(entity.path, "Could not list directory") from e
		entities.sort(key=lambda _: _.name)
		return HTTPResponse.Create(
			self.renderer({"entity": entity, "entities": entities}),
			contentType="text/html",
		)

	def serve(self, entity: Entity) -> HTTPResponse:
		"""Returns the whole file, with a content type derived from the
		entity's file type."""
		try:
			with open(self.localPath(entity.path), "rb") as f:
				data = f.read()
		except OSError as e:
			raise IOFailure(entity.path, "Could not read file") from e
		return HTTPResponse.Create(data, contentType=contentType(entity.fileType))

	def handle(self, path: str) -> HTTPResponse:
		"""Resolves and dispatches the path, only 404 is handled here: any
		other failure is raised."""
		entity = self.resolve(path)
		if entity is None:
			return self.notFound(path)
		else:
			return self.dispatch(entity)

	# =========================================================================
	# BOUNDARY
	# =========================================================================

	def process(self, method: str, path: str) -> HTTPResponse:
		"""Processes a request, converting any failure into an opaque
		server error so that one request never takes down the server."""
		if method not in self.METHODS:
			return HTTPResponse.Create(status=405)
		try:
			return self.handle(path)
		except IOFailure as e:
			exception(e, f"Failed to process {method} {path}")
			return self.fail()
		except Exception as e:
			exception(e, f"Unexpected error processing {method} {path}")
			return self.fail()

	def notFound(self, path: str) -> HTTPResponse:
		debug("Path not found", Path=path)
		return HTTPResponse.Create(status=404)

	def fail(self) -> HTTPResponse:
		return HTTPResponse.Create(
			"Internal Server Error", contentType="text/plain", status=500
		)


# EOF
