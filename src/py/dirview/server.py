import asyncio
import socket
import threading
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .browser import Browser
from .config import Config
from .http import END_OF_HEAD, HTTPRequest, HTTPRequestError, HTTPResponse
from .utils.logging import debug, error, event, exception, info, warning


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	backlog: int = 1_000
	# Time given to a client to send its request head
	timeout: float = 10.0
	# This is the polling timeout for accepting new requests.
	polling: float = 1.0
	readsize: int = 4_096
	# Request heads larger than that are rejected
	maxhead: int = 64_000
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 21\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal Server Error"
)


def respond(browser: Browser, head: bytes, *, logRequests: bool = False) -> bytes:
	"""Processes the raw request head and returns the full raw response.
	`HEAD` requests get the response head only."""
	try:
		req = HTTPRequest.Parse(head)
	except HTTPRequestError as e:
		warning("Malformed request", Reason=e.message)
		return HTTPResponse.Create(status=e.status).head()
	if logRequests:
		event(req.method, req.path)
	res: HTTPResponse = browser.process(req.method, req.path)
	return res.head() if req.method == "HEAD" else res.head() + res.body


class AIOSocketServer:
	"""AsyncIO backend using sockets directly, one request per connection."""

	@classmethod
	async def ReadHead(
		cls,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> bytes | None:
		buffer = bytearray()
		while (end := buffer.find(END_OF_HEAD)) == -1:
			if len(buffer) > options.maxhead:
				return None
			chunk = await asyncio.wait_for(
				loop.sock_recv(client, options.readsize), timeout=options.timeout
			)
			if not chunk:
				# A no-data means the client closed the connection
				return None
			buffer += chunk
		return bytes(buffer[:end])

	@classmethod
	async def OnRequest(
		cls,
		browser: Browser,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Reads the request from the client socket and sends back the
		response, closing the connection afterwards."""
		try:
			try:
				head = await cls.ReadHead(client, loop=loop, options=options)
			except TimeoutError:
				warning("Client timed out", Client=f"{id(client):x}")
				return
			if head is None:
				debug("Client did not send a complete request", Client=f"{id(client):x}")
				return
			try:
				payload = respond(
					browser, head, logRequests=browser.config.logRequests
				)
			except Exception as e:
				exception(e)
				payload = SERVER_ERROR
			try:
				await loop.sock_sendall(client, payload)
			except BrokenPipeError:
				# Client did an early close
				pass
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@classmethod
	async def Serve(
		cls,
		browser: Browser,
		options: ServerOptions = ServerOptions(),
	) -> None:
		"""Main server coroutine."""
		config: Config = browser.config
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		port: int = config.port
		try:
			server.bind((config.host, port))
		except OSError as e:
			warning(f"Could not bind to {config.host}:{port}, trying other ports.")
			bound: bool = False
			for p in range(config.port + 1, config.port + 5):
				try:
					server.bind((config.host, p))
					bound = True
					port = p
					info(f"Found alternate available port: {port}")
					break
				except OSError:
					pass
			if not bound:
				error(
					f"Unable to bind to {config.host}:{config.port}, aborting.",
					"HOSTPORTERR",
				)
				server.close()
				raise e from e

		server.listen(options.backlog)
		server.setblocking(False)

		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()

		state = ServerState()
		# Signal handlers can only be registered from the main thread
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, lambda: state.stop())
			loop.add_signal_handler(SIGTERM, lambda: state.stop())
		loop.set_exception_handler(state.onException)

		info(
			"Directory browser listening",
			icon="🚀",
			Host=config.host,
			Port=port,
			Root=str(config.root),
		)

		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
					client.setblocking(False)
					task = loop.create_task(
						cls.OnRequest(browser, client, loop=loop, options=options)
					)
					tasks.add(task)
					task.add_done_callback(tasks.discard)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					# This can be: [OSError] [Errno 24] Too many open files
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def run(
	config: Config,
	*,
	condition: Callable[[], bool] | None = None,
	options: ServerOptions = ServerOptions(),
) -> None:
	"""High level function to run the server."""
	browser = Browser(config)
	try:
		asyncio.run(
			AIOSocketServer.Serve(browser, options._replace(condition=condition or options.condition))
		)
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
