import asyncio
import errno
import socket
import threading
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .http.body import HTTPBodyFile, HTTPBodyWriter
from .http.model import HTTPProcessingStatus, HTTPRequest, HTTPResponse
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .utils.limits import LimitType, unlimit
from .utils.logging import debug, event, exception, info, logged, warning


class ServerOptions(NamedTuple):
	host: str = "0.0.0.0"  # nosec: B104
	port: int = 3000
	backlog: int = 10_000
	# How long the accept loop waits before checking if it should stop
	polling: float = 1.0
	readsize: int = 4_096
	# Idle time after which a kept-alive connection is closed
	keepalive: float = 5.0
	logRequests: bool = True
	# The server stops once this returns false
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True
	# Called with the bound port once the server is listening
	onReady: Callable[[int], None] | None = None


OPTIONS: ServerOptions = ServerOptions()


def closingResponse(status: int, message: bytes) -> bytes:
	headers = {"Content-Type": "text/plain", "Connection": "close"}
	return HTTPResponse(status, headers, message).head() + message


SERVER_ERROR: bytes = closingResponse(500, b"Internal Server Error")
SERVER_BAD_REQUEST: bytes = closingResponse(400, b"Bad Request")


class ServerState:
	"""Tells the accept loop if it should keep going."""

	def __init__(self) -> None:
		self.isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		if error := context.get("exception"):
			exception(error)


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Writes to a non-blocking client socket, sending files with
	`sendfile` where the platform has it."""

	def __init__(self, client: socket.socket, loop: asyncio.AbstractEventLoop):
		super().__init__()
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(self, data: bytes) -> None:
		if data:
			await self.loop.sock_sendall(self.client, data)

	async def _writeFile(self, body: HTTPBodyFile, size: int = 64_000) -> int:
		with open(body.path, "rb") as f:
			return await self.loop.sock_sendfile(
				self.client, f, body.offset, body.length
			)


async def sendResponse(
	request: HTTPRequest,
	app: Application,
	writer: HTTPBodyWriter,
	*,
	keepAlive: bool = True,
) -> HTTPResponse | None:
	"""Sends the application's response to the request. `HEAD` requests
	only get the head. Returns `None` when no proper response could be
	sent, in which case `writer.shouldClose` is set."""
	try:
		response = await app.process(request)
	except Exception as e:
		exception(e)
		await writer.write(SERVER_ERROR)
		writer.shouldClose = True
		return None
	if not keepAlive:
		response.setHeader("Connection", "close")
	await writer.write(response.head())
	if request.method == "HEAD":
		return response
	try:
		await writer.write(response.body)
	except OSError as e:
		# The head is sent already, the client will see a truncated body
		warning("Response body could not be sent", Path=request.path, Reason=str(e))
		writer.shouldClose = True
		return None
	return response


# NOTE: Based on benchmarks, using sockets directly gives the best performance.
class AIOSocketServer:
	"""Serves an application with asyncio, working on sockets directly."""

	@classmethod
	async def OnRequest(
		cls,
		app: Application,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Answers the requests of a client, in order, until either side
		closes the connection or it stays idle for `options.keepalive`."""
		buffer = bytearray(options.readsize)
		parser = HTTPParser()
		writer = AIOSocketBodyWriter(client, loop)
		status = HTTPProcessingStatus.Processing
		received: int = 0
		answered: int = 0
		keep_alive: bool = True
		try:
			while keep_alive and not writer.shouldClose:
				try:
					n = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer), timeout=options.keepalive
					)
				except (asyncio.TimeoutError, TimeoutError):
					status = HTTPProcessingStatus.Timeout
					break
				if n == 0:
					status = HTTPProcessingStatus.NoData
					break
				for atom in parser.feed(bytes(buffer[:n])):
					if atom is HTTPProcessingStatus.BadFormat:
						status = atom
						await loop.sock_sendall(client, SERVER_BAD_REQUEST)
						keep_alive = False
					elif isinstance(atom, HTTPRequest):
						received += 1
						if options.logRequests:
							event(atom.method, atom.path)
						keep_alive = atom.keepAlive
						if await sendResponse(atom, app, writer, keepAlive=keep_alive):
							answered += 1
					if not keep_alive or writer.shouldClose:
						# Requests pipelined after a close are dropped
						break
			if logged(debug):
				debug(
					"Connection closed",
					Client=f"{id(client):x}",
					Status=status.name,
					Requests=received,
					Responses=answered,
				)
			if answered != received:
				warning("Incomplete responses", Requests=received, Responses=answered)
		except (BrokenPipeError, ConnectionResetError):
			debug("Client disconnected", Client=f"{id(client):x}")
		except asyncio.CancelledError:
			raise
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@classmethod
	async def Serve(cls, app: Application, options: ServerOptions = OPTIONS) -> None:
		"""Binds the listening socket, then accepts connections until a stop
		signal is received or `options.condition` turns false."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		try:
			server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
			server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
			server.bind((options.host, options.port))
			server.listen(options.backlog)
			server.setblocking(False)
		except OSError:
			server.close()
			raise
		port: int = server.getsockname()[1]
		loop = asyncio.get_running_loop()
		state = ServerState()
		# Signal handlers can only be installed from the main thread
		if options.stopSignals and threading.current_thread() is threading.main_thread():
			for signal in (SIGINT, SIGTERM):
				loop.add_signal_handler(signal, state.stop)
		loop.set_exception_handler(state.onException)
		tasks: set[asyncio.Task[None]] = set()

		await app.start()
		info("Server listening", icon="🚀", Host=options.host, Port=port)
		print(f"Ready at http://localhost:{port}", flush=True)
		if options.onReady:
			options.onReady(port)
		try:
			while state.isRunning and (not options.condition or options.condition()):
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling
					)
				except (asyncio.TimeoutError, TimeoutError):
					continue
				except OSError as e:
					if e.errno == errno.EMFILE:
						# Out of file descriptors, we wait for connections to close
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				task = loop.create_task(
					cls.OnRequest(app, client, loop=loop, options=options)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)
			await app.stop()


def run(
	*components: Application | Service,
	host: str = OPTIONS.host,
	port: int = OPTIONS.port,
	backlog: int = OPTIONS.backlog,
	condition: Callable[[], bool] | None = None,
	polling: float = OPTIONS.polling,
	logRequests: bool = OPTIONS.logRequests,
	keepalive: float = OPTIONS.keepalive,
	onReady: Callable[[int], None] | None = None,
) -> None:
	"""Serves the given services until stopped. Raises `OSError` when the
	address can't be bound."""
	unlimit(LimitType.Files)
	options = OPTIONS._replace(
		host=host,
		port=port,
		backlog=backlog,
		condition=condition,
		polling=polling,
		logRequests=logRequests,
		keepalive=keepalive,
		onReady=onReady,
	)
	try:
		asyncio.run(AIOSocketServer.Serve(mount(*components), options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
