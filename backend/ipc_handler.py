"""
Line-delimited JSON-RPC 2.0 transport for the chart backend.

stdin carries one request per line, stdout one response per line. stderr
carries logs and the READY handshake.
"""
import sys
import json
import asyncio
import logging
import traceback
from typing import Dict, Any, Optional, Callable, Awaitable
from datetime import datetime
import signal

from core.dataset import convert_to_json_serializable
from core.errors import InvalidInputError

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
REQUEST_TIMEOUT = -32000

# Exceptions reported to the caller as bad params rather than server faults
CALLER_ERRORS = (InvalidInputError, ValueError, TypeError, FileNotFoundError)

SHUTDOWN_GRACE_SECONDS = 10.0


def success_response(request_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result, "error": None}


def error_response(request_id: Any, code: int, message: str, data: Any = None) -> Dict[str, Any]:
    error = {"code": code, "message": message}
    if data:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "result": None, "error": error}


class IPCHandler:
    """
    Dispatches JSON-RPC requests to registered async command handlers.

    At most `max_concurrent_requests` handlers run at once and each is
    cancelled after `request_timeout` seconds.
    """

    def __init__(self, max_concurrent_requests: int = 5, request_timeout: float = 30.0):
        self.max_concurrent_requests = max_concurrent_requests
        self.request_timeout = request_timeout
        self.handlers: Dict[str, Callable[..., Awaitable[Any]]] = {}
        self.running = False
        self.in_flight = 0
        self.slots = asyncio.Semaphore(max_concurrent_requests)
        self.idle = asyncio.Event()
        self.idle.set()
        self.shutdown_event = asyncio.Event()

        logger.info(f"IPCHandler ready: {max_concurrent_requests} concurrent requests, "
                    f"{request_timeout}s timeout")

    def register_handler(self, command: str, handler: Callable[..., Awaitable[Any]]):
        self.handlers[command] = handler
        logger.debug(f"Registered handler for command: {command}")

    # ========== Transport ==========

    async def start(self):
        """Serve stdin until EOF or shutdown."""
        self.running = True

        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            try:
                for sig in (signal.SIGTERM, signal.SIGINT):
                    loop.add_signal_handler(sig, lambda: asyncio.create_task(self.shutdown()))
            except NotImplementedError:
                logger.warning("Signal handlers not supported on this platform/event loop")

        try:
            await self._serve()
        finally:
            await self.shutdown()

    async def _serve(self):
        loop = asyncio.get_running_loop()
        pending = set()

        print("READY", file=sys.stderr, flush=True)
        logger.info("Waiting for requests on stdin")

        while self.running:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                logger.info("stdin closed")
                break

            line = line.strip()
            if line:
                task = asyncio.create_task(self._dispatch(line))
                pending.add(task)
                task.add_done_callback(pending.discard)

    async def _dispatch(self, line: str):
        async with self.slots:
            self.in_flight += 1
            self.idle.clear()
            try:
                response = await self.handle_line(line)
                await self._emit(response)
            finally:
                self.in_flight -= 1
                if self.in_flight == 0:
                    self.idle.set()

    async def _emit(self, response: Dict[str, Any]):
        try:
            encoded = json.dumps(response, allow_nan=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Response {response.get('id')} is not JSON-encodable: {e}")
            encoded = json.dumps(error_response(response.get("id"), INTERNAL_ERROR,
                                                f"Internal error: unencodable result: {str(e)}"))
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_line, encoded)

    @staticmethod
    def _write_line(encoded: str):
        sys.stdout.write(encoded + "\n")
        sys.stdout.flush()

    # ========== Request handling ==========

    async def handle_line(self, line: str) -> Dict[str, Any]:
        """
        Run one request line through its handler.

        Args:
            line: Raw JSON-RPC request

        Returns:
            JSON-RPC response with a JSON-safe result, or an error object
        """
        try:
            request = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON: {e}")
            return error_response(None, PARSE_ERROR, f"Parse error: {str(e)}")

        if not isinstance(request, dict):
            return error_response(None, INVALID_REQUEST, "Invalid request: expected a JSON object")

        request_id = request.get("id")
        method = request.get("method")
        params = request.get("params") or {}

        if not method:
            return error_response(request_id, INVALID_REQUEST, "Invalid request: missing method")
        if not isinstance(params, (dict, list)):
            return error_response(request_id, INVALID_PARAMS, "Invalid params: expected an object or array")

        handler = self.handlers.get(method)
        if handler is None:
            return error_response(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        started = datetime.now()
        logger.info(f"Request {request_id}: {method}")

        try:
            call = handler(*params) if isinstance(params, list) else handler(**params)
            result = await asyncio.wait_for(call, timeout=self.request_timeout)
        except asyncio.TimeoutError:
            logger.error(f"Request {request_id} ({method}) exceeded {self.request_timeout}s")
            return error_response(request_id, REQUEST_TIMEOUT,
                                  f"Request timeout after {self.request_timeout}s")
        except CALLER_ERRORS as e:
            logger.warning(f"Rejected {method} request {request_id}: {e}")
            return error_response(request_id, INVALID_PARAMS, f"Invalid params: {str(e)}")
        except Exception as e:
            logger.error(f"Handler error for {method}: {e}", exc_info=True)
            return error_response(request_id, INTERNAL_ERROR, f"Internal error: {str(e)}",
                                  data={"traceback": traceback.format_exc()})

        elapsed = (datetime.now() - started).total_seconds()
        logger.info(f"Request {request_id} ({method}) done in {elapsed:.3f}s")

        return success_response(request_id, convert_to_json_serializable(result))

    async def shutdown(self):
        """Stop reading and wait for in-flight requests to drain."""
        if not self.running:
            return

        self.running = False
        logger.info(f"Shutting down IPC handler, {self.in_flight} request(s) in flight")

        try:
            await asyncio.wait_for(self.idle.wait(), timeout=SHUTDOWN_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning(f"Gave up waiting on {self.in_flight} request(s)")

        self.shutdown_event.set()
        logger.info("IPC handler stopped")
