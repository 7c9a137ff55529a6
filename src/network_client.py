# =============================================================================
# MODULE: network_client.py
# Connect Four - Reconnecting server channel for online play
# =============================================================================

import logging
from enum import Enum
from typing import Callable, List, Optional
from urllib.parse import urlencode

import socketio

from config import CONNECT_TIMEOUT, RECONNECT_DELAY, SOCKETIO_PATH
from messages import (ClientMessage, MessageFormatError, Reconnect,
                      encode_client_message, parse_server_message)

logger = logging.getLogger('SyncClient')

MALFORMED_FRAME_MESSAGE = 'Received an unreadable update from the server.'
CONNECTION_LOST_MESSAGE = 'Connection lost - reconnecting...'


class TransportError(Exception):
    """The transport could not establish a connection."""


class ConnectionState(str, Enum):
    DISCONNECTED = 'DISCONNECTED'
    CONNECTING = 'CONNECTING'
    OPEN = 'OPEN'


# =============================================================================
# TRANSPORT
# =============================================================================

class SocketIOTransport:
    """
    One python-socketio connection carrying JSON text frames on the
    'message' event. Reconnection is left to SyncClient.
    """

    def __init__(self, on_open, on_frame, on_close,
                 connect_timeout=CONNECT_TIMEOUT, socketio_path=SOCKETIO_PATH):
        self.connect_timeout = connect_timeout
        self.socketio_path = socketio_path
        self.sio = socketio.Client(reconnection=False)

        @self.sio.event
        def connect():
            on_open()

        @self.sio.event
        def disconnect(*args):
            on_close()

        @self.sio.on('message')
        def on_message(data):
            on_frame(data)

    def open(self, url):
        try:
            self.sio.connect(url, transports=['websocket'], socketio_path=self.socketio_path,
                             wait_timeout=self.connect_timeout)
        except socketio.exceptions.ConnectionError as e:
            raise TransportError(str(e)) from e

    def send(self, frame):
        try:
            self.sio.send(frame)
        except socketio.exceptions.SocketIOError as e:
            raise TransportError(str(e)) from e

    def close(self):
        self.sio.disconnect()


# =============================================================================
# SYNCHRONIZATION CLIENT
# =============================================================================

class SyncClient:
    """
    Owns at most one transport at a time. Any closure, including a failed
    open, schedules a single retry while auto-reconnect is armed. Every
    (re)open announces the identity and known match id to the server.

    Transport callbacks may arrive on socketio's threads; they are handed to
    the scheduler so all state changes happen in Scheduler.run_pending().
    """

    def __init__(self, server_url, scheduler, transport_factory=SocketIOTransport,
                 reconnect_delay=RECONNECT_DELAY):
        self.server_url = server_url
        self.scheduler = scheduler
        self.transport_factory = transport_factory
        self.reconnect_delay = reconnect_delay

        self.state = ConnectionState.DISCONNECTED
        self.identity: Optional[str] = None
        self.match_id: Optional[str] = None
        self.auto_reconnect = False

        self._transport = None
        self._token = None
        self._reconnect_task = None
        self._message_listeners: List[Callable] = []
        self._error_listeners: List[Callable] = []
        self._state_listeners: List[Callable] = []

    # --- Subscriptions ---

    def _subscribe(self, listeners, callback):
        listeners.append(callback)

        def unsubscribe():
            if callback in listeners:
                listeners.remove(callback)
        return unsubscribe

    def on_message(self, callback):
        return self._subscribe(self._message_listeners, callback)

    def on_error(self, callback):
        return self._subscribe(self._error_listeners, callback)

    def on_state_change(self, callback):
        return self._subscribe(self._state_listeners, callback)

    # --- Public API ---

    @property
    def connected(self):
        return self.state == ConnectionState.OPEN

    @property
    def reconnect_pending(self):
        return self._reconnect_task is not None and self._reconnect_task.pending

    def connect(self, identity):
        if self.state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            logger.debug(f"connect({identity}) ignored, already {self.state.value}")
            return
        self.identity = identity
        self.auto_reconnect = True
        self._cancel_reconnect()
        self._open()

    def disconnect(self):
        self.auto_reconnect = False
        self._cancel_reconnect()
        transport, self._transport, self._token = self._transport, None, None
        if transport is not None:
            logger.info("Closing server connection")
            try:
                transport.close()
            except Exception as e:
                logger.warning(f"Error while closing transport: {e}")
        self._set_state(ConnectionState.DISCONNECTED)

    def send(self, message: ClientMessage) -> bool:
        if self.state != ConnectionState.OPEN or self._transport is None:
            logger.debug(f"Dropping {type(message).__name__}, connection is {self.state.value}")
            return False
        logger.debug(f"Sending {message}")
        try:
            self._transport.send(encode_client_message(message))
        except TransportError as e:
            # The close event for this transport is still queued on the scheduler.
            logger.debug(f"Dropping {type(message).__name__}, transport closing: {e}")
            return False
        return True

    # --- Connection lifecycle ---

    def build_url(self):
        params = {'username': self.identity}
        if self.match_id:
            params['gameId'] = self.match_id
        separator = '&' if '?' in self.server_url else '?'
        return f"{self.server_url}{separator}{urlencode(params)}"

    def _open(self):
        self._reconnect_task = None
        self._set_state(ConnectionState.CONNECTING)

        token = object()
        transport = self.transport_factory(
            lambda: self._post(self._handle_open, token),
            lambda frame: self._post(self._handle_frame, token, frame),
            lambda: self._post(self._handle_close, token),
        )
        self._token, self._transport = token, transport

        url = self.build_url()
        logger.info(f"Connecting to {url}")
        try:
            transport.open(url)
        except TransportError as e:
            logger.warning(f"Connection failed: {e}")
            self._handle_close(token)

    def _post(self, handler, *args):
        self.scheduler.call_soon(lambda: handler(*args), handler.__name__)

    def _handle_open(self, token):
        if token is not self._token:
            return
        logger.info("Connection open")
        self._set_state(ConnectionState.OPEN)
        self.send(Reconnect(self.identity, self.match_id))

    def _handle_close(self, token):
        if token is not self._token:
            return
        was_open = self.state == ConnectionState.OPEN
        self._token, self._transport = None, None
        self._set_state(ConnectionState.DISCONNECTED)
        if was_open:
            logger.warning("Connection closed unexpectedly")
            self._notify_error(CONNECTION_LOST_MESSAGE)
        if self.auto_reconnect:
            self._schedule_reconnect()

    def _handle_frame(self, token, frame):
        if token is not self._token:
            return
        try:
            message = parse_server_message(frame)
        except MessageFormatError as e:
            logger.warning(f"Malformed frame ignored: {e}")
            self._notify_error(MALFORMED_FRAME_MESSAGE)
            return
        if message is None:
            logger.debug(f"Unrecognized frame ignored: {frame!r}")
            return
        for callback in list(self._message_listeners):
            callback(message)

    def _schedule_reconnect(self):
        if self.reconnect_pending:
            return
        logger.info(f"Reconnecting in {self.reconnect_delay}s")
        self._reconnect_task = self.scheduler.call_later(self.reconnect_delay, self._retry, 'reconnect')

    def _retry(self):
        self._reconnect_task = None
        if not self.auto_reconnect or self.state != ConnectionState.DISCONNECTED:
            return
        self._open()

    def _cancel_reconnect(self):
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            self._reconnect_task = None

    # --- Notifications ---

    def _set_state(self, state):
        if state == self.state:
            return
        self.state = state
        for callback in list(self._state_listeners):
            callback(state)

    def _notify_error(self, message):
        for callback in list(self._error_listeners):
            callback(message)
