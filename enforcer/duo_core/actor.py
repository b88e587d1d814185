"""
PollingActor — owns the Duolingo client and is the only writer of status.

One background thread. It blocks in exactly one place: waiting on the
command channel with a timeout equal to the time left until the next
scheduled poll. Commands and timer polls therefore never overlap.

  startup         build client from the initial JWT   → READY / UNINITIALIZED
  UpdateCredential  build a fresh client               → READY on success only
  ForcePoll       poll now
  timer           poll every `interval` seconds
  Shutdown / channel closed                            → STOPPED
"""

import enum
import threading
import time
from datetime import date

from .api import DuolingoClient
from .commands import CLOSED, ForcePoll, Shutdown, UpdateCredential
from .config import log
from .constants import DAILY_XP_REQUIREMENT, JWT_UPDATED_OK, NO_CLIENT_ERROR, POLL_INTERVAL_SEC
from .errors import ChannelError, EnforcerError, NetworkError, PersistenceError
from . import marker


class ActorState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    STOPPED = "stopped"


def _resolve(reply, result=None, error=None):
    if reply is None or not reply.set_running_or_notify_cancel():
        return
    if error is not None:
        reply.set_exception(error)
    else:
        reply.set_result(result)


class PollingActor:
    def __init__(
        self,
        store,
        channel,
        initial_jwt=None,
        requirement=DAILY_XP_REQUIREMENT,
        interval=POLL_INTERVAL_SEC,
        done_file=None,
        client_factory=DuolingoClient,
        token_saver=None,
        clock=time.monotonic,
        today=date.today,
    ):
        self._store = store
        self._channel = channel
        self._initial_jwt = initial_jwt
        self._requirement = requirement
        self._interval = interval
        self._done_file = done_file
        self._client_factory = client_factory
        self._token_saver = token_saver
        self._clock = clock
        self._today = today

        self._client = None
        self._thread = None
        self._initialized = False
        # Why there is no client, shown alongside "no client available"
        self._no_client_reason = None
        self._retry_initial = False
        self.state = ActorState.UNINITIALIZED

    @property
    def client(self):
        return self._client

    # ─── Thread lifecycle ────────────────────────────────────────

    def start(self):
        if self._thread is not None:
            raise RuntimeError("PollingActor already started")
        self._thread = threading.Thread(target=self.run, name="polling-actor")
        self._thread.start()
        return self._thread

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self):
        """Main loop. Returns once stopped."""
        self.initialize()
        log.info("Polling actor started (interval=%ss, requirement=%d XP)",
                 self._interval, self._requirement)

        next_poll = self._clock()
        while self.state is not ActorState.STOPPED:
            timeout = max(0.0, next_poll - self._clock())
            cmd = self._channel.receive(timeout=timeout)

            if cmd is None:
                self.poll()
                next_poll += self._interval
                now = self._clock()
                if next_poll <= now:
                    next_poll = now + self._interval
                continue

            if cmd is CLOSED:
                log.info("Command channel closed — stopping actor")
                self._stop()
                break

            self.handle(cmd)

        self._reject_pending()
        log.info("Polling actor stopped")

    def _stop(self):
        self.state = ActorState.STOPPED
        self._channel.close()
        if self._client is not None:
            self._client.close()

    def _reject_pending(self):
        for cmd in self._channel.drain():
            _resolve(getattr(cmd, "reply", None),
                     error=ChannelError("polling actor stopped"))

    # ─── Client construction ─────────────────────────────────────

    def initialize(self):
        """Build the first client from the initial credential. Runs once."""
        if self._initialized:
            return
        self._initialized = True
        if not self._initial_jwt:
            log.warning("No JWT configured — waiting for one via /api/update_jwt")
        self._build_initial_client()

    def _build_initial_client(self):
        try:
            client = self._client_factory(self._initial_jwt or "")
        except EnforcerError as e:
            log.warning("Client init failed: %s", e)
            self._init_failed(e, retry=isinstance(e, NetworkError))
            return False
        except Exception as e:
            log.error("Unexpected client init error: %s", e, exc_info=True)
            self._init_failed(e, retry=False)
            return False

        self._client = client
        self._retry_initial = False
        self._no_client_reason = None
        self.state = ActorState.READY
        log.info("Client ready for user %s", client.user_id)
        return True

    def _init_failed(self, error, retry):
        self._no_client_reason = f"init error: {error}"
        self._retry_initial = retry
        self._store.set_error(self._no_client_reason)
        self.state = ActorState.UNINITIALIZED

    def _update_credential(self, new_jwt):
        try:
            client = self._client_factory(new_jwt)
        except EnforcerError as e:
            # Last known good client stays in place
            log.warning("JWT update failed: %s", e)
            self._update_failed(e)
            return e
        except Exception as e:
            log.error("Unexpected JWT update error: %s", e, exc_info=True)
            self._update_failed(e)
            return EnforcerError(str(e))

        old, self._client = self._client, client
        if old is not None:
            old.close()
        self._retry_initial = False
        self._no_client_reason = None
        self.state = ActorState.READY
        self._store.set_error(JWT_UPDATED_OK)
        log.info("JWT updated, client ready for user %s", client.user_id)

        if self._token_saver is not None:
            try:
                self._token_saver(new_jwt)
            except PersistenceError as e:
                log.warning("%s", e)
        return None

    def _update_failed(self, error):
        self._store.set_error(f"JWT update failed: {error}")
        if self._client is None:
            self._no_client_reason = f"JWT update failed: {error}"

    # ─── Commands ────────────────────────────────────────────────

    def handle(self, cmd):
        """Process one command. Returns False once the actor should stop."""
        if isinstance(cmd, UpdateCredential):
            error = self._update_credential(cmd.jwt)
            _resolve(cmd.reply, result=error is None, error=error)
        elif isinstance(cmd, ForcePoll):
            _resolve(cmd.reply, result=self.poll())
        elif isinstance(cmd, Shutdown):
            log.info("Shutdown command received")
            self._stop()
        else:
            log.warning("Ignoring unknown command %r", cmd)
        return self.state is not ActorState.STOPPED

    # ─── Poll ────────────────────────────────────────────────────

    def poll(self):
        """Fetch progress and update status. Returns the new snapshot."""
        if self._client is None and self._retry_initial:
            log.info("Retrying client init from the configured JWT")
            self._build_initial_client()
        if self._client is None:
            if self._no_client_reason:
                return self._store.set_error(f"{NO_CLIENT_ERROR} ({self._no_client_reason})")
            return self._store.set_error(NO_CLIENT_ERROR)

        try:
            progress = self._client.get_daily_progress()
        except EnforcerError as e:
            log.warning("Poll error: %s", e)
            return self._store.set_error(f"Poll error: {e}")
        except Exception as e:
            log.error("Unexpected poll error: %s", e, exc_info=True)
            return self._store.set_error(f"Poll error: {e}")

        status = self._store.apply_progress(progress, self._requirement)
        log.info("Poll OK | xp=%d/%d | blocked=%s",
                 status.xp_today, self._requirement, status.blocked)

        if self._done_file is None:
            return status
        try:
            if status.blocked:
                marker.remove_done(self._done_file)
            else:
                marker.write_done(self._done_file, self._today())
        except PersistenceError as e:
            log.warning("%s", e)
            status = self._store.set_error(str(e))
        return status
