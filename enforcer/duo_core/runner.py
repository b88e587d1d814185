"""
Entry point: wire store + channel + actor + web server, run until a
signal arrives, then shut everything down in order.

Exit codes: 0 on graceful shutdown, 1 on bad config or bind failure.
"""

import argparse
import functools
import signal
import threading

from werkzeug.serving import make_server

from .actor import PollingActor
from .api import DuolingoClient
from .commands import CommandChannel, Shutdown
from .config import log, setup_logging, load_config, load_token, save_token
from .constants import APP_VERSION
from .errors import ChannelError, ConfigError, PersistenceError
from .state import StatusStore
from .web import create_app
from . import marker


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="duo-enforcer",
        description="Block until today's Duolingo XP quota is met.",
    )
    parser.add_argument("--host", help="listen address (default from config)")
    parser.add_argument("--port", type=int, help="listen port (default from config)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser.parse_args(argv)


def build_actor(config, store, channel, client_factory=None):
    if client_factory is None:
        client_factory = functools.partial(DuolingoClient, timeout=config["apiTimeoutSec"])
    return PollingActor(
        store,
        channel,
        initial_jwt=load_token(config),
        requirement=config["dailyXpRequirement"],
        interval=config["pollIntervalSec"],
        done_file=config["doneFile"],
        client_factory=client_factory,
        token_saver=lambda token: save_token(config, token),
    )


def stop_actor(actor, channel, timeout=10):
    """Send Shutdown, close the channel, join the thread."""
    if not channel.closed:
        try:
            channel.send(Shutdown())
        except ChannelError as e:
            log.warning("Could not send Shutdown: %s", e)
    channel.close()
    actor.join(timeout)
    if actor.is_alive():
        log.warning("Polling actor did not stop within %ss", timeout)


def block_on_exit(config):
    """Leaving the process always re-arms the block."""
    try:
        marker.remove_done(config["doneFile"])
    except PersistenceError as e:
        log.warning("%s", e)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    log.info("Duolingo Enforcer v%s", APP_VERSION)

    try:
        config = load_config()
    except ConfigError as e:
        log.error("Bad configuration: %s", e)
        return 1
    if args.host:
        config["host"] = args.host
    if args.port:
        config["port"] = args.port

    store = StatusStore()
    channel = CommandChannel()
    actor = build_actor(config, store, channel)
    actor.start()

    app = create_app(store, channel, config)
    try:
        server = make_server(config["host"], config["port"], app, threaded=True)
    except (OSError, SystemExit) as e:
        log.error("Failed to bind to %s:%s: %s", config["host"], config["port"], e)
        stop_actor(actor, channel)
        return 1

    stop_event = threading.Event()

    def on_signal(signum, frame):
        log.info("Received signal %s — shutting down", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)

    server_thread = threading.Thread(target=server.serve_forever, name="web-server")
    server_thread.start()
    log.info("Listening on http://%s:%s", config["host"], config["port"])

    try:
        while not stop_event.wait(1.0):
            pass
    finally:
        server.shutdown()
        server_thread.join()
        stop_actor(actor, channel)
        block_on_exit(config)
        log.info("Shut down cleanly")
    return 0
