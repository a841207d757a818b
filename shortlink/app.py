"""Application wiring and the command that runs the link-shortening server."""

from __future__ import annotations

import argparse
import hmac
import logging
import sys
from typing import TextIO

from flask import Flask, Response, request

from shortlink.config import Config, ConfigError, must_load
from shortlink.handlers import make_delete_handler, make_redirect_handler, make_save_handler
from shortlink.middleware import install_request_logging
from shortlink.prettylog import PrettyFormatter, err_attr
from shortlink.storage import Storage, StorageError

AUTH_REALM = "url-shortener"
_LEVELS = {"local": logging.DEBUG, "dev": logging.DEBUG, "prod": logging.INFO}


def setup_logger(env: str, stream: TextIO | None = None) -> logging.Logger:
    """Create a logger writing pretty lines to ``stream``, tagged with ``env``.

    ``prod`` logs from INFO up; every other environment logs from DEBUG up.
    """
    stream = sys.stdout if stream is None else stream
    logger = logging.Logger(f"shortlink.{env}", _LEVELS.get(env, logging.DEBUG))
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(PrettyFormatter(use_color=bool(isatty and isatty())))
    logger.addHandler(handler)

    def _bind_env(record: logging.LogRecord) -> bool:
        record.attrs = {"env": env, **(getattr(record, "attrs", None) or {})}
        return True

    logger.addFilter(_bind_env)
    return logger


def create_app(config: Config, storage: Storage, logger: logging.Logger) -> Flask:
    """Build the Flask application; every route requires basic authentication."""
    app = Flask(__name__)
    install_request_logging(app, logger)
    server = config.http_server

    @app.before_request
    def _check_credentials() -> Response | None:
        auth = request.authorization
        if (
            auth is not None
            and auth.username == server.user
            and hmac.compare_digest(server.password.encode(), (auth.password or "").encode())
        ):
            return None
        return Response(status=401, headers={"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'})

    app.add_url_rule("/url/", "save_url", make_save_handler(logger, storage),
                     methods=["POST"], strict_slashes=False)
    app.add_url_rule("/url/<alias>", "delete_url", make_delete_handler(logger, storage),
                     methods=["DELETE"])
    app.add_url_rule("/<alias>", "redirect_url", make_redirect_handler(logger, storage),
                     methods=["GET"])
    return app


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or (port and not port.isdigit()):
        raise ValueError(f"address {address}: invalid address")
    return host or "0.0.0.0", int(port or 0)


def main(argv: list[str] | None = None) -> int:
    """Run the server configured by the file named in ``CONFIG_PATH``."""
    argparse.ArgumentParser(
        prog="shortlink", description="URL shortening service configured by CONFIG_PATH."
    ).parse_args(argv)
    try:
        config = must_load()
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    logger = setup_logger(config.env, sys.stdout)
    logger.info("starting project")
    logger.debug("debug logs are enabled")
    logger.error("error logs are enabled")
    try:
        storage = Storage(config.storage_path)
    except StorageError as exc:
        logger.error("failed to init storage", extra={"attrs": err_attr(exc)})
        return 1

    with storage:
        app = create_app(config, storage, logger)
        address = config.http_server.address
        logger.info("starting server", extra={"attrs": {"address": address}})
        try:
            host, port = _split_address(address)
            app.run(host=host, port=port, threaded=True)
        except (OSError, ValueError) as exc:
            logger.error("error starting server", extra={"attrs": err_attr(exc)})
    logger.error("server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())