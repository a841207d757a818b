"""HTTP handlers that save, resolve and delete short links."""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol
from urllib.parse import urlsplit

from flask import jsonify, redirect, request
from flask.typing import ResponseReturnValue

from shortlink import response as resp
from shortlink.middleware import get_request_id
from shortlink.prettylog import err_attr
from shortlink.random_alias import new_random_string
from shortlink.storage import NotFoundError, StorageError, URLExistsError

ALIAS_LENGTH = 5


class URLSaver(Protocol):
    def save_url(self, url: str, alias: str) -> int: ...


class URLGetter(Protocol):
    def get_url(self, alias: str) -> str: ...


class URLDeleter(Protocol):
    def delete_url(self, alias: str) -> None: ...


@dataclass(frozen=True)
class SaveRequest:
    """Body of a save request; an empty alias asks for a random one."""

    url: str = ""
    alias: str = ""


def _log(logger: logging.Logger, level: int, message: str, **attrs: Any) -> None:
    logger.log(level, message, extra={"attrs": attrs})


def _decode_request(body: str) -> SaveRequest:
    try:
        data, _ = json.JSONDecoder().raw_decode(body.lstrip())
    except json.JSONDecodeError as exc:
        raise ValueError(str(exc)) from exc
    if data is None:
        return SaveRequest()
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    fields = {"url": "", "alias": ""}
    for key, value in data.items():
        name = key.lower()
        if name not in fields or value is None:
            continue
        if not isinstance(value, str):
            raise ValueError(f"field {key} must be a string")
        fields[name] = value
    return SaveRequest(**fields)


def _is_url(value: str) -> bool:
    text = value.lower()
    if text.startswith("file:"):
        return True
    try:
        parts = urlsplit(text)
    except ValueError:
        return False
    if not parts.scheme:
        return False
    opaque = bool(parts.path) and not parts.netloc and not parts.path.startswith("/")
    return bool(parts.netloc or parts.fragment or opaque)


def validate_save_request(payload: SaveRequest) -> list[resp.FieldError]:
    """Return the validation failures of ``payload``; empty when it is valid."""
    if not payload.url:
        return [resp.FieldError(field="URL", tag="required")]
    if not _is_url(payload.url):
        return [resp.FieldError(field="URL", tag="url")]
    return []


def _describe_failures(errors: list[resp.FieldError]) -> str:
    return "\n".join(
        f"Key: 'Request.{e.field}' Error:Field validation for '{e.field}' failed on the '{e.tag}' tag"
        for e in errors
    )


def make_save_handler(
    logger: logging.Logger, saver: URLSaver
) -> Callable[[], ResponseReturnValue]:
    """Build the view that stores a URL under a given or random alias."""
    op = "handlers.url.save.New"

    def save_url() -> ResponseReturnValue:
        base = {"op": op, "request_id": get_request_id()}

        try:
            req = _decode_request(request.get_data(as_text=True))
        except ValueError as exc:
            message = "failed to decode request body"
            _log(logger, logging.ERROR, message, **base, **err_attr(exc))
            return jsonify(resp.error_response(message).to_dict())

        _log(logger, logging.INFO, "request body decoded", **base, request=dataclasses.asdict(req))

        failures = validate_save_request(req)
        if failures:
            _log(logger, logging.ERROR, "invalid request", **base, error=_describe_failures(failures))
            return jsonify(resp.validation_error(failures).to_dict())

        alias = req.alias or new_random_string(ALIAS_LENGTH)

        try:
            row_id = saver.save_url(req.url, alias)
        except URLExistsError:
            message = "url already exists"
            _log(logger, logging.INFO, message, **base, url=req.url)
            return jsonify(resp.error_response(message).to_dict())
        except StorageError as exc:
            message = "failed to save url"
            _log(logger, logging.ERROR, message, **base, **err_attr(exc))
            return jsonify(resp.error_response(message).to_dict())

        _log(logger, logging.INFO, "url successfully saved", **base, id=row_id, url=req.url)
        return jsonify(dataclasses.replace(resp.ok(), alias=alias).to_dict())

    return save_url


def make_redirect_handler(
    logger: logging.Logger, getter: URLGetter
) -> Callable[[str], ResponseReturnValue]:
    """Build the view that redirects an alias to its stored URL."""
    op = "handlers.url.redirect.New"

    def redirect_url(alias: str = "") -> ResponseReturnValue:
        base = {"op": op, "request_id": get_request_id()}

        if not alias:
            _log(logger, logging.ERROR, "alias is empty", **base, alias=alias)
            return jsonify(resp.error_response("invalid request").to_dict())

        try:
            target = getter.get_url(alias)
        except NotFoundError:
            message = "no url  belong to this alias"
            _log(logger, logging.INFO, message, **base, alias=alias)
            return jsonify(resp.error_response(message).to_dict())
        except StorageError as exc:
            _log(logger, logging.ERROR, "failed to get url", **base, **err_attr(exc))
            return jsonify("internal server error")

        _log(logger, logging.INFO, "successfully got url", **base, url=target, alias=alias)
        return redirect(target, code=302)

    return redirect_url


def make_delete_handler(
    logger: logging.Logger, deleter: URLDeleter
) -> Callable[[str], ResponseReturnValue]:
    """Build the view that removes an alias."""
    op = "handlers.url.delete.New"

    def delete_url(alias: str = "") -> ResponseReturnValue:
        base = {"op": op, "request_id": get_request_id()}

        if not alias:
            _log(logger, logging.ERROR, "alias is empty", **base, alias=alias)
            return jsonify(resp.error_response("invalid request").to_dict())

        try:
            deleter.delete_url(alias)
        except NotFoundError:
            message = "url's not exist"
            _log(logger, logging.INFO, message, **base, alias=alias)
            return jsonify(resp.error_response(message).to_dict())
        except StorageError as exc:
            _log(logger, logging.ERROR, "failed to delete url", **base, **err_attr(exc))
            return jsonify(resp.error_response("internal error").to_dict())

        _log(logger, logging.INFO, "successfully deleted url", **base, alias=alias)
        return jsonify(resp.ok().to_dict())

    return delete_url