# shortlink

A small URL shortener served over HTTP with Flask. Links are stored in
SQLite; each one is reachable under a short alias, either chosen by the
client or generated at random (five ASCII letters and digits).

## Installing

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Configuration

The service reads a YAML file whose path is given in the `CONFIG_PATH`
environment variable:

```yaml
env: local            # local, dev or prod
storage_path: ./storage/storage.db
http_server:
  address: localhost:8080
  timeout: 4s
  idle_timeout: 60s
  user: admin
  password: password
```

- `storage_path`, `http_server.user` and `http_server.password` are
  required; a missing one raises `shortlink.config.ConfigError`.
- `env` defaults to `development`, `address` to `localhost8080`,
  `timeout` to `4s` and `idle_timeout` to `60s`.
- The `ENV` and `HTTP_SERVER_PASSWORD` environment variables override
  the values from the file.
- Durations use the `4s`, `1m30s`, `500ms` form (units `ns`, `us`,
  `ms`, `s`, `m`, `h`); a bare number is read as nanoseconds.
  `shortlink.config.parse_duration` turns them into seconds.

`shortlink.config.must_load()` loads the file named by `CONFIG_PATH`;
`shortlink.config.load_config(path, environ)` loads any file.

## Running

```
CONFIG_PATH=./config/local.yaml shortlink
```

The command prints the configuration error and exits with status 1 if
the configuration cannot be loaded, and exits with status 1 if the
storage cannot be opened. The address must have the `host:port` form.

Logs go to standard output as `[time] LEVEL: message` followed by the
record's attributes as indented JSON; levels and messages are coloured
when standard output is a terminal. In `prod` the log shows info and
above; in every other environment debug logs are shown too. Each
request is logged on completion with its method, path, host, remote
address, user agent, request id (taken from `X-Request-Id` when sent),
status, size and duration.

## API

Every route requires HTTP basic authentication with the configured user
and password; without it the reply is `401` with
`WWW-Authenticate: Basic realm="url-shortener"`.

Save a link:

```
POST /url
{"url": "https://example.com/some/long/path", "alias": "ex"}
```

`alias` is optional. The reply is `{"status": "Ok", "alias": "ex"}`, or
`{"status": "Error", "error": "..."}` when the body cannot be decoded,
`url` is missing or not a valid URL, or the alias is already taken.

Follow a link:

```
GET /ex
```

answers with a `302 Found` redirect to the stored URL, or with
`{"status": "Error", "error": "no url  belong to this alias"}` when the
alias is unknown.

Delete a link:

```
DELETE /url/ex
```

answers `{"status": "Ok"}`; deleting an unknown alias is not an error.

Error replies are sent with status `200`; the `status` field tells
success from failure.

## Using it as a library

```python
from shortlink.storage import Storage, NotFoundError

with Storage("links.db") as storage:
    storage.save_url("https://example.com", "ex")
    print(storage.get_url("ex"))
    storage.delete_url("ex")
```

`Storage.save_url` raises `URLExistsError` for a taken alias and
`Storage.get_url` raises `NotFoundError` for an unknown one; both derive
from `StorageError`.

`shortlink.app.create_app(config, storage, logger)` builds the Flask
application for use under any WSGI server, and
`shortlink.app.setup_logger(env, stream)` builds the logger it expects.
The views can also be made on their own with
`shortlink.handlers.make_save_handler`, `make_redirect_handler` and
`make_delete_handler`, over any object with the matching storage method.

## Limits

- The `shortlink` command serves with Flask's built-in development
  server. `timeout` and `idle_timeout` are read from the configuration
  but not applied to it.
- There is no command to list stored links or to manage the database
  beyond the HTTP API.