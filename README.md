# svctemplate

A small skeleton for back-end services. It brings together:

- **Error codes** (`svctemplate.gcode`): `Code` is a frozen value holding a
  numeric business code, the HTTP status it maps to, a short message, and an
  optional reason and metadata. Common codes are predefined as module
  constants (`CODE_OK`, `CODE_INVALID_REQUEST`, `CODE_NOT_FOUND`,
  `CODE_INTERNAL_ERROR` and others). `new` builds a code, `with_code` copies
  one with a reason and metadata filled in, and `status_text` returns the
  standard text of an HTTP status (or `""` when it is unknown). `HttpStatus`
  lists the HTTP statuses.
- **Chained errors** (`svctemplate.gerror`): `GError` is an exception that
  records the call stack where it was made, can wrap another exception, and
  carries a `Code`. `new`, `newf`, `wrap`, `wrapf`, `new_code`, `new_codef`,
  `wrap_code`, `wrap_codef` and their `_skip` forms build them; the wrapping
  helpers return `None` when given `None`, and `wrap`/`wrapf` keep the code of
  the wrapped error. `code`, `cause`, `stack`, `current`, `next_error` and
  `has_stack` inspect any exception. Formatting a `GError` with `"-"` gives
  only its own text, `"+s"` its stack and `"+v"` both.
- **Configuration** (`svctemplate.config`): `load_config` reads a YAML file
  and `parse_config` an already parsed mapping into a `Bootstrap` with
  `server`, `data` and `job` sections. Timeouts may be numbers of seconds or
  durations such as `1s`, `500ms` or `1m30s`.
- **JSON routes** (`svctemplate.route`): describe routes as `GroupUrl` and
  `Url` values and register them on a Flask app with `mk_handler`. A JSON
  handler returns `(response, error)`; the reply's HTTP status is that of
  the error's code, `500` for an error without a code, and `200` when there
  is no error. An unknown method raises `ValueError`.
- **Servers** (`svctemplate.server`): `HttpServer` serves a WSGI app in a
  background thread, `GrpcServer` runs a gRPC server, and `new_gin_app` builds
  the routed Flask app with CORS, `/healthy` and a JSON not-found fallback.
  `new_all_http_server` and `new_grpc_server` create them from the `server`
  section of the configuration.
- **Scheduled jobs** (`svctemplate.worker`): `CronSchedule` parses standard
  five-field cron expressions (with month and weekday names, ranges, lists,
  steps and descriptors such as `@daily` and `@hourly`), and `CronWorker`
  runs named jobs on them in a background thread.
- **Assembly** (`svctemplate.app`): `wire_app` builds an `App` holding every
  server and the job worker, and `main` is the command below.

## Installation

```
pip install .
```

## Running the service

```
svctemplate --conf configs/config.yaml
```

`-conf` is accepted as well; without it the path `../../configs/config.yaml`
is used. The service loads its configuration, starts the plain HTTP server,
the routed HTTP server, the gRPC server and the job worker, logs to standard
output, and runs until it gets SIGINT or SIGTERM. An address left out of the
configuration means any free port.

A configuration file looks like this:

```yaml
server:
  http:
    network: tcp
    addr: 0.0.0.0:8000
    timeout: 1s
  gin:
    network: tcp
    addr: 0.0.0.0:8080
    timeout: 1s
  grpc:
    network: tcp
    addr: 0.0.0.0:9000
    timeout: 1s
data: {}
job:
  jobs:
    - name: one
      schedule: "*/1 * * * *"
```

The only job known by name is `one`, which prints the current Unix time.
A name with no matching job, or a schedule that does not parse, is logged as
a warning and skipped.

## Endpoints of the routed server

| Path          | Reply |
|---------------|-------|
| `GET /healthy` | `{"is_alive": true}` |
| `GET /api/hello` | with a JSON object as body: `{"code": 0, "message": "OK"}`; with an empty or unreadable body: status 400 and `{"code": 66, "message": "Invalid Request: ..."}` |
| anything else | status 404 with body `null` |

Requests carrying an `Origin` header get `Access-Control-Allow-Origin: *`,
and `OPTIONS` preflight requests are answered with status 204.

The plain HTTP server answers every request with `404 page not found`.

## Using the error helpers

```python
from svctemplate import gcode, gerror

try:
    raise gerror.new_code(gcode.CODE_NOT_FOUND, "user missing")
except Exception as exc:
    wrapped = gerror.wrap(exc, "loading profile")
    print(str(wrapped))                  # loading profile: user missing
    print(gerror.code(wrapped).message)  # Not Found, kept through the wrap
    print(gerror.stack(wrapped))         # each level with where it was made
```

## What it does not do

- The gRPC server has no services registered; it only listens.
- The data layer (`svctemplate.data`) holds no database client, and
  `HelloUsecase.hello` only counts requests and returns an empty greeting.
- `CronWorker.run_srv` and `CronWorker.heart_beat` only log.

## Running the tests

```
pip install .[test]
pytest
```