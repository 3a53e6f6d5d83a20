# imagegate

Building blocks for an image-resizing HTTP service in the style of a
thumbnailing proxy. The library uses only the Python standard library.

## Modules

### `imagegate.imagepath`

Endpoint paths such as
`unsafe/fit-in/300x200/filters:format(webp)/example.com/a.jpg`.

- `params`: the frozen dataclasses `Params` and `Filter`, and the keyword
  constants `TRIM_BY_TOP_LEFT`, `TRIM_BY_BOTTOM_RIGHT`, `H_ALIGN_LEFT`,
  `H_ALIGN_RIGHT`, `V_ALIGN_TOP` and `V_ALIGN_BOTTOM`.
- `parse`: `parse(path)` returns a new `Params`. `apply(params, path)` parses
  on top of an existing one. `parse_filters(text)` splits
  `filters:a(x):b(y)/image` into a tuple of `Filter` and the image part.
- `generate`: `generate_path(params)` builds the path without a signature.
  `generate_unsafe(params)` prefixes it with `unsafe/`. `generate(params, signer)`
  prefixes it with `signer.sign(path)`, or with `unsafe/` when the signer is
  `None`. An image containing `?` or starting with a keyword such as `trim/`
  or `smart/` is query-escaped.
- `signer`: `HMACSigner(secret, digestmod=hashlib.sha1, truncate=0)` with a
  `sign(path)` method that returns URL-safe base64. `default_signer(secret)`
  returns the SHA1 signer.
- `normalize`: `normalize(image, safe_chars=None)` cleans `..` and `.` segments,
  removes line breaks, trims slashes and percent-escapes everything except
  letters, digits, `/`, `-`, `_`, `.`, `~` and any extra characters given as
  `SafeChars("...")`. Escaped spaces become `+`. The module also provides
  `escape` and `clean_breaks`.
- `hasher`: storage keys. `digest_storage_hasher(image)` and
  `digest_result_storage_hasher(params)` return `ab/cd/<rest of sha1>`.
  `suffix_result_storage_hasher(params)` and
  `size_suffix_result_storage_hasher(params)` return the image name with a
  20-character digest suffix, plus `_<width>x<height>` for the size variant,
  before the extension. The extension becomes `.json` for meta requests and
  follows a `format(...)` filter otherwise.

### `imagegate.seekstream`

- `buffer`: `MemoryBuffer(size)` has a fixed capacity. `TempFileBuffer(dir=None,
  prefix="imagegate-")` is backed by a temporary file. Both have `read`, `write`,
  `seek` and `clear`. `seek` raises `ValueError("invalid argument")` for a
  negative position.
- `stream`: `SeekStream(source, buffer)` makes a forward-only source seekable.
  The source needs `read(n)` and `close()`. It provides `read`, `seek`, `close`,
  `remaining()`, `size()` and works as a context manager. After `close()`,
  `read` and `seek` raise `ValueError`.

### `imagegate.server`

- `realip`: `is_private_ip(address)` checks loopback, private, carrier-grade
  NAT and link-local blocks, and raises `ValueError` for a string that is not
  an IP address. `real_ip(headers, remote_addr)` returns the first public
  address in `X-Forwarded-For`, falling back to `X-Real-Ip` or the peer address.
- `middleware`: WSGI helpers.
  - `handle_ok` answers with an empty 200.
  - `path_handler(method, handlers)` routes fixed paths to their own apps.
  - `strip_query_string(app)` sends a 307 redirect to the same URL without its
    query.
  - `recover_panics(app, logger=None)` turns exceptions into a JSON 500 response
    `{"message": ..., "status": 500}`.
  - `access_log(app, logger=None)` logs one `access` record per request.
  - `write_json(environ, start_response, status, payload)` sends a JSON response.
  - `ServerErrorLog(logger=None).write(message)` logs server errors, demoting
    known harmless messages to debug.

### `imagegate.loader.sources`

- `AllowedSource`, built with `host_pattern_allowed_source("*.example.com")`
  (a host glob) or `regexp_allowed_source(pattern)` (a regex on the full URL).
- `is_url_allowed(url, sources)` is true when no sources are given or any of
  them matches.
- `parse_content_type` and `validate_content_type(content_type, accepts)`
  match media types against globs such as `image/*`.
- `random_proxy_func(proxy_urls, hosts)` returns a function mapping a URL to a
  randomly chosen proxy URL, or `None`.

### `imagegate.storage.filestorage`

`FileStorage(base_dir, *, path_prefix="", blacklists=(), mkdir_permission="",
write_permission="", save_err_if_exists=False, safe_chars="", expiration=None)`
stores images as files.

- Image keys are normalized and must start with the path prefix.
- Paths containing a dot file (`/.`) or matching a blacklist regex are refused.
- Permissions are strings such as `"0755"`.
- `expiration` is a `timedelta` or a number of seconds.

Methods: `path(image)` returns the file path or `None`. `get`, `put`, `delete`
and `stat` (which returns a `Stat`) raise `InvalidPathError`, `NotFoundError`
or `ExpiredError`, all subclasses of `StorageError`.

## Examples

```python
from imagegate.imagepath.generate import generate
from imagegate.imagepath.parse import parse
from imagegate.imagepath.signer import default_signer

params = parse("unsafe/fit-in/300x200/smart/example.com/photo.jpg")
print(params.width, params.height, params.fit_in, params.image)

signer = default_signer("secret")
print(generate(params, signer))
```

```python
import tempfile

from imagegate.storage.filestorage import FileStorage, NotFoundError

storage = FileStorage(tempfile.mkdtemp(), path_prefix="/foo")
storage.put("/foo/a/b.jpg", b"data")
print(storage.get("/foo/a/b.jpg"))
try:
    storage.get("/foo/missing")
except NotFoundError:
    pass
```

## What it does not do

This is a library of parts, not a running service. It does not provide:

- a command or an HTTP server that serves images;
- image processing such as resizing, cropping or filters;
- an HTTP client that fetches source images;
- metrics;
- cloud object storage.

The `loader.sources` helpers decide which URLs, content types and proxies are
acceptable. The actual fetching is left to the caller.

## Tests

```
pip install -e .[test]
pytest
```