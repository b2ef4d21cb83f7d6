# xtwsd

Building blocks for a tide and current station web service based on XTide
harmonics data, and `nos2xt`, a command-line client that fetches station
definitions from the NOS CO-OPS metadata service and posts them to a
running xtwsd server.

## Installation

    pip install .

To run the test suite:

    pip install ".[test]"
    pytest

## What is in the package

- `xtwsd.jutil` – lenient accessors for decoded JSON objects: `get_int`,
  `get_num`, `get_bool` and `get_str`. A missing or mistyped property gives
  `0`, `0.0`, `False` or `""` (`get_str` raises `TypeError` only when the
  property exists but is not a string). `get_string(j, name, max_size)`
  returns the string cut to at most `max_size - 1` UTF-8 bytes.
- `xtwsd.xtutil` – `Coordinates` (`lat`, `lng`), great-circle distance in
  kilometres (`distance_earth`), degree/radian conversion (`deg2rad`,
  `rad2deg`), UTF-8 validation (`utf8_check_is_valid`, which rejects
  encoded surrogates) and percent-encoding of everything but ASCII letters,
  digits and `-_.~` (`url_encode`).
- `xtwsd.nearstations` – `NearStations(lat, lng, max_stations)`, which keeps
  at most `max_stations` stations nearest to a point, nearest first, as
  `Node(distance, ref)` entries. Stations are any objects with a
  `coordinates` attribute; pass each to `check()`. It supports `len()`,
  iteration and indexing (an out-of-range index raises `IndexError`).
- `xtwsd.stdcapture` – `StdCapture`, which redirects file descriptors 1 and
  2 while capturing, so output from Python and from native code is both
  collected. Use it as a context manager, then read `get_capture()`.
- `xtwsd.jschema` – `get_json_schema(catalog)` builds the draft-07 JSON
  Schema for a station definition. The enumerations for countries, time
  zones, level and direction units, datums and constituents come from a
  `TideDbCatalog`; entry 0 of each table is treated as a placeholder and
  left out. Passing `None` gives `{}`. The `add_*_property` helpers used to
  build it are public too.
- `xtwsd.httpclient` – `HttpClient(host, protocol="http", port=None)`, a
  small synchronous HTTP/HTTPS client with `get`, `post` and `post_json`.
  Query parameters and headers set with `set_query_parameter` and
  `set_request_header` apply to the next request only. Requests return a
  `Response` with `status`, `headers`, `body`, `ok()`, `get_body()`,
  `as_json()` and `header(name)`.
- `xtwsd.nos2xt` – the conversion logic (`Converter`, `get_tz_name`,
  `get_datum_val`, `get_x_time_offset`) and the `nos2xt` command.

A few values:

```python
from xtwsd.xtutil import url_encode
from xtwsd.nos2xt import get_tz_name, get_x_time_offset

url_encode("Key West, FL")          # 'Key%20West%2C%20FL'
get_tz_name({"timezone": "EST"})    # ':America/New_York'
get_x_time_offset({"timeOffsetHighTide": -75}, "timeOffsetHighTide")  # -115 (HHMM)
```

## The nos2xt command

    nos2xt [stationId | -f stationListFile] [-p port] [-c country] [-u]

- `stationId` – a single NOS station id to import.
- `-f file` – import every station id listed in a text file, one per line.
  Lines starting with `#` are printed; a line starting with `@` sets the
  country name used for the stations that follow.
- `-p port` – port of the xtwsd server on 127.0.0.1 (default 8080).
- `-c country` – use this country name for every imported station.
- `-u` – convert and post stations even if the server already has them (by
  default such stations are skipped).

Reference stations are posted with their harmonic constants and datum
offset; subordinate stations with their time and level offsets. For a
subordinate station, its reference station is imported first when the
server does not have it yet. Examples:

    nos2xt 9710441 -p 8080
    nos2xt -f my_station_list.txt -p 8080

The command exits with status 1 if a station cannot be converted or
posted; when reading a list it stops at the first failure.

## What the package does not do

The package does not contain the xtwsd web service itself: there is no
HTTP server, no tide or current prediction, and no reading or writing of
XTide harmonics (`.tcd`) files. `nos2xt` needs such a server already
running, and `get_json_schema` needs the database's name tables handed to
it as a `TideDbCatalog`.