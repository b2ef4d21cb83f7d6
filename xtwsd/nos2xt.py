"""Copy station definitions from the NOS CO-OPS metadata service into xtwsd.

Station metadata, harmonic constants, datums and prediction offsets are
fetched over https, turned into the station documents the tide web service
accepts, and posted to a locally running server.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from .httpclient import HttpClient, Response
from .jutil import get_bool, get_int, get_num, get_str

__all__ = [
    "NOS_HOST",
    "LOCAL_HOST",
    "DEFAULT_PORT",
    "Converter",
    "get_tz_name",
    "get_datum_val",
    "get_x_time_offset",
    "print_usage",
    "main",
]

NOS_HOST = "tidesandcurrents.noaa.gov"
LOCAL_HOST = "127.0.0.1"
DEFAULT_PORT = "8080"

_STATIONS_PATH = "/mdapi/v1.0/webapi/stations/"

_USAGE = (
    "Usage: nos2xt [stationId|-f stationListFileName] <-p xtwsd_server_port> "
    "<-c countryNameToUse> <-u>\n"
    "   -f nnnnn Process a list of NOS station Ids from the text file nnnn\n"
    "   -p pppp Port number of xtwsd web service daemon (default 8080)\n"
    "   -c nnnn Force the country name to be nnnn\n"
    "   -u Update station Id(s) even if it already exists in database (default NO)\n"
    "      ^Warning! '-u' option may crash sever due to possible bug in libtcd\n"
    "   examples:\n"
    "      nos2xt 9710441 -p 8080\n\n"
    "      nos2xt -f my_station_list.txt -p 8080\n"
)

ClientFactory = Callable[..., Any]


def get_tz_name(jstat: dict[str, Any]) -> str:
    """Return the XTide time zone name for NOS station metadata."""
    if get_str(jstat, "timezone") == "EST":
        return ":America/New_York"
    correction = get_int(jstat, "timezonecorr")
    sign = "+" if correction > 0 else ""
    return f":Etc/GMT{sign}{correction}"


def get_datum_val(jdatums: Sequence[dict[str, Any]], name: str) -> float:
    """Return the value of the datum called ``name``, or 0.0 if it is absent."""
    for jdatum in jdatums:
        if get_str(jdatum, "name") == name:
            return get_num(jdatum, "value")
    return 0.0


def get_x_time_offset(j: dict[str, Any], name: str) -> int:
    """Convert an offset in minutes into XTide's signed HHMM form."""
    minutes = get_int(j, name)
    if minutes == 0:
        return 0
    sign = -1 if minutes < 0 else 1
    hours, mins = divmod(abs(minutes), 60)
    return sign * (hours * 100 + mins)


def _first_station(jresult: Any) -> dict[str, Any]:
    stations = jresult.get("stations") if isinstance(jresult, dict) else None
    if isinstance(stations, list) and stations and isinstance(stations[0], dict):
        return stations[0]
    return {}


class Converter:
    """Converts NOS stations and posts them to an xtwsd server on ``port``.

    ``specified_country``, when set, replaces the country of every station
    posted. ``last_ref_country`` remembers the country of the reference
    station most recently found or added, which subordinate stations inherit.
    """

    def __init__(
        self,
        port: str | int = DEFAULT_PORT,
        specified_country: str = "",
        client_factory: ClientFactory = HttpClient,
    ) -> None:
        self.port = str(port)
        self.specified_country = specified_country
        self.last_ref_country = ""
        self._client_factory = client_factory

    def _local(self) -> Any:
        return self._client_factory(LOCAL_HOST, "http", self.port)

    def _nos(self) -> Any:
        return self._client_factory(NOS_HOST, "https")

    def station_exists(self, station_id: str, silent: bool = False) -> bool:
        """Tell whether the server already holds ``station_id``."""
        if not silent:
            print(f"Checking for existence of reference station {station_id} - ", end="")
        resp: Response = self._local().get(f"/harmonics/{station_id}")
        exists = resp.ok()
        if not silent:
            print("already exists" if exists else "not in database")
        if exists:
            self.last_ref_country = get_str(resp.as_json(), "country")
        return exists

    def post_xtide(self, jxt: dict[str, Any]) -> bool:
        """Post a station document to the server; True if it was added."""
        print("Posting new data to XTide Web Service...")
        country = get_str(jxt, "country")
        if country != "USA":
            old_name = get_str(jxt, "name")
            if country not in old_name:
                jxt["name"] = f"{old_name}, {country}"

        print(json.dumps(jxt, indent=2, ensure_ascii=False))

        resp: Response = self._local().post_json("/harmonics", jxt)
        if not resp.ok():
            print(
                f"Unexpected result adding station: result code {resp.status}, "
                f"body: {resp.get_body()}"
            )
            return False

        result = resp.as_json()
        print(f"New station added at index {get_int(result, 'index')}")
        if get_bool(jxt, "referenceStation"):
            self.last_ref_country = get_str(jxt, "country")
        return True

    def convert_station(self, station_id: str, skip_existing: bool = True) -> bool:
        """Fetch NOS station ``station_id`` and post it; True on success."""
        if skip_existing and self.station_exists(f"NOS:{station_id}", silent=True):
            print(f"Station Id {station_id} already exists in XTide - skipping.", end="")
            return True

        nos = self._nos()
        print(f"Looking up station id {station_id}...")
        base = f"{_STATIONS_PATH}{station_id}"

        resp: Response = nos.get(f"{base}.json")
        if not resp.ok():
            print(f"Unexpected result - Station query returned code {resp.status}")
            return False

        jstat = _first_station(resp.as_json())
        jxt: dict[str, Any] = {
            "id": f"NOS:{station_id}",
            "name": get_str(jstat, "name"),
            "levelUnits": "feet",
            "type": "tide" if get_bool(jstat, "tidal") else "current",
            "source": {
                "context": "NOS",
                "name": "CO-OPS Metadata API",
                "stationId": station_id,
            },
            "comments": "nos2xt",
            "position": {"lat": jstat.get("lat"), "long": jstat.get("lng")},
        }

        if self.specified_country:
            jxt["country"] = self.specified_country
        else:
            state = get_str(jstat, "state")
            if len(state) == 2:
                jxt["country"] = "USA"
                jxt["name"] = f"{get_str(jstat, 'name')}, {state}"
            else:
                jxt["country"] = state

        jxt["timezone"] = get_tz_name(jstat)

        if "reference_id" not in jstat:
            return self._convert_reference(nos, base, jstat, jxt)
        return self._convert_subordinate(nos, base, jstat, jxt)

    def _convert_reference(
        self, nos: Any, base: str, jstat: dict[str, Any], jxt: dict[str, Any]
    ) -> bool:
        jxt["referenceStation"] = True
        print(f"Retrieving harmonic constants for reference station {get_str(jstat, 'name')}...")
        resp: Response = nos.get(f"{base}/harcon.json")
        if not resp.ok():
            print(f"Unexpected result - harmonic query returned code {resp.status}")
            return False

        print("Harmonic constants received.")
        jharm = resp.as_json()
        jxt["levelUnits"] = get_str(jharm, "units")
        constituents = []
        for jc in jharm.get("HarmonicConstituents") or []:
            amp = get_num(jc, "amplitude")
            epoch = get_num(jc, "phase_GMT")
            if amp != 0.0 or epoch != 0.0:
                constituents.append({"name": jc.get("name"), "amp": amp, "epoch": epoch})
        jxtharm: dict[str, Any] = {
            "confidence": 10,
            "datum": "Mean Lower Low Water",
            "zoneOffset": 0,
            "constituents": constituents,
        }

        print("Retrieving datum values for reference station...")
        resp = nos.get(f"{base}/datums.json")
        if not resp.ok():
            print(f"Unexpected result - datum query returned code {resp.status}")
            return False

        jdatums = resp.as_json().get("datums") or []
        mlw = get_datum_val(jdatums, "MLW")
        mllw = get_datum_val(jdatums, "MLLW")
        jxtharm["datumOffset"] = mlw - mllw
        jxt["harmonics"] = jxtharm
        return self.post_xtide(jxt)

    def _convert_subordinate(
        self, nos: Any, base: str, jstat: dict[str, Any], jxt: dict[str, Any]
    ) -> bool:
        jxt["referenceStation"] = False
        print(f"Retrieving data for subordiante station {get_str(jstat, 'name')}...")
        resp: Response = nos.get(f"{base}/tidepredoffsets.json")
        if not resp.ok():
            print(f"Unexpected result - harmonic query returned code {resp.status}")
            return False

        print("Offset data received.")
        joffs = resp.as_json()
        ref_station_id = joffs.get("refStationId")
        if not isinstance(ref_station_id, str):
            raise ValueError("offset data has no 'refStationId' string")
        full_ref_id = f"NOS:{ref_station_id}"
        jxt["offsets"] = {
            "maxLevelMultiply": joffs.get("heightOffsetHighTide"),
            "minLevelMultiply": joffs.get("heightOffsetLowTide"),
            "maxTimeAdd": get_x_time_offset(joffs, "timeOffsetHighTide"),
            "minTimeAdd": get_x_time_offset(joffs, "timeOffsetLowTide"),
            "referenceStationId": full_ref_id,
        }

        if not self.station_exists(full_ref_id):
            print("Adding reference station data to database...")
            if not self.convert_station(ref_station_id, skip_existing=False):
                print("Adding reference station failed. Aborting.")
                return False

        jxt["country"] = self.specified_country or self.last_ref_country
        return self.post_xtide(jxt)

    def process_file(self, path: str | Path, skip_existing: bool = True) -> bool:
        """Convert every station id listed in ``path``; stop at the first failure.

        Lines starting with ``#`` are echoed; a line ``@Name`` makes ``Name``
        the country used for the stations that follow.
        """
        print(f"Processing input file {path}")
        line_num = 0
        with open(path, encoding="utf-8") as infile:
            for raw in infile:
                line = raw.rstrip("\n")
                line_num += 1
                if line.startswith("@"):
                    self.specified_country = line[1:]
                    print(f"Using country name '{self.specified_country}'")
                elif line.startswith("#"):
                    print(line)
                elif self.convert_station(line, skip_existing):
                    print("\n")
                else:
                    print(f"Could not process line {line_num}, station Id {line}. Stopping.")
                    return False
        print(f"\nDone. {line_num} lines processed.")
        return True


def print_usage() -> None:
    """Print the command-line help."""
    print(_USAGE)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    print("nos2xt v0.2")

    station_id = ""
    file_name = ""
    port = DEFAULT_PORT
    country = ""
    invalid_arg = ""
    skip_existing = True

    a = 0
    while a < len(args):
        arg = args[a]
        if arg.startswith("-"):
            option = arg[1:2]
            following = args[a + 1] if a + 1 < len(args) else None
            if option in ("p", "f", "c"):
                if following is not None:
                    if option == "p":
                        port = following
                    elif option == "f":
                        file_name = following
                    else:
                        country = following
                a += 2
                continue
            if option == "u":
                skip_existing = False
            else:
                invalid_arg = option
            a += 1
        else:
            station_id = arg
            a += 1

    converter = Converter(port, country)
    try:
        if invalid_arg:
            print(f"Invalid argument: {invalid_arg}")
            print_usage()
            return 1
        if file_name:
            return 0 if converter.process_file(file_name, skip_existing) else 1
        if station_id:
            return 0 if converter.convert_station(station_id, skip_existing) else 1
        print_usage()
        return 1
    except (OSError, ValueError, TypeError) as err:
        print(f"Error: {err}")
        return 1


if __name__ == "__main__":
    sys.exit(main())