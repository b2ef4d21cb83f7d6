import copy
import json

import pytest

from xtwsd.httpclient import Response
from xtwsd.nos2xt import (
    LOCAL_HOST,
    NOS_HOST,
    Converter,
    get_datum_val,
    get_tz_name,
    get_x_time_offset,
    main,
    print_usage,
)

BASE = "/mdapi/v1.0/webapi/stations/"


def ok(doc):
    return Response(status=200, body=json.dumps(doc).encode("utf-8"))


class FakeClient:
    def __init__(self, server, host):
        self.server = server
        self.host = host

    def get(self, path):
        self.server.requests.append((self.host, path))
        return self.server.routes.get((self.host, path), Response(status=404, body=b"missing"))

    def post_json(self, path, body):
        self.server.requests.append((self.host, path))
        self.server.posted.append(copy.deepcopy(body))
        if self.server.post_status != 200:
            return Response(status=self.server.post_status, body=b"rejected")
        return ok({"statusCode": 200, "index": len(self.server.posted)})


class FakeServer:
    def __init__(self, routes=None, post_status=200):
        self.routes = dict(routes or {})
        self.requests = []
        self.posted = []
        self.post_status = post_status

    def factory(self, host, protocol="http", port=None):
        return FakeClient(self, host)

    def nos_requests(self):
        return [path for host, path in self.requests if host == NOS_HOST]


def reference_routes(station_id, name, state):
    return {
        (NOS_HOST, f"{BASE}{station_id}.json"): ok(
            {"stations": [{"name": name, "state": state, "tidal": True,
                           "lat": 26.61, "lng": -80.03,
                           "timezone": "EST", "timezonecorr": -5}]}
        ),
        (NOS_HOST, f"{BASE}{station_id}/harcon.json"): ok(
            {"units": "feet", "HarmonicConstituents": [
                {"name": "M2", "amplitude": 1.329, "phase_GMT": 10.6},
                {"name": "S2", "amplitude": 0.0, "phase_GMT": 0.0},
                {"name": "N2", "amplitude": 0.305, "phase_GMT": 349.8},
            ]}
        ),
        (NOS_HOST, f"{BASE}{station_id}/datums.json"): ok(
            {"datums": [{"name": "MLW", "value": 2.5}, {"name": "MLLW", "value": 0.0}]}
        ),
    }


def subordinate_routes(station_id, name, state, ref_id):
    return {
        (NOS_HOST, f"{BASE}{station_id}.json"): ok(
            {"stations": [{"name": name, "state": state, "tidal": True,
                           "reference_id": ref_id, "lat": 26.5, "lng": -78.7,
                           "timezone": "EST"}]}
        ),
        (NOS_HOST, f"{BASE}{station_id}/tidepredoffsets.json"): ok(
            {"refStationId": ref_id, "heightOffsetHighTide": 0.9,
             "heightOffsetLowTide": 0.8, "timeOffsetHighTide": 30,
             "timeOffsetLowTide": -15}
        ),
    }


def test_tz_name_est_maps_to_new_york():
    assert get_tz_name({"timezone": "EST", "timezonecorr": -5}) == ":America/New_York"


def test_tz_name_positive_correction_has_plus_sign():
    assert get_tz_name({"timezone": "AST", "timezonecorr": 3}) == ":Etc/GMT+3"


def test_tz_name_negative_correction_keeps_minus():
    name = get_tz_name({"timezone": "HST", "timezonecorr": -10})
    assert name.startswith(":Etc/GMT") and name.endswith("-10")


def test_datum_val_found_and_missing():
    datums = [{"name": "MLW", "value": 2.5}, {"name": "MLLW", "value": 0.25}]
    assert get_datum_val(datums, "MLLW") == 0.25
    assert get_datum_val(datums, "MHW") == 0.0


def test_x_time_offset_converts_minutes_to_hhmm():
    assert get_x_time_offset({"t": 90}, "t") == 130
    assert get_x_time_offset({"t": -75}, "t") == -115


def test_x_time_offset_under_an_hour_and_missing():
    assert get_x_time_offset({"t": 30}, "t") == 30
    assert get_x_time_offset({}, "t") == 0


def test_station_exists_records_country():
    server = FakeServer({(LOCAL_HOST, "/harmonics/NOS:9710441"): ok({"country": "Bahamas"})})
    conv = Converter("8080", client_factory=server.factory)
    assert conv.station_exists("NOS:9710441", silent=True) is True
    assert conv.last_ref_country == "Bahamas"


def test_station_exists_false_when_missing(capsys):
    server = FakeServer()
    conv = Converter(client_factory=server.factory)
    assert conv.station_exists("NOS:1") is False
    assert "not in database" in capsys.readouterr().out
    assert conv.last_ref_country == ""


def test_post_appends_country_for_foreign_station():
    server = FakeServer()
    conv = Converter(client_factory=server.factory)
    doc = {"name": "Settlement Point", "country": "Bahamas", "referenceStation": True}
    assert conv.post_xtide(doc) is True
    assert server.posted[0]["name"] == "Settlement Point, Bahamas"
    assert conv.last_ref_country == "Bahamas"


def test_post_leaves_usa_and_named_countries_alone():
    server = FakeServer()
    conv = Converter(client_factory=server.factory)
    conv.post_xtide({"name": "Miami", "country": "USA"})
    conv.post_xtide({"name": "Freeport Bahamas", "country": "Bahamas"})
    assert [d["name"] for d in server.posted] == ["Miami", "Freeport Bahamas"]
    assert conv.last_ref_country == ""


def test_post_failure_reports_status(capsys):
    server = FakeServer(post_status=400)
    conv = Converter(client_factory=server.factory)
    assert conv.post_xtide({"name": "X", "country": "USA"}) is False
    assert "result code 400" in capsys.readouterr().out


def test_convert_reference_station():
    server = FakeServer(reference_routes("8722670", "Lake Worth Pier", "FL"))
    conv = Converter(client_factory=server.factory)
    assert conv.convert_station("8722670", skip_existing=False) is True
    assert len(server.posted) == 1
    doc = server.posted[0]
    assert doc["id"] == "NOS:8722670"
    assert doc["name"] == "Lake Worth Pier, FL"
    assert doc["country"] == "USA"
    assert doc["timezone"] == ":America/New_York"
    assert doc["referenceStation"] is True
    assert doc["source"] == {"context": "NOS", "name": "CO-OPS Metadata API",
                             "stationId": "8722670"}
    harm = doc["harmonics"]
    assert [c["name"] for c in harm["constituents"]] == ["M2", "N2"]
    assert harm["constituents"][0]["amp"] == 1.329
    assert harm["datumOffset"] == 2.5
    assert harm["confidence"] == 10
    assert harm["datum"] == "Mean Lower Low Water"


def test_convert_subordinate_inherits_reference_country():
    routes = subordinate_routes("9710442", "Freeport", "Grand Bahama", "9710441")
    routes[(LOCAL_HOST, "/harmonics/NOS:9710441")] = ok({"country": "Bahamas"})
    server = FakeServer(routes)
    conv = Converter(client_factory=server.factory)
    assert conv.convert_station("9710442", skip_existing=False) is True
    doc = server.posted[0]
    assert doc["referenceStation"] is False
    assert doc["country"] == "Bahamas"
    assert doc["name"] == "Freeport, Bahamas"
    offsets = doc["offsets"]
    assert offsets["referenceStationId"] == "NOS:9710441"
    assert offsets["maxTimeAdd"] == 30
    assert offsets["minTimeAdd"] == -15
    assert offsets["maxLevelMultiply"] == 0.9
    assert offsets["minLevelMultiply"] == 0.8


def test_convert_subordinate_adds_missing_reference_first():
    routes = subordinate_routes("8722588", "Boynton", "FL", "8722670")
    routes.update(reference_routes("8722670", "Lake Worth Pier", "FL"))
    server = FakeServer(routes)
    conv = Converter(client_factory=server.factory)
    assert conv.convert_station("8722588", skip_existing=False) is True
    assert [d["id"] for d in server.posted] == ["NOS:8722670", "NOS:8722588"]
    assert server.posted[1]["country"] == server.posted[0]["country"]


def test_skip_existing_station_makes_no_nos_request():
    server = FakeServer({(LOCAL_HOST, "/harmonics/NOS:8722670"): ok({"country": "USA"})})
    conv = Converter(client_factory=server.factory)
    assert conv.convert_station("8722670") is True
    assert server.nos_requests() == []
    assert server.posted == []


def test_station_query_failure(capsys):
    server = FakeServer()
    conv = Converter(client_factory=server.factory)
    assert conv.convert_station("123", skip_existing=False) is False
    assert "Station query returned code 404" in capsys.readouterr().out
    assert server.posted == []


def test_specified_country_overrides_state():
    server = FakeServer(reference_routes("8722670", "Lake Worth Pier", "FL"))
    conv = Converter(specified_country="Bahamas", client_factory=server.factory)
    assert conv.convert_station("8722670", skip_existing=False) is True
    assert server.posted[0]["country"] == "Bahamas"
    assert server.posted[0]["name"] == "Lake Worth Pier, Bahamas"


def test_process_file_handles_comments_and_country(tmp_path, capsys):
    listing = tmp_path / "stations.txt"
    listing.write_text("# my stations\n@Bahamas\n8722670\n", encoding="utf-8")
    server = FakeServer(reference_routes("8722670", "Settlement Point", "FL"))
    conv = Converter(client_factory=server.factory)
    assert conv.process_file(listing, skip_existing=False) is True
    assert conv.specified_country == "Bahamas"
    assert server.posted[0]["country"] == "Bahamas"
    out = capsys.readouterr().out
    assert "# my stations" in out
    assert "Done. 3 lines processed." in out


def test_process_file_stops_at_first_failure(tmp_path):
    listing = tmp_path / "stations.txt"
    listing.write_text("111\n222\n", encoding="utf-8")
    server = FakeServer()
    conv = Converter(client_factory=server.factory)
    assert conv.process_file(listing, skip_existing=False) is False
    assert server.nos_requests() == [f"{BASE}111.json"]


def test_main_invalid_argument(capsys):
    assert main(["-x"]) == 1
    out = capsys.readouterr().out
    assert "Invalid argument: x" in out
    assert "Usage: nos2xt" in out


def test_main_without_station_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage: nos2xt" in capsys.readouterr().out


def test_main_with_comment_only_file(tmp_path, capsys):
    listing = tmp_path / "list.txt"
    listing.write_text("# nothing\n# here\n", encoding="utf-8")
    assert main(["-f", str(listing), "-p", "9999"]) == 0
    assert "Done. 2 lines processed." in capsys.readouterr().out


def test_print_usage_lists_options(capsys):
    print_usage()
    out = capsys.readouterr().out
    for option in ("-f", "-p", "-c", "-u"):
        assert f"   {option} " in out