# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


"""Tests for dispatch options: timing records and argument coercion."""

import logging

import pytest
from pydantic import ValidationError

from atto_routes import Atto, DispatchOptions, Router, route


def timing_records(caplog):
    return [
        record
        for record in caplog.records
        if record.name == "atto_routes"
        and (record.getMessage().endswith(" start") or " end (" in record.getMessage())
    ]


def test_dispatch_logs_start_and_end(caplog):
    caplog.set_level(logging.DEBUG, logger="atto_routes")
    app = Atto()
    app.add_route("item", "/item/:id", handler=lambda id: f"item {id}")
    assert app.run("/item/3") == "item 3"

    records = timing_records(caplog)
    assert [r.getMessage().split(" ")[:2] for r in records] == [
        ["item", "start"],
        ["item", "end"],
    ]
    assert records[1].getMessage().endswith(" ms)")
    assert {r.levelname for r in records} == {"DEBUG"}


def test_log_level_from_router_defaults(caplog):
    caplog.set_level(logging.DEBUG, logger="atto_routes")
    app = Atto(dispatch={"log_level": "INFO"})
    app.add_route("item", "/item/:id", handler=lambda id: id)
    app.run("/item/1")
    assert {r.levelname for r in timing_records(caplog)} == {"INFO"}


def test_route_can_turn_timing_off(caplog):
    caplog.set_level(logging.DEBUG, logger="atto_routes")
    app = Atto()
    app.add_route("quiet", "/quiet", handler=lambda: "q", dispatch_log=False)
    app.add_route("loud", "/loud", handler=lambda: "l")
    app.run("/quiet")
    app.run("/loud")
    assert [r.getMessage().split(" ")[0] for r in timing_records(caplog)] == ["loud", "loud"]


def test_reregistering_route_drops_previous_overrides(caplog):
    caplog.set_level(logging.DEBUG, logger="atto_routes")
    router = Router(name="site")
    router.add_route("a", "/a", handler=lambda: "first", dispatch_log=False, dispatch_coerce=True)
    assert router.get_route("a").dispatch.log is False

    router.add_route("a", "/a", handler=lambda: "second")
    replaced = router.get_route("a")
    assert replaced.dispatch == router.defaults
    assert replaced.options == {}
    assert replaced.coercer is None
    assert router.dispatch(router.match("/a")) == "second"
    assert len(timing_records(caplog)) == 2


def test_invalid_override_keeps_previous_route():
    app = Atto()
    app.add_route("a", "/a", handler=lambda: "hello")
    original = app.get_route("a")

    with pytest.raises(ValidationError):
        app.add_route("a", "/other", handler=lambda: "replaced", dispatch_bogus=1)
    assert app.get_route("a") is original
    assert app.run("/a") == "hello"

    with pytest.raises(ValidationError):
        app.add_route("b", "/b", handler=lambda: "b", dispatch_log_level="LOUD")
    assert "b" not in app.router
    assert app.match("/b") is None


def test_router_defaults_are_validated():
    assert Router(dispatch=DispatchOptions(coerce=True)).defaults.coerce is True
    assert Router().defaults == DispatchOptions()
    with pytest.raises(ValidationError):
        Router(dispatch={"bogus": True})


def test_coercion_converts_captures():
    def show(self, id: int, page: int = 1):
        self.set_data("item", (id, page))

    app = Atto(view="item", dispatch={"coerce": True})
    app.add_route("item", "/items/:id[/:page]", handler=show)
    assert app.run("/items/7") == "item"
    assert app.get_data("item") == (7, 1)
    app.run("/items/7/3")
    assert app.get_data("item") == (7, 3)


def test_coercion_rejects_invalid_values():
    def show(id: int):
        return id

    app = Atto(dispatch={"coerce": True})
    app.add_route("item", "/items/:id", handler=show)
    with pytest.raises(ValidationError):
        app.router.dispatch(app.match("/items/abc"))
    assert "valid integer" in app.run("/items/abc")


def test_route_can_opt_out_of_coercion():
    app = Atto(dispatch={"coerce": True})
    app.add_route("raw", "/raw/:id", handler=lambda id: repr(id), dispatch_coerce=False)
    assert app.get_route("raw").coercer is None
    assert app.run("/raw/5") == "'5'"


def test_coercion_without_annotations_passes_through():
    app = Atto(dispatch={"coerce": True})
    app.add_route("plain", "/plain/:id", handler=lambda id: repr(id))
    assert app.get_route("plain").coercer is None
    assert app.run("/plain/5") == "'5'"


def test_decorated_route_enables_coercion():
    class Shop(Atto):
        @route("product", "/products/:sku", dispatch_coerce=True)
        def product(self, sku: int):
            return f"sku {sku + 1}"

    shop = Shop()
    assert shop.run("/products/41") == "sku 42"
    assert shop.get_route("product").options == {"dispatch_coerce": True}


def test_nodes_report_effective_options():
    router = Router(dispatch={"log_level": "WARNING"})
    router.add_route("a", "/a", handler=lambda: None, dispatch_log=False)
    info = router.nodes()["routes"]["a"]
    assert info["dispatch"] == {"log": False, "log_level": "WARNING", "coerce": False}
    assert info["options"] == {"dispatch_log": False}
