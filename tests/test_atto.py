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

"""Tests for the Atto engine: request lifecycle, views, callbacks, redirects."""

import pytest
from jinja2 import UndefinedError

from atto_routes import Atto, MissingRequiredArgument, route
from atto_routes.core import ViewRenderer


def test_handler_return_short_circuits():
    app = Atto()
    app.add_route("user", "/users[/:id]", handler=lambda id=None: f"user {id}")
    assert app.run("/users/7") == "user 7"
    assert app.run("/users") == "user None"


def test_route_view_literal_is_rendered():
    app = Atto()
    app.add_route("home", "/", view="Welcome home")
    assert app.run("/") == "Welcome home"
    assert app.view == "Welcome home"
    assert app.get_data("view") == "Welcome home"


def test_unmatched_path_without_view_is_empty():
    app = Atto()
    app.add_route("home", "/", view="home")
    assert app.run("/missing") == ""


def test_default_view_used_when_route_has_none():
    app = Atto(view="fallback")
    app.add_route("ping", "/ping", handler=lambda: None)
    assert app.run("/ping") == "fallback"


def test_handler_receives_engine_as_self():
    def show(self, slug: str):
        self.set_data("slug", slug)
        self.view = f"post {slug}"

    app = Atto()
    app.add_route("post", "/posts/:slug", handler=show)
    assert app.run("/posts/intro?ref=rss") == "post intro"
    assert app.get_data("slug") == "intro"


def test_templates_view_and_layout(tmp_path):
    (tmp_path / "post.html").write_text("<h1>{{ title }}</h1>")
    (tmp_path / "layout.html").write_text(
        "<main>{{ view }}</main><a href=\"{{ app.assemble('post', {'slug': 'next'}) }}\">next</a>"
    )

    def show(self, slug: str):
        self.set_data("title", slug.title())

    app = Atto(layout="layout.html", template_dir=tmp_path)
    app.add_route("post", "/posts/:slug", view="post.html", handler=show)
    assert app.run("/posts/intro") == '<main><h1>Intro</h1></main><a href="/posts/next">next</a>'


def test_autoescape_does_not_escape_rendered_view(tmp_path):
    (tmp_path / "view.html").write_text("<b>{{ name }}</b>")
    (tmp_path / "layout.html").write_text("<div>{{ view }}</div>")

    app = Atto(view="view.html", layout="layout.html", template_dir=tmp_path, autoescape=True)
    app.set_data("name", "<i>")
    assert app.run("/") == "<div><b>&lt;i&gt;</b></div>"


def test_render_literal_and_missing_file(tmp_path):
    app = Atto(template_dir=tmp_path)
    assert app.render("just text") == "just text"
    assert app.render("missing.html") == "missing.html"


def test_render_with_other_receiver(tmp_path):
    (tmp_path / "card.html").write_text("{{ label }}/{{ app.kind }}")

    class Card:
        kind = "card"
        data = {"label": "hello"}

    app = Atto(template_dir=tmp_path)
    assert app.render("card.html", Card()) == "hello/card"


def test_render_absolute_path(tmp_path):
    template = tmp_path / "abs.html"
    template.write_text("{{ greeting }}")
    app = Atto()
    app.set_data("greeting", "hi")
    assert app.render(str(template)) == "hi"


def test_strict_renderer_rejects_undefined_names(tmp_path):
    (tmp_path / "page.html").write_text("[{{ missing }}]")
    assert ViewRenderer(tmp_path).render("page.html") == "[]"
    with pytest.raises(UndefinedError, match="missing"):
        ViewRenderer(tmp_path, strict=True).render("page.html")


def test_start_callback_short_circuits():
    calls = []
    app = Atto()
    app.add_route("home", "/", handler=lambda: calls.append("handler"))
    app.on_start(lambda: "maintenance")
    assert app.run("/") == "maintenance"
    assert calls == []


def test_start_callback_can_set_layout():
    def start(self):
        self.layout = "layout"

    app = Atto()
    app.on_start(start)
    assert app.run("/") == "layout"


def test_finish_callback_receives_render():
    app = Atto(view="body")
    app.on_finish(lambda render: render.upper())
    assert app.run("/") == "BODY"


def test_finish_callback_falsy_return_keeps_render():
    seen = []
    app = Atto(view="body")
    app.on_finish(lambda render: seen.append(render))
    assert app.run("/") == "body"
    assert seen == ["body"]


def test_error_without_callback_returns_message():
    def fail():
        raise ValueError("boom")

    app = Atto()
    app.add_route("fail", "/fail", handler=fail)
    assert app.run("/fail") == "boom"


def test_error_callback_receives_error():
    def fail():
        raise ValueError("boom")

    app = Atto()
    app.add_route("fail", "/fail", handler=fail)
    app.on_error(lambda error: f"error: {error} ({type(error).__name__})")
    assert app.run("/fail") == "error: boom (ValueError)"


def test_error_callback_may_name_argument_throwable():
    def fail():
        raise ValueError("boom")

    def handle(throwable: Exception):
        return f"caught {throwable}"

    app = Atto()
    app.add_route("fail", "/fail", handler=fail)
    app.on_error(handle)
    assert app.run("/fail") == "caught boom"


def test_error_callback_falsy_return_falls_back_to_message():
    def fail():
        raise ValueError("boom")

    app = Atto()
    app.add_route("fail", "/fail", handler=fail)
    app.on_error(lambda error: None)
    assert app.run("/fail") == "boom"


def test_failing_error_callback_message_wins():
    def fail():
        raise ValueError("boom")

    def broken(error):
        raise RuntimeError("again")

    app = Atto()
    app.add_route("fail", "/fail", handler=fail)
    app.on_error(broken)
    assert app.run("/fail") == "again"


def test_template_failure_goes_to_error_boundary(tmp_path):
    class Exploding:
        @property
        def value(self):
            raise ValueError("exploded")

    (tmp_path / "broken.html").write_text("before {{ item.value }} after")
    app = Atto(view="broken.html", template_dir=tmp_path)
    app.set_data("item", Exploding())
    assert app.run("/") == "exploded"
    assert "view" not in app.data


def test_missing_handler_argument_goes_to_error_boundary():
    def show(slug: str):
        return slug

    app = Atto()
    app.add_route("post", "/posts", handler=show)
    result = app.run("/posts")
    assert "'slug'" in result

    with pytest.raises(MissingRequiredArgument):
        app.router.dispatch(app.match("/posts"))


def test_callback_register_and_lookup():
    def start():
        return None

    app = Atto()
    assert app.callback(Atto.CALLBACK_ON_START) is None
    assert app.callback(Atto.CALLBACK_ON_START, start) is app
    assert app.callback(Atto.CALLBACK_ON_START) is start


def test_call_with_arguments_and_receiver():
    def handler(self, a, b="b"):
        return self, a, b

    app = Atto()
    assert app.call(handler, None, {"a": 1}) == (app, 1, "b")
    assert app.call(handler, "other", {"a": 1, "b": 2}) == ("other", 1, 2)


def test_redirect_to_route_name():
    app = Atto()
    app.add_route("home", "/home[/:tab]")
    app.redirect("home", {"tab": "news"})
    assert app.headers["Location"] == "/home/news"
    assert app.status == 301


def test_redirect_to_literal_url():
    app = Atto()
    app.redirect("https://example.org/", status=302)
    assert app.headers["Location"] == "https://example.org/"
    assert app.status == 302


def test_redirect_from_handler():
    def old(self):
        self.redirect("new")
        return "moved"

    app = Atto()
    app.add_route("old", "/old", handler=old)
    app.add_route("new", "/new")
    assert app.run("/old") == "moved"
    assert app.headers["Location"] == "/new"


def test_add_route_chaining_and_lookup():
    app = Atto().add_route("a", "/a").add_route("b", "/b")
    assert app.get_route("a").path == "/a"
    assert app.get_route("missing") is None
    assert app.assemble("b") == "/b"


class Site(Atto):
    @route("post", "/posts/:slug[/:page]", view="post")
    def show(self, slug: str, page: str = "1"):
        self.set_data("slug", slug)
        self.set_data("page", page)

    @route("feed", "/feed.xml")
    @route("atom", "/atom.xml")
    def feed(self):
        return "<feed/>"


class Blog(Site):
    def __init__(self, title):
        self.title = title
        super().__init__(layout="layout")

    @route("post", "/blog/:slug", view="post")
    def show(self, slug: str):
        self.set_data("slug", f"{self.title}:{slug}")


def test_route_decorator_registers_bound_methods():
    site = Site()
    assert site.run("/posts/intro/2") == "post"
    assert site.get_data("slug") == "intro"
    assert site.get_data("page") == "2"
    assert site.run("/feed.xml") == "<feed/>"
    assert site.run("/atom.xml") == "<feed/>"
    assert site.assemble("post", {"slug": "intro"}) == "/posts/intro"
    assert site.get_route("post").descriptor.receiver is False


def test_route_decorator_subclass_override():
    blog = Blog("news")
    assert blog.run("/blog/hello") == "layout"
    assert blog.get_data("slug") == "news:hello"
    assert blog.match("/posts/hello") is None
    assert blog.assemble("feed") == "/feed.xml"
