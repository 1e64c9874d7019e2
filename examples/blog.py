from __future__ import annotations

import logging

from atto_routes import Atto, route


class Blog(Atto):
    """A tiny blog using literal views instead of template files."""

    def __init__(self):
        super().__init__(view="Not found", dispatch={"log_level": "INFO"})
        self.posts = {"hello-world": "First post", "second": "Another one"}

    @route("home", "/", view="Welcome")
    def home(self):
        self.set_data("count", len(self.posts))

    @route("post", "/posts/:slug[/:page]", dispatch_coerce=True)
    def show(self, slug: str, page: int = 1):
        if slug not in self.posts:
            return f"No post named {slug}"
        return f"{self.posts[slug]} (page {page})"

    @route("legacy", "/old/:slug")
    def legacy(self, slug: str):
        self.redirect("post", {"slug": slug})
        return self.headers["Location"]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    blog = Blog()

    print("--- Atto Blog Demo ---")

    # Handlers returning a value short-circuit the view
    print(blog.run("/posts/hello-world?ref=rss"))
    print(blog.run("/posts/second/2"))
    print(blog.run("/"))

    # Reverse routing drops optional segments with missing parameters
    print(blog.assemble("post", {"slug": "second"}))
    print(blog.assemble("post", {"slug": "second", "page": 3}))

    # Redirects set status and Location
    print(blog.run("/old/hello-world"), blog.status)

    # Introspection
    for name, info in blog.router.nodes()["routes"].items():
        print(f"{name}: {info['pattern']} -> {info['handler']}")
