# =============================================================================
# Site HTML
# =============================================================================
#
# Bare-bones markup for the public pages. Just enough structure for the
# plugin's pieces (assets, body_open fragments, post classes, widgets) to
# land somewhere visible.
#
# =============================================================================

from html import escape

from arc.auth.context import ViewerContext
from arc.core.models import ContentItem
from arc.plugin.types import Asset
from arc.site.widgets import Sidebar

TEMPLATES = {
    "page": """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title} &ndash; {site_name}</title>
{head}
</head>
<body>
{body_open}
<header class="site-header"><a href="/">{site_name}</a> {account}</header>
<main class="site-main">
{content}
</main>
<aside class="site-sidebar">
{sidebar}
</aside>
</body>
</html>
""",
    "article": """<article id="post-{id}" class="{classes}">
<h2 class="entry-title"><a href="/{slug}">{title}</a></h2>
<div class="entry-content">{body}</div>
</article>""",
    "login": """<div class="login">
{message}
{error}
<form name="loginform" id="loginform" method="post" action="{action}">
<p><label for="user_login">Username or Email Address</label>
<input type="text" name="username" id="user_login" autocomplete="username"></p>
<p><label for="user_pass">Password</label>
<input type="password" name="password" id="user_pass" autocomplete="current-password"></p>
<p><label><input name="remember" type="checkbox" value="1"> Remember Me</label></p>
<input type="hidden" name="redirect_to" value="{redirect_to}">
<p><button type="submit">Log In</button></p>
</form>
</div>""",
}


def render_assets(assets: list[Asset]) -> str:
    lines = []
    for asset in assets:
        src = escape(f"{asset.src}?ver={asset.version}" if asset.version else asset.src)
        if asset.kind == "style":
            lines.append(f'<link rel="stylesheet" id="{escape(asset.handle)}-css" href="{src}">')
        else:
            data = "".join(
                f' data-{escape(k.replace("_", "-"))}="{escape(str(v))}"' for k, v in asset.data.items()
            )
            lines.append(f'<script id="{escape(asset.handle)}-js" src="{src}"{data} defer></script>')
    return "\n".join(lines)


def render_article(post: ContentItem, classes: list[str], full: bool = False) -> str:
    body = post.content if full else (post.excerpt or post.content)
    return TEMPLATES["article"].format(
        id=escape(post.id),
        classes=escape(" ".join(classes)),
        slug=escape(post.slug),
        title=escape(post.title),
        body=escape(body),
    )


def render_sidebar(sidebar: Sidebar) -> str:
    def section(title: str, items: list[str], css: str) -> str:
        entries = "".join(f"<li>{item}</li>" for item in items)
        return f'<section class="widget {css}"><h3>{title}</h3><ul>{entries}</ul></section>'

    return "\n".join([
        section("Pages", [f'<a href="/{escape(p.slug)}">{escape(p.title)}</a>' for p in sidebar.pages], "widget_pages"),
        section("Recent Posts", [f'<a href="/{escape(p.slug)}">{escape(p.title)}</a>' for p in sidebar.posts], "widget_recent_entries"),
        section("Recent Comments", [f"{escape(c.author_name)}: {escape(c.content)}" for c in sidebar.comments], "widget_recent_comments"),
        section("Categories", [f'<a href="/category/{escape(t.slug)}">{escape(t.name)}</a>' for t in sidebar.categories], "widget_categories"),
        section("Tags", [f'<a href="/tag/{escape(t.slug)}">{escape(t.name)}</a>' for t in sidebar.tags], "widget_tag_cloud"),
    ])


def render_page(
    site_name: str,
    title: str,
    content: str,
    viewer: ViewerContext,
    assets: list[Asset],
    body_open: list[str],
    sidebar: Sidebar,
) -> str:
    if viewer.is_authenticated:
        account = f'<span class="account">{escape(viewer.display_name or "")} <a href="/logout">Log out</a></span>'
    else:
        account = '<a class="arc-login-link" href="/login">Log in</a>'
    return TEMPLATES["page"].format(
        title=escape(title),
        site_name=escape(site_name),
        head=render_assets(assets),
        body_open="\n".join(body_open),
        account=account,
        content=content,
        sidebar=render_sidebar(sidebar),
    )


def render_login(action: str, redirect_to: str, message: str, error: str | None = None) -> str:
    return TEMPLATES["login"].format(
        action=escape(action),
        redirect_to=escape(redirect_to),
        message=message,
        error=f'<div id="login_error" class="error">{escape(error)}</div>' if error else "",
    )
