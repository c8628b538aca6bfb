# =============================================================================
# Inline Login Form Markup
# =============================================================================
#
# Rendered into the top of <body> for anonymous visitors. The form is hidden
# until arc-public.js opens it; it posts to the AJAX login endpoint and shows
# the result in place.
#
# =============================================================================

from html import escape

TEMPLATES = {
    "form": """
<div id="arc-login" class="arc-login" hidden
     data-ajax-url="{ajax_url}" data-reload="{reload}">
    <form id="arc-login-form" class="arc-login-form" method="post" action="{ajax_url}">
        <h2 class="arc-login-title">{title}</h2>
        <p class="arc-login-status" role="status" aria-live="polite"></p>
        <p>
            <label for="arc-username">Username or Email Address</label>
            <input id="arc-username" type="text" name="username" autocomplete="username" required>
        </p>
        <p>
            <label for="arc-password">Password</label>
            <input id="arc-password" type="password" name="password" autocomplete="current-password" required>
        </p>
        <p class="arc-login-remember">
            <label><input type="checkbox" name="remember" value="1"> Remember Me</label>
        </p>
        <input type="hidden" name="security" value="{nonce}">
        <input type="hidden" name="redirect_to" value="{redirect_to}">
        <p class="arc-login-actions">
            <button type="submit" class="arc-login-submit">Log In</button>
            <button type="button" class="arc-login-close" aria-label="Close">&times;</button>
        </p>
        <p class="arc-login-links"><a href="{login_url}">Use the full login page</a></p>
    </form>
</div>
""",
    "login_message": """<p class="message arc-message">{message}</p>""",
}


def render_login_form(
    ajax_url: str,
    nonce: str,
    redirect_to: str,
    login_url: str,
    title: str = "Log in to see restricted content",
    reload: bool = False,
) -> str:
    """Markup for the hidden inline login form."""
    return TEMPLATES["form"].format(
        ajax_url=escape(ajax_url),
        nonce=escape(nonce),
        redirect_to=escape(redirect_to),
        login_url=escape(login_url),
        title=escape(title),
        reload="1" if reload else "0",
    )


def render_login_message(message: str) -> str:
    return TEMPLATES["login_message"].format(message=escape(message))
