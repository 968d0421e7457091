"""HTML and JavaScript snippets that produce a token on the checkout page."""
from __future__ import annotations

import html
import json
from urllib.parse import quote

TOKEN_FIELD_NAME = "g-recaptcha-response"
TOKEN_FIELD_ID = "checkout_recaptcha_token"
CHECKOUT_ACTION = "checkout"

_SCRIPT_BASE_URL = "https://www.google.com/recaptcha/api.js"

_INLINE_TEMPLATE = """(function() {
    var siteKey = %(site_key)s;
    var action = %(action)s;
    var fieldId = %(field_id)s;

    function setToken(token) {
        var el = document.getElementById(fieldId);
        if (el) {
            el.value = token;
        }
    }

    if (typeof grecaptcha === 'undefined') {
        return;
    }
    grecaptcha.ready(function () {
        grecaptcha.execute(siteKey, {action: action}).then(setToken);

        document.addEventListener('submit', function (event) {
            var form = event.target;
            var el = form && form.querySelector ? form.querySelector('#' + fieldId) : null;
            if (!el || el.value) {
                return;
            }
            event.preventDefault();
            grecaptcha.execute(siteKey, {action: action}).then(function (token) {
                setToken(token);
                form.submit();
            });
        }, true);
    });
})();"""


def _js_string(value: str) -> str:
    # "</" must not appear inside an inline <script> block.
    return json.dumps(value).replace("</", "<\\/")


def script_url(site_key: str) -> str:
    """Return the reCAPTCHA v3 loader URL bound to ``site_key``."""

    return f"{_SCRIPT_BASE_URL}?render={quote(site_key.strip(), safe='')}"


def render_inline_script(site_key: str, action: str = CHECKOUT_ACTION) -> str:
    """Render the JS that requests a token and stores it in the hidden field.

    The token is requested on page load and again right before submit when
    the field is still empty.
    """

    if not site_key.strip():
        return ""
    return _INLINE_TEMPLATE % {
        "site_key": _js_string(site_key.strip()),
        "action": _js_string(action),
        "field_id": _js_string(TOKEN_FIELD_ID),
    }


def render_hidden_field() -> str:
    return (
        f'<input type="hidden" name="{TOKEN_FIELD_NAME}" '
        f'id="{TOKEN_FIELD_ID}" value="" />'
    )


def render_widget(site_key: str | None, action: str = CHECKOUT_ACTION) -> str:
    """Render loader script, inline glue and hidden field as one snippet."""

    cleaned = (site_key or "").strip()
    if not cleaned:
        return ""
    loader = f'<script src="{html.escape(script_url(cleaned), quote=True)}" defer></script>'
    inline = f"<script>\n{render_inline_script(cleaned, action)}\n</script>"
    return "\n".join([loader, inline, render_hidden_field()])


__all__ = [
    "CHECKOUT_ACTION",
    "TOKEN_FIELD_ID",
    "TOKEN_FIELD_NAME",
    "render_hidden_field",
    "render_inline_script",
    "render_widget",
    "script_url",
]
