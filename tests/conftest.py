"""
Shared fixtures for Changelog Bot tests.

HTML fixtures mimic the structure of the changelog site; HTTP sessions and
API clients are mocks so no test touches the network.
"""

from unittest.mock import Mock

import pytest


CHANGELOG_URL = "https://changelog.shopify.com/"
BASE_ORIGIN = "https://changelog.shopify.com"

CHANGELOG_HTML = """
<html>
<body>
    <div class="changelog-post">
        <div class="post-block__date"><span>March 5, 2024</span></div>
        <h2><a class="post-block__link" href="/posts/42">New Checkout Extensibility Features</a></h2>
        <div class="post__content"><p>Checkout UI extensions can now render banners.</p></div>
        <div class="post-block__tags">
            <span class="status-tag feature">New</span><span class="text-minor">Checkout</span>
        </div>
    </div>
    <div class="changelog-post">
        <div class="post-block__date"><span>February 20, 2024</span></div>
        <h2><a class="post-block__link" href="/posts/41">Older Admin API Update</a></h2>
        <div class="post__content"><p>The Admin API got faster.</p></div>
        <div class="post-block__tags">
            <span class="status-tag feature">Update</span><span class="text-minor">API</span>
        </div>
    </div>
</body>
</html>
"""

DETAIL_HTML = """
<html>
<body>
    <article class="post__content">
        <p>  Checkout UI extensions can now render banners.  </p>
        <p>Learn more about banners in the docs.</p>
    </article>
</body>
</html>
"""


def make_response(status_code=200, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion."""
    choice = Mock()
    choice.message.content = content
    choice.finish_reason = "stop"
    completion = Mock()
    completion.choices = [choice]
    return completion


@pytest.fixture
def site_session():
    """Session mock serving the changelog index and the detail page."""
    pages = {
        CHANGELOG_URL: CHANGELOG_HTML,
        f"{BASE_ORIGIN}/posts/42": DETAIL_HTML,
    }

    def get(url, timeout=None):
        if url in pages:
            return make_response(200, pages[url])
        return make_response(404)

    session = Mock()
    session.get.side_effect = get
    return session


@pytest.fixture
def openai_client():
    """OpenAI client mock returning a summary with a bracketed link."""
    client = Mock()
    client.chat.completions.create.return_value = make_completion(
        "  Checkout extensions can show banners. [Learn more about banners]  "
    )
    return client


@pytest.fixture
def slack():
    """Slack client mock with an empty channel."""
    client = Mock()
    client.channel_id = "C0123456"
    client.get_last_message.return_value = None
    client.post_message.return_value = {"ok": True, "ts": "1700000000.000100"}
    return client


@pytest.fixture
def changelog_html():
    return CHANGELOG_HTML


@pytest.fixture
def detail_html():
    return DETAIL_HTML


@pytest.fixture
def completion():
    """Factory for OpenAI-shaped completions."""
    return make_completion
