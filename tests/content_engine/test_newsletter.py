"""Tests for the Mailchimp client and newsletter dispatcher.

Tests cover:
- Data center derivation and request error handling
- HTML rendering (brand, styled intro, excerpt fallback, escaping)
- Campaign lifecycle per send mode (draft / test / live)
- Missing configuration and missing test recipients
"""

from unittest.mock import MagicMock

import pytest
import requests

from src.common.errors import NewsletterStepFailed, NoTestRecipients
from src.common.models import SendMode
from src.content_engine.newsletter import (
    MailchimpClient,
    NewsletterDispatcher,
    mailchimp_data_center,
)
from src.content_engine.newsletter.dispatcher import PARAGRAPH_STYLE


def _with_newsletter(settings, **changes):
    return settings.model_copy(
        update={"newsletter": settings.newsletter.model_copy(update=changes)}
    )


# === Test: Mailchimp client ===


class TestMailchimpClient:
    @pytest.mark.parametrize(
        "key,dc", [("abc123-us21", "us21"), ("abc123", "us1"), ("abc123-", "us1")]
    )
    def test_data_center(self, key, dc):
        assert mailchimp_data_center(key) == dc

    def test_base_url_and_auth(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory(200, {"id": "c-1"})
        client = MailchimpClient("abc123-us21", session=session)

        assert client.create_campaign("aud-1", {"subject_line": "Hi"}) == "c-1"
        args, kwargs = session.request.call_args
        assert args == ("POST", "https://us21.api.mailchimp.com/3.0/campaigns")
        assert kwargs["auth"] == ("anystring", "abc123-us21")
        assert kwargs["json"] == {
            "type": "regular",
            "recipients": {"list_id": "aud-1"},
            "settings": {"subject_line": "Hi"},
        }

    def test_empty_body_is_empty_dict(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory(204, text="")
        assert MailchimpClient("k-us1", session=session).request("send", "POST", "/x") == {}

    def test_http_error_tagged_with_step(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory(400, {"detail": "Invalid list"})
        with pytest.raises(NewsletterStepFailed) as excinfo:
            MailchimpClient("k-us1", session=session).set_content("c-1", "<p>x</p>")
        assert excinfo.value.step == "content"
        assert "Invalid list" in str(excinfo.value)

    def test_transport_error(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("down")
        with pytest.raises(NewsletterStepFailed) as excinfo:
            MailchimpClient("k-us1", session=session).send("c-1")
        assert excinfo.value.step == "send"

    def test_create_without_id(self, response_factory):
        session = MagicMock()
        session.request.return_value = response_factory(200, {"status": "save"})
        with pytest.raises(NewsletterStepFailed, match="no campaign ID"):
            MailchimpClient("k-us1", session=session).create_campaign("aud", {})


# === Test: Dispatcher ===


@pytest.fixture
def writer():
    writer = MagicMock()
    writer.generate_newsletter_intro.return_value = "<p>Hey runner!</p><p>New gear guide.</p>"
    writer.generate_newsletter_subject.return_value = "🎯 Just Published: Best trail shoes 2024"
    return writer


@pytest.fixture
def client():
    client = MagicMock()
    client.create_campaign.return_value = "c-1"
    return client


def _dispatcher(settings, writer, client):
    return NewsletterDispatcher(settings, writer, client=client)


class TestBuildHtml:
    def test_renders_brand_and_article(self, settings, writer, client, article):
        html = _dispatcher(settings, writer, client).build_html(article, "<p>Hello</p>")
        assert settings.brand.logo_url in html
        assert settings.brand.primary_color in html
        assert article.image_url in html
        assert f'href="{article.public_url}"' in html
        assert f'<p style="{PARAGRAPH_STYLE}">Hello</p>' in html
        assert "*|UNSUB|*" in html

    def test_social_icons_only_when_configured(self, settings, writer, client, article):
        html = _dispatcher(settings, writer, client).build_html(article, "<p>x</p>")
        assert 'alt="Instagram"' not in html
        settings = settings.model_copy(
            update={
                "brand": settings.brand.model_copy(
                    update={"instagram_url": "https://instagram.com/runv"}
                )
            }
        )
        html = _dispatcher(settings, writer, client).build_html(article, "<p>x</p>")
        assert "https://instagram.com/runv" in html

    def test_excerpt_fallback(self, settings, writer, client, article):
        html = _dispatcher(settings, writer, client).build_html(article, None)
        assert "Trail running puts different demands on your feet" in html
        assert "...</p>" in html

    def test_title_is_escaped(self, settings, writer, client, article):
        article = article.model_copy(update={"title": "Shoes <under> $100 & more"})
        html = _dispatcher(settings, writer, client).build_html(article, "<p>x</p>")
        assert "Shoes &lt;under&gt; $100 &amp; more" in html


class TestDispatch:
    def test_draft_mode_creates_and_fills_only(self, settings, writer, client, article):
        campaign = _dispatcher(settings, writer, client).dispatch(article)

        assert campaign.campaign_id == "c-1"
        assert campaign.send_mode == SendMode.DRAFT
        assert campaign.sent is False
        audience, campaign_settings = client.create_campaign.call_args.args
        assert audience == "aud-1"
        assert campaign_settings["subject_line"] == "🎯 Just Published: Best trail shoes 2024"
        assert campaign_settings["title"] == "Newsletter: Best trail shoes 2024"
        assert campaign_settings["reply_to"] == "noreply@example.com"
        assert len(campaign_settings["preview_text"]) <= 100
        client.set_content.assert_called_once_with("c-1", campaign.html)
        client.send_test.assert_not_called()
        client.send.assert_not_called()

    def test_test_mode_sends_to_test_emails(self, settings, writer, client, article):
        settings = _with_newsletter(settings, send_mode="test")
        campaign = _dispatcher(settings, writer, client).dispatch(article)
        client.send_test.assert_called_once_with("c-1", ["coach@runv.app"])
        client.send.assert_not_called()
        assert campaign.sent is True

    def test_test_mode_without_recipients(self, settings, writer, client, article):
        settings = _with_newsletter(settings, send_mode="test", test_emails=[])
        with pytest.raises(NoTestRecipients):
            _dispatcher(settings, writer, client).dispatch(article)
        client.send_test.assert_not_called()
        client.send.assert_not_called()

    def test_live_mode_sends(self, settings, writer, client, article):
        settings = _with_newsletter(settings, send_mode="live")
        campaign = _dispatcher(settings, writer, client).dispatch(article)
        client.send.assert_called_once_with("c-1")
        client.send_test.assert_not_called()
        assert campaign.sent is True

    @pytest.mark.parametrize(
        "changes", [{"enabled": False}, {"api_key": ""}, {"audience_id": ""}]
    )
    def test_missing_config(self, settings, writer, client, article, changes):
        settings = _with_newsletter(settings, **changes)
        with pytest.raises(NewsletterStepFailed) as excinfo:
            _dispatcher(settings, writer, client).dispatch(article)
        assert excinfo.value.step == "config"
        client.create_campaign.assert_not_called()

    def test_intro_failure_uses_excerpt(self, settings, writer, client, article):
        writer.generate_newsletter_intro.return_value = None
        campaign = _dispatcher(settings, writer, client).dispatch(article)
        assert "Trail running puts different demands" in campaign.html

    def test_create_failure_stops_live_send(self, settings, writer, client, article):
        settings = _with_newsletter(settings, send_mode="live")
        client.create_campaign.side_effect = NewsletterStepFailed("create", "HTTP 400")
        with pytest.raises(NewsletterStepFailed) as excinfo:
            _dispatcher(settings, writer, client).dispatch(article)
        assert excinfo.value.step == "create"
        client.set_content.assert_not_called()
        client.send.assert_not_called()
        client.send_test.assert_not_called()

    def test_client_error_propagates(self, settings, writer, client, article):
        client.set_content.side_effect = NewsletterStepFailed("content", "HTTP 400")
        with pytest.raises(NewsletterStepFailed):
            _dispatcher(settings, writer, client).dispatch(article)
