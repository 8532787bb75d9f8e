"""Mailchimp Marketing API client (campaign lifecycle only).

The data center is the suffix of the API key (``xxxx-us21`` -> ``us21``).
Every call raises ``NewsletterStepFailed`` tagged with the step name.
"""

from __future__ import annotations

import requests

from src.common.errors import NewsletterStepFailed
from src.common.logging import setup_logging

logger = setup_logging(module_name="newsletter.mailchimp")


def mailchimp_data_center(api_key: str) -> str:
    parts = api_key.split("-")
    return parts[1] if len(parts) > 1 and parts[1] else "us1"


class MailchimpClient:
    """Thin wrapper over the campaign endpoints used by the dispatcher."""

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return f"https://{mailchimp_data_center(self.api_key)}.api.mailchimp.com/3.0"

    def request(self, step: str, method: str, endpoint: str, payload: dict | None = None) -> dict:
        """Call the API and return the decoded body (``{}`` when empty).

        Raises:
            NewsletterStepFailed: On transport error, HTTP >= 400 or an
                error ``detail`` in the body.
        """
        url = f"{self.base_url}{endpoint}"
        logger.info("Mailchimp API Request - %s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                auth=("anystring", self.api_key),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise NewsletterStepFailed(step, str(exc)) from exc

        data: dict = {}
        if response.text:
            try:
                data = response.json()
            except ValueError as exc:
                raise NewsletterStepFailed(step, f"invalid JSON: {response.text[:300]}") from exc

        if response.status_code >= 400 or (isinstance(data, dict) and data.get("detail")):
            detail = data.get("detail") if isinstance(data, dict) else None
            raise NewsletterStepFailed(
                step, f"HTTP {response.status_code}: {detail or response.text[:300]}"
            )
        return data

    def create_campaign(self, audience_id: str, settings: dict) -> str:
        data = self.request(
            "create",
            "POST",
            "/campaigns",
            {"type": "regular", "recipients": {"list_id": audience_id}, "settings": settings},
        )
        campaign_id = data.get("id")
        if not campaign_id:
            raise NewsletterStepFailed("create", "no campaign ID in response")
        logger.info("Created Mailchimp campaign: %s", campaign_id)
        return campaign_id

    def set_content(self, campaign_id: str, html: str) -> None:
        self.request("content", "PUT", f"/campaigns/{campaign_id}/content", {"html": html})
        logger.info("Campaign content set")

    def send_test(self, campaign_id: str, emails: list[str]) -> None:
        self.request(
            "test_send",
            "POST",
            f"/campaigns/{campaign_id}/actions/test",
            {"test_emails": emails, "send_type": "html"},
        )

    def send(self, campaign_id: str) -> None:
        self.request("send", "POST", f"/campaigns/{campaign_id}/actions/send")
