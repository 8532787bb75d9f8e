"""Platform clients for X/Twitter, Facebook and Instagram.

Every poster exposes ``post(text, image_url) -> str`` returning the created
post id, and raises ``SocialPostFailed`` for anything that goes wrong, so the
fan-out can record a per-platform outcome.
"""

from __future__ import annotations

import base64
import re

import requests
from requests_oauthlib import OAuth1Session

from src.common.config import Settings
from src.common.errors import SocialPostFailed
from src.common.logging import setup_logging
from src.common.models import SocialPlatform

logger = setup_logging(module_name="social.platforms")

TWITTER_UPLOAD_URL = "https://upload.twitter.com/1.1/media/upload.json"
TWITTER_TWEETS_URL = "https://api.twitter.com/2/tweets"
TWITTER_VERIFY_URL = "https://api.twitter.com/1.1/account/verify_credentials.json"
GRAPH_API_BASE = "https://graph.facebook.com"

_MARKDOWN_LINK_RE = re.compile(r"\[[^\]]+\]\((https?://[^\s)]+)\)")


def strip_markdown_links(text: str) -> str:
    """Turn ``[label](https://...)`` into the bare URL."""
    return _MARKDOWN_LINK_RE.sub(r"\1", text)


def _json(response: requests.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_detail(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return str(data)[:300]


class BasePoster:
    """Shared plumbing: image download and HTTP timeout."""

    PLATFORM: SocialPlatform

    def __init__(self, settings: Settings, session: requests.Session | None = None):
        self.social = settings.social
        self.timeout = settings.schedule.http_timeout_seconds
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        raise NotImplementedError

    def post(self, text: str, image_url: str) -> str:
        raise NotImplementedError

    def _fail(self, message: str) -> SocialPostFailed:
        return SocialPostFailed(self.PLATFORM.value, message)

    def _download_image(self, image_url: str) -> bytes:
        try:
            response = self.session.get(image_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise self._fail(f"image download failed: {exc}") from exc
        return response.content


class TwitterPoster(BasePoster):
    """Posts a tweet with the featured image attached.

    Two phases: media upload (v1.1, base64 body) then tweet creation (v2)
    referencing the returned media id. Both use OAuth 1.0a user context.
    """

    PLATFORM = SocialPlatform.TWITTER

    def __init__(
        self,
        settings: Settings,
        session: requests.Session | None = None,
        oauth: OAuth1Session | None = None,
    ):
        super().__init__(settings, session)
        self._oauth = oauth

    @property
    def is_configured(self) -> bool:
        return all([
            self.social.twitter_consumer_key,
            self.social.twitter_consumer_secret,
            self.social.twitter_access_token,
            self.social.twitter_access_secret,
        ])

    @property
    def oauth(self) -> OAuth1Session:
        if self._oauth is None:
            self._oauth = OAuth1Session(
                self.social.twitter_consumer_key,
                client_secret=self.social.twitter_consumer_secret,
                resource_owner_key=self.social.twitter_access_token,
                resource_owner_secret=self.social.twitter_access_secret,
            )
        return self._oauth

    def verify_credentials(self) -> bool:
        """Check the configured credentials against the account endpoint."""
        try:
            response = self.oauth.get(TWITTER_VERIFY_URL, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Twitter credentials check failed: %s", exc)
            return False
        if response.status_code != 200:
            logger.error("Twitter credentials are invalid: %s", _error_detail(response))
            return False
        logger.info("Twitter credentials are valid.")
        return True

    def upload_media(self, image_url: str) -> str:
        image = self._download_image(image_url)
        try:
            response = self.oauth.post(
                TWITTER_UPLOAD_URL,
                data={"media_data": base64.b64encode(image).decode("ascii")},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise self._fail(f"media upload failed: {exc}") from exc

        if response.status_code >= 400:
            raise self._fail(f"media upload rejected: {_error_detail(response)}")
        data = _json(response)
        if data.get("errors") or not data.get("media_id_string"):
            raise self._fail(f"media upload errors: {data.get('errors')}")

        logger.info("Media uploaded successfully. Media ID: %s", data["media_id_string"])
        return data["media_id_string"]

    def post(self, text: str, image_url: str) -> str:
        payload: dict = {"text": text}
        if image_url:
            payload["media"] = {"media_ids": [self.upload_media(image_url)]}

        try:
            response = self.oauth.post(TWITTER_TWEETS_URL, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise self._fail(f"tweet failed: {exc}") from exc

        if response.status_code >= 400:
            raise self._fail(f"tweet rejected: {_error_detail(response)}")

        tweet_id = (_json(response).get("data") or {}).get("id", "")
        logger.info("Successfully posted to Twitter: %s", tweet_id)
        return tweet_id


class FacebookPoster(BasePoster):
    """Posts a photo with caption to a Facebook page (multipart upload)."""

    PLATFORM = SocialPlatform.FACEBOOK

    @property
    def is_configured(self) -> bool:
        return bool(self.social.facebook_page_access_token and self.social.facebook_page_id)

    def post(self, text: str, image_url: str) -> str:
        image = self._download_image(image_url)
        url = f"{GRAPH_API_BASE}/{self.social.graph_api_version}/{self.social.facebook_page_id}/photos"
        try:
            response = self.session.post(
                url,
                data={
                    "access_token": self.social.facebook_page_access_token,
                    "message": text,
                },
                files={"source": ("image.jpg", image)},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise self._fail(str(exc)) from exc

        data = _json(response)
        if response.status_code >= 400 or data.get("error"):
            raise self._fail(f"photo post rejected: {_error_detail(response)}")

        post_id = data.get("post_id") or data.get("id", "")
        logger.info("Successfully posted to Facebook: %s", post_id)
        return post_id


class InstagramPoster(BasePoster):
    """Publishes an image post via the two-step container flow."""

    PLATFORM = SocialPlatform.INSTAGRAM

    @property
    def is_configured(self) -> bool:
        return bool(
            self.social.facebook_page_access_token
            and self.social.instagram_business_account_id
        )

    @property
    def account_url(self) -> str:
        return (
            f"{GRAPH_API_BASE}/{self.social.graph_api_version}"
            f"/{self.social.instagram_business_account_id}"
        )

    def post(self, text: str, image_url: str) -> str:
        creation_id = self._graph_post(
            "media",
            {
                "image_url": image_url,
                "caption": text,
                "access_token": self.social.facebook_page_access_token,
            },
            "creating Instagram media",
        )
        media_id = self._graph_post(
            "media_publish",
            {
                "creation_id": creation_id,
                "access_token": self.social.facebook_page_access_token,
            },
            "publishing Instagram media",
        )
        logger.info("Successfully posted to Instagram: %s", media_id)
        return media_id

    def _graph_post(self, edge: str, params: dict, action: str) -> str:
        try:
            response = self.session.post(
                f"{self.account_url}/{edge}", data=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise self._fail(f"error {action}: {exc}") from exc

        data = _json(response)
        if response.status_code >= 400 or data.get("error") or not data.get("id"):
            raise self._fail(f"error {action}: {_error_detail(response)}")
        return data["id"]


def build_posters(settings: Settings) -> dict[SocialPlatform, BasePoster]:
    """One poster per platform, in fan-out order."""
    return {
        SocialPlatform.TWITTER: TwitterPoster(settings),
        SocialPlatform.FACEBOOK: FacebookPoster(settings),
        SocialPlatform.INSTAGRAM: InstagramPoster(settings),
    }
