"""Twitter/X social search backed by a lazily imported ``twikit`` client.

The client library is heavyweight and login can be slow or fail outright, so
the provider walks an explicit state machine::

    UNCONFIGURED                      (no credentials, terminal)
    CONFIGURING -> CONFIGURED         (dynamic import + client construction)
    AUTHENTICATING -> AUTHENTICATED   (available)
                   -> AUTH_FAILED     (unavailable until authenticate(retry=True))

Nothing here runs at import or construction time; ``start()`` launches the
handshake as a task whose completion the service awaits with a deadline.
"""

import asyncio
import importlib
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional

from truthseek.utils.logger import get_logger
from truthseek.web.errors import AuthenticationFailed, ProviderCallFailed, ProviderUnavailable
from truthseek.web.options import SearchOptions
from truthseek.web.pagination import collect
from truthseek.web.search_provider import SearchProvider, SearchResponse, SearchResult

log = get_logger(__name__)

# twikit caps a single page at 20 tweets; further pages are fetched lazily.
PAGE_SIZE = 20

# twikit has a single Media product for photo and video results.
SEARCH_MODES = {
    "top": "Top",
    "latest": "Latest",
    "media": "Media",
    "photos": "Media",
    "videos": "Media",
}


class TwitterState(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURING = "configuring"
    CONFIGURED = "configured"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    AUTH_FAILED = "auth_failed"


def _load_twikit() -> ModuleType:
    return importlib.import_module("twikit")


def simplify_tweet(tweet: Any) -> Dict[str, Any]:
    """Reduce a twikit ``Tweet`` to the fields the verifier cares about."""
    user = getattr(tweet, "user", None)
    username = getattr(user, "screen_name", "") or ""
    return {
        "text": getattr(tweet, "full_text", None) or getattr(tweet, "text", "") or "",
        "likes": getattr(tweet, "favorite_count", 0) or 0,
        "retweets": getattr(tweet, "retweet_count", 0) or 0,
        "replies": getattr(tweet, "reply_count", 0) or 0,
        "username": username,
        "name": getattr(user, "name", "") or "",
        "date": getattr(tweet, "created_at", None),
        "url": f"https://twitter.com/{username}/status/{getattr(tweet, 'id', '')}",
    }


class TwitterSearch(SearchProvider):
    """Search recent or top tweets once logged in."""

    name = "twitter"

    def __init__(
        self,
        username: str,
        password: str,
        email: str = "",
        cookies_file: str = "",
        loader: Optional[Callable[[], ModuleType]] = None,
        language: str = "en-US",
    ):
        self._username = username
        self._password = password
        self._email = email
        self._cookies_file = cookies_file
        self._loader = loader or _load_twikit
        self._language = language
        self._client: Any = None
        self._configure_task: Optional[asyncio.Future] = None
        self._lock = asyncio.Lock()

        if not (username and password):
            log.warning("Twitter credentials are not set, Twitter search will not be available")
            self.state = TwitterState.UNCONFIGURED
        else:
            self.state = TwitterState.CONFIGURING

    def is_available(self) -> bool:
        return self.state is TwitterState.AUTHENTICATED

    # -- Initialisation -----------------------------------------------------

    async def configure(self) -> bool:
        """Import the client library and build the client (at most once)."""
        if self.state is TwitterState.UNCONFIGURED:
            return False
        if self._client is not None:
            return True
        if self._configure_task is None:
            self._configure_task = asyncio.ensure_future(self._configure())
        return await asyncio.shield(self._configure_task)

    async def _configure(self) -> bool:
        self.state = TwitterState.CONFIGURING
        log.debug("Attempting to import Twitter client library...")
        try:
            module = self._loader()
            self._client = module.Client(self._language)
        except Exception:
            log.exception("Failed to initialize Twitter provider")
            self.state = TwitterState.AUTH_FAILED
            return False
        self.state = TwitterState.CONFIGURED
        log.info("Initialized Twitter search provider")
        return True

    async def authenticate(self, retry: bool = False) -> None:
        """Log in (idempotent). Raises ``AuthenticationFailed`` on failure.

        A failed provider stays failed unless *retry* is passed.
        """
        async with self._lock:
            if self.state is TwitterState.AUTHENTICATED:
                return
            if self.state is TwitterState.UNCONFIGURED:
                raise AuthenticationFailed(self.name, "credentials are not set")
            if self.state is TwitterState.AUTH_FAILED:
                if not retry:
                    raise AuthenticationFailed(self.name, "previous attempt failed")
                if self._client is None:
                    self._configure_task = None
                    self.state = TwitterState.CONFIGURING
                else:
                    self.state = TwitterState.CONFIGURED

            if not await self.configure():
                raise AuthenticationFailed(self.name, "Twitter client could not be initialized")

            self.state = TwitterState.AUTHENTICATING
            try:
                await self._login()
            except Exception as exc:
                self.state = TwitterState.AUTH_FAILED
                log.error("Twitter authentication failed: %s", exc)
                raise AuthenticationFailed(self.name, str(exc)) from exc
            self.state = TwitterState.AUTHENTICATED

    async def _login(self) -> None:
        cookies = Path(self._cookies_file) if self._cookies_file else None
        if cookies is not None and cookies.exists():
            self._client.load_cookies(str(cookies))
            log.info("Already logged in to Twitter with existing cookies")
            return

        log.info("Logging in to Twitter...")
        await self._client.login(
            auth_info_1=self._username,
            auth_info_2=self._email or None,
            password=self._password,
        )
        if cookies is not None:
            cookies.parent.mkdir(parents=True, exist_ok=True)
            self._client.save_cookies(str(cookies))
            log.info("Twitter login successful, cookies cached")

    def start(self) -> asyncio.Future:
        """Launch the handshake; the task resolves to True once available."""
        return asyncio.ensure_future(self._handshake())

    async def _handshake(self) -> bool:
        try:
            await self.authenticate()
        except AuthenticationFailed as exc:
            log.error("%s", exc)
            return False
        return True

    # -- Search ---------------------------------------------------------------

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> SearchResponse:
        if not self.is_available():
            raise ProviderUnavailable(
                self.name,
                "not initialized or authenticated, make sure Twitter credentials are set",
            )

        opts = (options or SearchOptions()).twitter
        product = SEARCH_MODES.get(opts.mode.lower())
        if product is None:
            raise ValueError(
                f"unknown Twitter search mode {opts.mode!r}, expected one of {sorted(SEARCH_MODES)}"
            )
        log.debug('Executing Twitter search for: "%s"', query)
        try:
            first_page = await self._client.search_tweet(
                query, product, count=min(PAGE_SIZE, opts.count + opts.offset)
            )
            tweets = await collect(first_page, offset=opts.offset, count=opts.count)
        except Exception as exc:
            log.error('Twitter search error for "%s": %s', query, exc)
            raise ProviderCallFailed(self.name, str(exc)) from exc

        simplified = [simplify_tweet(tweet) for tweet in tweets]
        log.debug('Found %d tweets for query: "%s" (offset: %d)',
                  len(simplified), query, opts.offset)
        return SearchResponse(
            provider=self.name,
            results=[self._to_result(tweet, index) for index, tweet in enumerate(simplified)],
            raw=simplified,
        )

    def _to_result(self, tweet: Dict[str, Any], index: int) -> SearchResult:
        return SearchResult(
            title=f"Tweet by @{tweet['username']}",
            url=tweet["url"],
            content=tweet["text"],
            score=1.0 - index * 0.05,
            source=self.name,
            metadata={
                key: tweet[key]
                for key in ("likes", "retweets", "replies", "username", "name", "date")
            },
        )

    # -- Extras ---------------------------------------------------------------

    async def get_trends(self) -> List[Dict[str, Any]]:
        """Current trending topics."""
        await self.authenticate()
        log.debug("Fetching current Twitter trends")
        try:
            trends = await self._client.get_trends("trending")
        except Exception as exc:
            log.error("Error fetching Twitter trends: %s", exc)
            raise ProviderCallFailed(self.name, "failed to fetch trends") from exc
        return [
            {
                "name": getattr(trend, "name", ""),
                "tweets_count": getattr(trend, "tweets_count", None),
                "domain_context": getattr(trend, "domain_context", None),
            }
            for trend in trends
        ]

    async def get_user_tweets(self, username: str, count: int = 20) -> List[Dict[str, Any]]:
        """Latest tweets posted by *username*, simplified."""
        await self.authenticate()
        log.debug("Fetching tweets for user: %s", username)
        try:
            user = await self._client.get_user_by_screen_name(username)
            first_page = await self._client.get_user_tweets(
                user.id, "Tweets", count=min(PAGE_SIZE, count)
            )
            tweets = await collect(first_page, offset=0, count=count)
        except Exception as exc:
            log.error("Error fetching tweets for %s: %s", username, exc)
            raise ProviderCallFailed(self.name, f"failed to fetch tweets for user: {username}") from exc
        return [simplify_tweet(tweet) for tweet in tweets]

    @staticmethod
    def search_modes() -> Dict[str, str]:
        return dict(SEARCH_MODES)
