"""
NewsAPI Loader
==============
Fetches recent English-language articles on AI and the labor economy.

NewsAPI docs: https://newsapi.org/docs/endpoints/everything
"""

from typing import List, Optional

import requests

from .base_loader import BaseLoader
from ..config import NEWS_LANGUAGE, NEWS_PAGE_SIZE, NEWS_QUERY
from ..errors import NoDataError
from ..models import Article


class NewsLoader(BaseLoader):
    """Client for the NewsAPI `everything` endpoint."""

    SOURCE_NAME = "NewsAPI"
    BASE_URL = "https://newsapi.org/v2"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        super().__init__(base_url=base_url, session=session, timeout=timeout)
        self.api_key = api_key

    def fetch_articles(
        self,
        query: str = NEWS_QUERY,
        page_size: int = NEWS_PAGE_SIZE,
        language: str = NEWS_LANGUAGE,
    ) -> List[Article]:
        """
        Fetch the most recent articles matching the query.

        Args:
            query: NewsAPI search expression.
            page_size: Maximum number of articles.
            language: ISO language code.

        Returns:
            Articles, newest first.

        Raises:
            UpstreamError: If NewsAPI answers with a non-success status.
            NoDataError: If zero articles come back.
        """
        params = {
            "q": query,
            "sortBy": "publishedAt",
            "pageSize": page_size,
            "language": language,
        }
        self.logger.info("Fetching news from NewsAPI...")
        data = self.get_json("everything", params=params, headers={"X-Api-Key": self.api_key})

        articles = [Article.from_api(item) for item in data.get("articles") or []]
        self.logger.info(f"Found {len(articles)} articles")

        if not articles:
            raise NoDataError("No articles found")
        return articles
