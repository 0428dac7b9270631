"""
Prompt construction for the economic assessment.
"""

from typing import Sequence

from ..config import PROMPT_ARTICLE_LIMIT
from ..models import Article
from .schema import SCHEMAS, SchemaVersion

ARTICLE_SEPARATOR = "\n---\n"
NO_DESCRIPTION = "No description"

SYSTEM_PROMPT = """You are a world-renowned economist and leading expert on technological
disruption and labor markets. You have published extensively on AI's impact on the
American Dream, labor value, and economic inequality.

Analyze the provided news articles. Focus specifically on:
- How AI is reshaping the traditional American Dream of upward mobility through work
- The divergence between productivity gains and labor compensation
- Data-driven trends in job displacement vs. job creation
- The changing value and meaning of human labor
- Economic implications for middle-class prosperity

Write with the authority and depth expected from a top-tier economist. Include
data-driven observations and nuanced economic analysis.
"""


def format_article(article: Article) -> str:
    """Title, description (or placeholder) and publish date for one article."""
    description = article.description if article.description else NO_DESCRIPTION
    lines = [f"Title: {article.title}", f"Description: {description}"]
    if article.published_at:
        lines.append(f"Date: {article.published_at}")
    return "\n".join(lines) + "\n"


def build_articles_text(articles: Sequence[Article], limit: int = PROMPT_ARTICLE_LIMIT) -> str:
    """Join the first `limit` articles with the fixed separator."""
    return ARTICLE_SEPARATOR.join(format_article(a) for a in articles[:limit])


def build_system_prompt(version: SchemaVersion) -> str:
    """System instructions including the JSON shape for `version`."""
    return (
        f"{SYSTEM_PROMPT}\n"
        "Return ONLY a valid JSON object with exactly these keys:\n"
        f"{SCHEMAS[version].prompt_shape}\n\n"
        "No markdown formatting, no commentary before or after the JSON."
    )


def build_user_prompt(articles: Sequence[Article], limit: int = PROMPT_ARTICLE_LIMIT) -> str:
    return (
        "Analyze these recent AI and labor market articles for their economic "
        "implications on American workers and the evolving nature of work:\n\n"
        f"{build_articles_text(articles, limit)}"
    )
