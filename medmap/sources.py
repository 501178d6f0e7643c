"""Reputable-source records used as context when verifying a concept"""

import logging
from typing import List, Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup
from flask.logging import default_handler

from .config import Config
from .models import SourceRecord
from .variable_handler import VariableHandler

SEARCH_URL_TEMPLATE = "https://{{ domain }}/search?q={{ query }}"
DEFAULT_SNIPPET = "Medical information from reputable source"


def encode_query(text: str) -> str:
    """Percent-encode like encodeURIComponent"""
    return quote(text, safe="-_.!~*'()")


class SourceFinder:
    """Builds search URLs on reputable medical sites for a concept

    No search engine is queried. With verification.fetch_sources enabled the
    templated pages are downloaded and their title/first paragraph replace the
    placeholder title/snippet.
    """

    def __init__(self, config: Config, variable_handler: Optional[VariableHandler] = None):
        self.config = config
        self.variable_handler = variable_handler or VariableHandler(config)
        self.session = requests.Session()

        self.logger = logging.getLogger("app.services")
        self.logger.addHandler(default_handler)
        self.logger.setLevel(self.config.get("loglevel", default=logging.INFO))

    def find(self, concept: str) -> List[SourceRecord]:
        domains = self.config.verification.reputable_sources
        limit = self.config.verification.sources_per_concept
        sources = []
        for domain in domains[:limit]:
            url = self.variable_handler.resolve(
                SEARCH_URL_TEMPLATE, {"domain": domain, "query": encode_query(concept)}
            )
            record = SourceRecord(url=url, title=f"{concept} - {domain}", snippet=DEFAULT_SNIPPET)
            if self.config.verification.fetch_sources:
                record = self.fetch(record)
            sources.append(record)
        return sources

    def fetch(self, record: SourceRecord) -> SourceRecord:
        """Fill title/snippet from the live page, keep the record as is on failure"""
        try:
            response = self.session.get(record.url, timeout=self.config.verification.fetch_timeout)
            response.raise_for_status()
        except requests.RequestException as ex:
            self.logger.warning("Fetching %s failed: %s", record.url, ex)
            return record

        soup = BeautifulSoup(response.text, "html.parser")
        title = soup.title.get_text(strip=True) if soup.title else ""
        paragraph = soup.find("p")
        snippet = paragraph.get_text(" ", strip=True) if paragraph else ""

        return SourceRecord(
            url=record.url,
            title=title or record.title,
            snippet=snippet[:500] or record.snippet,
        )
