"""HTML microdata extractor built on BeautifulSoup."""

import logging
from typing import List

from bs4 import BeautifulSoup, Tag

from refminer.models import MicroRecord
from .base_extractor import BaseRecordExtractor

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Elements whose microdata value lives in an attribute rather than the text
_SRC_ELEMENTS = {"audio", "embed", "iframe", "img", "source", "track", "video"}
_HREF_ELEMENTS = {"a", "area", "link"}
_VALUE_ELEMENTS = {"data", "meter"}


class MicrodataExtractor(BaseRecordExtractor):
    """
    Extract top-level microdata items (itemscope without itemprop).

    Nested items are not emitted as records of their own; the property that
    holds them takes the nested item's "name" (or its visible text).
    """

    def __init__(self, parser: str = "html.parser"):
        """
        Args:
            parser: BeautifulSoup tree builder name
        """
        self.parser = parser

    def extract(self, content: str) -> List[MicroRecord]:
        if not content or "itemscope" not in content:
            return []

        soup = BeautifulSoup(content, self.parser)
        records = []
        for item in soup.find_all(attrs={"itemscope": True}):
            if item.has_attr("itemprop"):
                continue
            records.append(self._read_item(item))

        logger.debug(f"Extracted {len(records)} microdata items")
        return records

    def _read_item(self, item: Tag) -> MicroRecord:
        record = MicroRecord(types=item.get("itemtype", "").split())
        self._collect_properties(item, record)
        return record

    def _collect_properties(self, element: Tag, record: MicroRecord):
        """Walk children, stopping at nested items which own their own properties."""
        for child in element.children:
            if not isinstance(child, Tag):
                continue
            if child.has_attr("itemprop"):
                value = self._property_value(child)
                for name in child["itemprop"].split():
                    record.add(name, value)
            if not child.has_attr("itemscope"):
                self._collect_properties(child, record)

    def _property_value(self, tag: Tag) -> str:
        if tag.has_attr("itemscope"):
            nested = self._read_item(tag)
            names = nested.get("name")
            return names[0] if names else tag.get_text(" ", strip=True)
        if tag.has_attr("content"):
            return tag["content"]
        if tag.name in _SRC_ELEMENTS:
            return tag.get("src", "")
        if tag.name in _HREF_ELEMENTS:
            return tag.get("href", "")
        if tag.name == "object":
            return tag.get("data", "")
        if tag.name in _VALUE_ELEMENTS:
            return tag.get("value", "")
        if tag.name == "time" and tag.has_attr("datetime"):
            return tag["datetime"]
        return tag.get_text(" ", strip=True)
