"""
Keyword extraction for transaction descriptions.

Bank descriptions are noisy ("PwP  Privacy.com Privacycom TN: 5199481 WEB
ID: 626060084") while ledger payees are short ("Privacy"). Both sides are
reduced to a set of meaningful merchant keywords before comparison.
"""

import re

from ..config import KeywordsConfig

TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


class KeywordExtractor:
    """Reduces free text to a normalized set of merchant keywords."""

    def __init__(self, config: KeywordsConfig):
        """
        Initialize the extractor.

        Args:
            config: Stoplist, alias and compound tables
        """
        self.min_token_length = config.min_token_length
        self.min_reference_digits = config.min_reference_digits
        self.stoplist = frozenset(word.lower() for word in config.stoplist)
        self.aliases = {key.lower(): value.lower() for key, value in config.aliases.items()}
        self.compounds = {
            key.lower(): [part.lower() for part in parts] for key, parts in config.compounds.items()
        }

    def extract(self, text: str) -> frozenset[str]:
        """
        Extract keywords from a description.

        Args:
            text: Description, payee name or memo

        Returns:
            Set of normalized keywords (empty for blank input)
        """
        if not text:
            return frozenset()

        keywords: set[str] = set()
        for token in TOKEN_PATTERN.findall(text.lower()):
            if not self._is_meaningful(token):
                continue

            keywords.add(self.aliases.get(token, token))
            for part in self.compounds.get(token, []):
                keywords.add(self.aliases.get(part, part))

        return frozenset(keywords)

    def _is_meaningful(self, token: str) -> bool:
        if len(token) < self.min_token_length:
            return False
        # Reference and confirmation numbers
        if token.isdigit() and len(token) >= self.min_reference_digits:
            return False
        return token not in self.stoplist
