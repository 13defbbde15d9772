import json
from typing import Dict, Mapping, Optional

GENERIC_FIX = "Refer to the rule's help page for remediation guidance and WCAG references."

DEFAULT_SNIPPETS: Dict[str, str] = {
    "color-contrast": (
        "/* Aim for at least 4.5:1 (3:1 for large text) */\n"
        ".text { color: #1a1a1a; background-color: #ffffff; }"
    ),
    "image-alt": '<img src="logo.png" alt="Company logo">',
    "label": (
        '<label for="email">Email address</label>\n'
        '<input type="email" id="email" name="email">'
    ),
    "link-name": '<a href="/pricing">View pricing plans</a>',
    "aria-roles": '<div role="navigation" aria-label="Main menu">...</div>',
    "button-name": '<button type="submit" aria-label="Search">\n  <svg aria-hidden="true">...</svg>\n</button>',
    "html-has-lang": '<html lang="en">',
    "document-title": "<title>Contact us | Example Ltd</title>",
    "heading-order": "<h1>Products</h1>\n<h2>Laptops</h2>\n<h3>Gaming laptops</h3>",
}


class SnippetTable:
    """Rule id -> canned remediation example, with a fallback for unknown rules."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None, fallback: str = GENERIC_FIX):
        self._mapping = dict(DEFAULT_SNIPPETS if mapping is None else mapping)
        self.fallback = fallback or GENERIC_FIX

    def suggest_fix(self, rule_id: Optional[str]) -> str:
        snippet = self._mapping.get(rule_id or "")
        return snippet if snippet else self.fallback

    def __contains__(self, rule_id: str) -> bool:
        return bool(self._mapping.get(rule_id))

    @classmethod
    def from_json(cls, path: str) -> "SnippetTable":
        """Load ``{"rule-id": "snippet", ...}`` from ``path`` and merge it over the defaults."""
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a JSON object of rule id -> snippet")
        fallback = data.pop("*", GENERIC_FIX)
        merged = dict(DEFAULT_SNIPPETS)
        merged.update({str(k): str(v) for k, v in data.items()})
        return cls(merged, fallback=str(fallback))


DEFAULT_TABLE = SnippetTable()


def suggest_fix(rule_id: Optional[str]) -> str:
    return DEFAULT_TABLE.suggest_fix(rule_id)
