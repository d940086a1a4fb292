"""
HTTP helpers for the Ore client
"""

from typing import Dict, Optional, Union
from urllib.parse import quote_plus


def encode_query_string(query: Optional[Union[str, Dict[str, str]]]) -> str:
    """Percent-encode every key and value of a query string

    Accepts either a mapping of parameters or a raw query string such as
    ``"?q=world edit&limit=5"``. Returns an empty string for an empty query,
    otherwise the rebuilt string including the leading ``?``.
    """
    if not query:
        return ""

    if isinstance(query, dict):
        pairs = [(str(k), None if v is None else str(v)) for k, v in query.items()]
    else:
        raw = query[1:] if query.startswith('?') else query
        pairs = []
        for param in raw.split('&'):
            if not param:
                continue
            key, sep, value = param.partition('=')
            pairs.append((key, value if sep else None))

    if not pairs:
        return ""

    encoded = []
    for key, value in pairs:
        if value is None:
            encoded.append(quote_plus(key))
        else:
            encoded.append(f"{quote_plus(key)}={quote_plus(value)}")
    return "?" + "&".join(encoded)
