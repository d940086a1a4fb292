"""
HTTP layer for talking to an Ore repository
"""
from .connection import OreConnection, create_session
from .download import PluginDownload, parse_content_disposition
from .utils import encode_query_string

__all__ = ['OreConnection', 'create_session', 'PluginDownload', 'parse_content_disposition',
           'encode_query_string']
