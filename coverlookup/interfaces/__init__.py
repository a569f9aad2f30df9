from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface

__all__ = ['CoverSourceInterface', 'HttpClientInterface']
