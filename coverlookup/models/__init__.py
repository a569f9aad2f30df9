from coverlookup.models.cover import CoverRequest, CoverResult

__all__ = ['CoverRequest', 'CoverResult']
