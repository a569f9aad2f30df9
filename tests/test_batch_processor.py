import asyncio

from coverlookup.models.cover import CoverRequest, CoverResult
from coverlookup.services.batch_processor import BatchProcessor, stored_count


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def make_requests(*titles):
    return [CoverRequest.create(title, ['Author']) for title in titles]


def test_one_result_per_request_in_order():
    async def resolve(title, authors):
        return CoverResult(title=title, authors=tuple(authors), cover_url=f'https://x/{title}.jpg',
                           local_path=f'/covers/{title}.jpg')

    processor = BatchProcessor(resolve, delay=0)
    results = asyncio.run(processor.process_all(make_requests('a', 'b', 'c')))

    assert [r.title for r in results] == ['a', 'b', 'c']
    assert stored_count(results) == 3


def test_crashing_item_is_replaced_by_bare_result():
    async def resolve(title, authors):
        if title == 'bad':
            raise RuntimeError('parser exploded')
        return CoverResult(title=title, authors=tuple(authors), local_path=f'/covers/{title}.jpg')

    processor = BatchProcessor(resolve, delay=0)
    results = asyncio.run(processor.process_all(make_requests('good', 'bad', 'also good')))

    assert len(results) == 3
    assert results[1] == CoverResult(title='bad', authors=('Author',))
    assert stored_count(results) == 2


def test_sleeps_between_items_only():
    async def resolve(title, authors):
        return CoverResult(title=title, authors=tuple(authors))

    sleep = RecordingSleep()
    processor = BatchProcessor(resolve, delay=0.5, sleep=sleep)
    asyncio.run(processor.process_all(make_requests('a', 'b', 'c')))

    assert sleep.calls == [0.5, 0.5]


def test_empty_batch():
    async def resolve(title, authors):
        raise AssertionError('should not be called')

    sleep = RecordingSleep()
    results = asyncio.run(BatchProcessor(resolve, sleep=sleep).process_all([]))

    assert results == []
    assert sleep.calls == []
