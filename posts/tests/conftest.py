import io

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.db.models.query import QuerySet
from PIL import Image


@pytest.fixture
def png_file():
    buffer = io.BytesIO()
    Image.new('RGB', (4, 4), color=(200, 120, 40)).save(buffer, format='PNG')
    return SimpleUploadedFile('sunrise.png', buffer.getvalue(), content_type='image/png')


@pytest.fixture
def failing_queries(monkeypatch):
    """
    Make the next ``count`` query evaluations raise DatabaseError, as a
    missing composite index would. Returns the list of raised errors.
    """
    raised = []
    original = QuerySet._fetch_all

    def install(count=1):
        def _fetch_all(self):
            if self._result_cache is None and len(raised) < count:
                raised.append(DatabaseError('index required'))
                raise raised[-1]
            return original(self)

        monkeypatch.setattr(QuerySet, '_fetch_all', _fetch_all)
        return raised

    return install
