"""
Codarows: a Python client for the Coda "rows" Api.
==================================================

`Coda <https://coda.io/>`_ docs hold tables, and tables hold rows.
This module wraps the five Api calls dealing with rows: list them,
see one, delete one, insert (or upsert) many, update one.

Codarows is rather low-level: it will call the api and retrieve the
response "as is". The only thing checked on our side is the shape of the
rows you are about to write: if a row is malformed, ``RowValidationError``
is raised and nothing is posted. Anything else (unknown ids, wrong value
types...) is up to the Api, and you will simply receive a bad HTTP status
code, or a ``requests.HTTPError``.

Basic usage goes as follows::

    from codarows.connection import Connection
    from codarows.rows import Rows

    rows = Rows(Connection({'CODA_API_KEY': 'my-api-key'}))
    # fetch the first 10 rows in a table
    response = rows.list_rows('AbCDeFGH', 'grid-pqRst-U', {'limit': 10})
    # add a row, or update it if column "c-tuVwxYz" matches
    row = {'cells': [{'column': 'c-tuVwxYz', 'value': '123'}]}
    status_code, response = rows.insert_or_upsert_rows(
        'AbCDeFGH', 'grid-pqRst-U', [row], key_columns=['c-tuVwxYz'])

See the `Coda API reference <https://coda.io/developers/apis/v1#tag/Rows>`_
for the details of each call and of the accepted options.
"""

from __future__ import annotations

import functools
from typing import Any

from codarows.exceptions import CodaApiInSafeMode, RowValidationError
from codarows.models import Row, check_row, row2dict

#: the default query options for writing calls
DEFAULT_WRITE_OPTIONS = {'disableParsing': True}


def check_safemode(funct):
    """If the connection is in safemode, no writing API call will pass through."""
    @functools.wraps(funct)
    def wrapper(self, *a, **k):
        if getattr(self.connection, 'safemode', False):
            msg = 'Codarows is in safe mode: you cannot write to the doc.'
            raise CodaApiInSafeMode(msg)
        return funct(self, *a, **k)
    return wrapper


class Rows:
    """Translate row operations into Api calls.

    ``connection`` is the object actually posting the calls: usually a
    ``codarows.connection.Connection``. With ``strict=True``, cell columns
    and values must be strings too.
    """
    def __init__(self, connection, strict: bool = False) -> None:
        self.connection = connection
        self.strict = strict

    @staticmethod
    def _path(doc_id: str, table_id: str, row_id: str = '') -> str:
        path = f'/docs/{doc_id}/tables/{table_id}/rows'
        return f'{path}/{row_id}' if row_id else path

    def _validate(self, row: Row|dict, index: int|None = None) -> dict:
        check = check_row(row, self.strict)
        if not check:
            raise RowValidationError(row, check.violations, index)
        return row2dict(row)

    def list_rows(self, doc_id: str, table_id: str,
                  options: dict|None = None) -> Any:
        """Implement GET ``/docs/{docId}/tables/{tableId}/rows``.

        ``options`` are passed as query parameters (eg. ``limit``,
        ``pageToken``, ``useColumnNames``...). Return the response body:
        if there are more rows, use its ``nextPageToken`` to ask again.
        """
        _, res = self.connection.get(self._path(doc_id, table_id),
                                     query=options)
        return res

    def get_row(self, doc_id: str, table_id: str, row_id: str):
        """Implement GET ``/docs/{docId}/tables/{tableId}/rows/{rowId}``."""
        return self.connection.get(self._path(doc_id, table_id, row_id))

    @check_safemode
    def delete_row(self, doc_id: str, table_id: str, row_id: str):
        """Implement DELETE ``/docs/{docId}/tables/{tableId}/rows/{rowId}``."""
        return self.connection.delete(self._path(doc_id, table_id, row_id))

    @check_safemode
    def insert_or_upsert_rows(self, doc_id: str, table_id: str,
                              rows: list[Row|dict],
                              key_columns: list[str]|None = None,
                              options: dict|None = None):
        """Implement POST ``/docs/{docId}/tables/{tableId}/rows``.

        ``rows``: a non-empty list of rows (see ``codarows.models``).
        ``key_columns``: column ids identifying existing rows; if given,
        matching rows are updated by the Api instead of inserted.
        A single column id may be passed as a plain string.
        ``options`` default to ``{'disableParsing': True}``.
        If successful, response will be a ``dict`` with the ``requestId``
        and the ``addedRowIds``.
        """
        if not rows:
            raise RowValidationError(rows, ['no rows to insert'])
        payload = [self._validate(row, i) for i, row in enumerate(rows)]
        if options is None:
            options = dict(DEFAULT_WRITE_OPTIONS)
        if isinstance(key_columns, str): # a single key column
            key_columns = [key_columns]
        json = {'rows': payload, 'keyColumns': list(key_columns or [])}
        return self.connection.post(self._path(doc_id, table_id),
                                    query=options, body=json)

    @check_safemode
    def update_row(self, doc_id: str, table_id: str, row_id: str,
                   row: Row|dict, options: dict|None = None):
        """Implement PUT ``/docs/{docId}/tables/{tableId}/rows/{rowId}``.

        ``options`` default to ``{'disableParsing': True}``.
        If successful, response will be a ``dict`` with the ``requestId``
        and the updated row ``id``.
        """
        json = {'row': self._validate(row)}
        if options is None:
            options = dict(DEFAULT_WRITE_OPTIONS)
        return self.connection.put(self._path(doc_id, table_id, row_id),
                                   query=options, body=json)
