import unittest

from codarows.exceptions import CodaApiInSafeMode, RowValidationError
from codarows.models import Row
from codarows.rows import Rows

from fakes import FakeConnection

ROW = {'cells': [{'column': 'c-1', 'value': '123'}]}
BAD_ROW = {'cells': [{'column': 'c-1'}]}


class BaseTestRows(unittest.TestCase):
    content = {'requestId': 'abc-123-def-456'}

    def setUp(self):
        self.conn = FakeConnection(content=self.content)
        self.rows = Rows(self.conn)


class TestRead(BaseTestRows):
    content = {'items': [{'id': 'i-1', 'name': 'foo'}],
               'nextPageToken': 'eyJsaW1pd'}

    def test_list_rows(self):
        res = self.rows.list_rows('d1', 't1', {'limit': 10})
        self.assertIs(res, self.content)
        self.assertEqual(self.conn.calls,
                         [('GET', '/docs/d1/tables/t1/rows', {'limit': 10}, None)])

    def test_list_rows_no_options(self):
        self.rows.list_rows('d1', 't1')
        self.assertEqual(self.conn.calls,
                         [('GET', '/docs/d1/tables/t1/rows', None, None)])

    def test_get_row(self):
        st, res = self.rows.get_row('d1', 't1', 'i-1')
        self.assertEqual(st, 200)
        self.assertIs(res, self.content)
        self.assertEqual(self.conn.calls,
                         [('GET', '/docs/d1/tables/t1/rows/i-1', None, None)])


class TestDelete(BaseTestRows):
    def test_delete_row(self):
        resp = self.rows.delete_row('d1', 't1', 'i-1')
        self.assertEqual(resp, (200, self.content))
        self.assertEqual(self.conn.calls,
                         [('DELETE', '/docs/d1/tables/t1/rows/i-1', None, None)])

    def test_safemode(self):
        self.conn.safemode = True
        with self.assertRaises(CodaApiInSafeMode):
            self.rows.delete_row('d1', 't1', 'i-1')
        self.assertEqual(self.conn.calls, [])


class TestInsertOrUpsert(BaseTestRows):
    def test_insert(self):
        self.rows.insert_or_upsert_rows('d1', 't1', [ROW])
        self.assertEqual(len(self.conn.calls), 1)
        method, path, query, body = self.conn.calls[0]
        self.assertEqual(method, 'POST')
        self.assertEqual(path, '/docs/d1/tables/t1/rows')
        self.assertEqual(query, {'disableParsing': True})
        self.assertEqual(body, {'rows': [ROW], 'keyColumns': []})

    def test_upsert(self):
        self.rows.insert_or_upsert_rows('d1', 't1', [ROW], ['c-1'],
                                        {'disableParsing': False})
        _, _, query, body = self.conn.calls[0]
        self.assertEqual(query, {'disableParsing': False})
        self.assertEqual(body, {'rows': [ROW], 'keyColumns': ['c-1']})

    def test_single_key_column(self):
        self.rows.insert_or_upsert_rows('d1', 't1', [ROW], 'c-1')
        _, _, _, body = self.conn.calls[0]
        self.assertEqual(body['keyColumns'], ['c-1'])

    def test_key_columns_tuple(self):
        self.rows.insert_or_upsert_rows('d1', 't1', [ROW], ('c-1', 'c-2'))
        _, _, _, body = self.conn.calls[0]
        self.assertEqual(body['keyColumns'], ['c-1', 'c-2'])

    def test_row_objects(self):
        row = Row.from_pairs([('c-1', '123')])
        self.rows.insert_or_upsert_rows('d1', 't1', [row, ROW])
        _, _, _, body = self.conn.calls[0]
        self.assertEqual(body['rows'], [ROW, ROW])

    def test_invalid_row(self):
        with self.assertRaises(RowValidationError) as ctx:
            self.rows.insert_or_upsert_rows('d1', 't1', [ROW, BAD_ROW, {}])
        self.assertIs(ctx.exception.row, BAD_ROW)
        self.assertEqual(ctx.exception.index, 1)
        self.assertIn('rows[1]', str(ctx.exception))
        self.assertEqual(self.conn.calls, [])

    def test_no_rows(self):
        with self.assertRaises(RowValidationError):
            self.rows.insert_or_upsert_rows('d1', 't1', [])
        self.assertEqual(self.conn.calls, [])

    def test_strict(self):
        rows = Rows(self.conn, strict=True)
        with self.assertRaises(RowValidationError):
            rows.insert_or_upsert_rows(
                'd1', 't1', [{'cells': [{'column': 'c-1', 'value': 1}]}])
        self.assertEqual(self.conn.calls, [])

    def test_safemode(self):
        self.conn.safemode = True
        with self.assertRaises(CodaApiInSafeMode):
            self.rows.insert_or_upsert_rows('d1', 't1', [ROW])
        self.assertEqual(self.conn.calls, [])


class TestUpdate(BaseTestRows):
    def test_update(self):
        resp = self.rows.update_row('d1', 't1', 'i-1', ROW)
        self.assertEqual(resp, (200, self.content))
        self.assertEqual(self.conn.calls,
                         [('PUT', '/docs/d1/tables/t1/rows/i-1',
                           {'disableParsing': True}, {'row': ROW})])

    def test_invalid_row(self):
        for row in ({}, {'cells': 'nope'}, BAD_ROW):
            with self.subTest(row=row):
                with self.assertRaises(RowValidationError) as ctx:
                    self.rows.update_row('d1', 't1', 'i-1', row)
                self.assertIsNone(ctx.exception.index)
        self.assertEqual(self.conn.calls, [])

    def test_default_options_not_shared(self):
        self.rows.update_row('d1', 't1', 'i-1', ROW)
        self.conn.calls[0][2]['disableParsing'] = False
        self.rows.update_row('d1', 't1', 'i-1', ROW)
        self.assertEqual(self.conn.calls[1][2], {'disableParsing': True})


if __name__ == '__main__':
    unittest.main()
