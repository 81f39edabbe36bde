"""
Codarows exception hierarchy.
-----------------------------

Exceptions listed here are raised by Codarows itself. The api calls, 
however, are delegated to Requests, and will throw the exceptions 
provided by Requests (``HTTPError``, ``ConnectionError``...) unmodified.
"""

class CodaApiException(Exception): 
    """The base CodaApi exception."""
    pass

class CodaApiNotConfigured(CodaApiException): 
    """A configuration error occurred."""
    pass

class CodaApiInSafeMode(CodaApiException): 
    """Codarows is in safe mode, no writing to the doc is possible."""
    pass

class RowValidationError(CodaApiException, ValueError):
    """A row (or one of its cells) does not have the required shape.

    Raised before any api call is made. ``row`` is the offending row, 
    ``index`` its position in a batch of rows (``None`` for a single row), 
    ``violations`` a list of messages describing what is wrong.
    """
    def __init__(self, row, violations: list[str], 
                 index: int|None = None) -> None:
        self.row = row
        self.violations = violations
        self.index = index
        where = '' if index is None else f' (rows[{index}])'
        msg = f"'row' is not of the correct form{where} - for {row!r}: "
        msg += '; '.join(violations)
        super().__init__(msg)
