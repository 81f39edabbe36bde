"""
The default Connection: posts calls to the Coda Api with Requests.

Any object exposing ``get``, ``post``, ``put`` and ``delete`` with the
same signatures as ``Connection`` may be given to ``codarows.rows.Rows``
instead.
"""

import logging
import json as modjson
from typing import Any
from requests import (Request, PreparedRequest, Response,
                      Session, JSONDecodeError)

from codarows.config import Configurator, apikey2output

logger = logging.getLogger(__name__)

Apiresp = tuple[int, Any] #: the return type of all api call functions

def query2params(query: dict|None) -> dict|None:
    """Render booleans the way the Coda Api wants them (``true``/``false``).

    Requests would send ``True``/``False`` instead. Other values are
    left alone.
    """
    if query is None:
        return None
    return {k: (str(v).lower() if isinstance(v, bool) else v)
            for k, v in query.items()}


class Connection:
    """The engine for posting a call to the Coda Apis."""
    def __init__(self,
                 config: dict[str, str]|None = None,
                 request_options: dict|None = None,
                 custom_configurator: Configurator|None = None,
                 ) -> None:
        self.configurator = custom_configurator or Configurator(config)
        self.session = None           #: Requests session object, or None
        self.request_options = dict() #: other options to pass to Requests
        if request_options:
            self.request_options = request_options
        self.apicalls: int = 0        #: total number of API calls
        self.dry_run: bool = False    #: prepare, do not post request
        self.request: PreparedRequest|None = None #: last request posted
        self.response: Response|None = None       #: last response retrieved

    @property
    def ok(self) -> bool:
        """``False`` if a HTTP error occurred in the response.

        Also, if no response was retrieved, will be ``False`` by default.
        """
        try:
            return self.response.ok # type: ignore
        except AttributeError:
            # Requests' "ok" only means "HTTPError"; we extend it to every
            # RequestException where the response was not even retrieved
            return False

    @property
    def safemode(self) -> bool:
        """``True`` if writing to the doc is forbidden."""
        return self.configurator.safemode

    def open_session(self) -> None:
        """Open a Requests sessions for all subsequent Api calls."""
        if self.session:
            self.session.close()
        self.session = Session()

    def close_session(self) -> None:
        """Close an open session, if any."""
        if self.session:
            self.session.close()
        self.session = None

    def get(self, path: str, query: dict|None = None) -> Apiresp:
        return self.apicall(path, 'GET', query=query)

    def post(self, path: str, query: dict|None = None,
             body: Any = None) -> Apiresp:
        return self.apicall(path, 'POST', query=query, body=body)

    def put(self, path: str, query: dict|None = None,
            body: Any = None) -> Apiresp:
        return self.apicall(path, 'PUT', query=query, body=body)

    def delete(self, path: str, query: dict|None = None) -> Apiresp:
        return self.apicall(path, 'DELETE', query=query)

    def response_as_json(self) -> str:
        """Return the response content as (unicode) parsable json."""
        if self.response is not None:
            resp = self.response.text or 'null'
            # error pages may come back as html or plain text
            try:
                _ = modjson.loads(resp)
            except modjson.JSONDecodeError:
                resp = modjson.dumps(resp)
            return resp
        return 'null'

    def apicall(self, path: str, method: str = 'GET',
                query: dict|None = None, body: Any = None) -> Apiresp:
        """The engine responsible for actually calling the Apis.

        ``path`` is appended to the configured server url, ``query`` is
        sent as url parameters and ``body``, if not ``None``, is serialized
        to compact json.

        Return a ``Apiresp``-type tuple (status_code, resp_content)
        where "resp_content" is a Json-decoded Python object (or the
        response text, if not json; or ``None``, if empty).

        May throw any ``requests.RequestException`` if a transport problem
        occurred. Will throw ``requests.HTTPError`` if the status code
        is >=400 *and* the config key ``CODA_RAISE_ERROR`` is set (default).
        The ``ok`` property will be ``False`` if errors occurred.
        """
        self.request = None
        self.response = None
        url = f'{self.configurator.server}{path}'
        headers = {'Content-Type': 'application/json',
                   'Accept': 'application/json',
                   'Authorization':
                        f'Bearer {self.configurator.config["CODA_API_KEY"]}'}
        data = None
        if body is not None:
            data = modjson.dumps(body, separators=(',', ':')).encode('utf8')
        req_opts = {'verify': self.configurator.ssl_verify,
                    **self.request_options}
        r = Request(method, url, headers=headers, params=query2params(query),
                    data=data)
        session = self.session or Session()
        try:
            self.request = session.prepare_request(r)
            logger.debug('%s %s', method, self.request.url)
            if self.dry_run: # let's assume a dry run equals to HTTPError...
                return 418, {'No Content': 'Codarows teapot is running dry!'}
            self.response = session.send(self.request, **req_opts)
        finally:
            if session is not self.session: # a one-off session
                session.close()
        self.apicalls += 1
        if not self.response.ok:
            logger.warning('%s %s returned %s %s', method, self.request.url,
                           self.response.status_code, self.response.reason)
        if self.configurator.raise_option:
            self.response.raise_for_status()
        if not self.response.content:
            return self.response.status_code, None
        try:
            return self.response.status_code, self.response.json()
        except JSONDecodeError:
            return self.response.status_code, self.response.text

    def inspect(self, sep: str = '\n', max_content: int = 1000) -> str:
        """Collect info on the last api call that was requested (and possibly
        responded to) by the server.

        Use ``sep`` to set a custom separator between elements,
        and ``max_content`` to limit request/response body's content size.

        Intended for debug: add a ``print(self.inspect())`` right after the
        call to inspect. Works even if the server returned a "bad" status
        code. If server did not respond, only request data will be recorded.
        """
        cfg = '->Codarows config.: '
        cfg += f'{self.configurator.config2output(self.configurator.config)}'
        req = self.request
        res = self.response
        if req is None:
            return f'->Req.: no request data{sep}{cfg}'
        txt = f'->Req. url: {req.url}{sep}'
        txt += f'->Req. method: {req.method}{sep}'
        headers = dict(req.headers)
        prot, key = headers['Authorization'].split()
        headers['Authorization'] = f'{prot} {apikey2output(key)}'
        txt += f'->Req. headers: {headers}{sep}'
        txt += f'->Req. body: {str(req.body)[:max_content]}{sep}'
        if res is None:
            txt += f'->Resp.: no response data{sep}{cfg}'
            return txt
        txt += f'->Resp. url: {res.url}{sep}'
        txt += f'->Resp. result: {res.status_code} {res.reason}{sep}'
        txt += f'->Resp. headers: {res.headers}{sep}'
        txt += f'->Resp. content: {self.response_as_json()[:max_content]}{sep}'
        txt += cfg
        return txt
