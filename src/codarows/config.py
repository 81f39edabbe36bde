import os, os.path
import json as modjson
from pprint import pformat

from codarows.exceptions import CodaApiNotConfigured

# This is the default Codarows configuration.
# Use only non-empty strings as config values.

CODAROWS_CONFIG = {
    'CODA_API_KEY': '<your_api_key_here>',
    'CODA_SERVER_PROTOCOL': 'https://',
    'CODA_API_SERVER': 'coda.io',
    'CODA_API_ROOT': 'apis/v1',
    'CODA_RAISE_ERROR': 'Y',
    'CODA_SAFEMODE': 'N',
    'CODA_SSL_VERIFY': 'Y',
}

CONFIG_FILE = os.path.join('.codarows', 'config.json') #: relative to home dir

def apikey2output(apikey: str) -> str:
    """Obfuscate the secret Coda API key for output printing."""
    klen = len(apikey)
    return apikey if klen < 5 else f'{apikey[:2]}<{klen-4}>{apikey[-2:]}'


def load_config(*json_files: str) -> dict[str, str]:
    """Layer the Codarows configuration: the defaults above, then each of
    ``json_files`` that exists (later files win), then ``CODA_*`` env vars.

    Unknown keys found in json files are kept, but never looked up in the
    environment.
    """
    config = dict(CODAROWS_CONFIG)
    for pth in json_files:
        if os.path.isfile(pth):
            with open(pth, 'r', encoding='utf8') as f:
                config.update(modjson.loads(f.read()))
    config.update({k: os.environ[k] for k in config if k in os.environ})
    return config

def home_config_path() -> str:
    """Where the user configuration lives: ``~/.codarows/config.json``."""
    return os.path.join(os.path.expanduser('~'), CONFIG_FILE)


class Configurator:
    """Hold the configuration in use by a ``Connection``.

    Besides the raw ``config`` dict, expose what the connection needs to
    know at every call: the ``server`` url every path is appended to, and
    the ``raise_option``, ``safemode`` and ``ssl_verify`` switches.
    """
    def __init__(self, config: dict[str, str]|None = None):
        self.config = dict()     # the actual, current configuration
        self.server = ''         # eg. https://coda.io/apis/v1
        self.raise_option = True # raise HTTPError on 4xx/5xx responses
        self.safemode = False    # refuse to write rows
        self.ssl_verify = True   # if Requests should verify certificates
        self.reconfig(config)

    @staticmethod
    def get_config() -> dict[str, str]:
        """The configuration read from ``~/.codarows/config.json`` and from
        the ``CODA_*`` env variables, on top of the defaults."""
        return load_config(home_config_path())

    @staticmethod
    def config2output(config: dict[str, str], multiline: bool = False) -> str:
        """Printable configuration, with the Coda API key obfuscated."""
        if not config:
            return '{<empty>}'
        shown = dict(config, CODA_API_KEY=apikey2output(
                                            config.get('CODA_API_KEY', '')))
        return pformat(shown) if multiline else str(shown)

    def reconfig(self, config: dict[str, str]|None = None) -> None:
        """Start over from files and env, then apply ``config`` on top.

        Handy to switch the API key (or the server, eg. for a Coda proxy)
        on a live connection::

            connection.configurator.reconfig({'CODA_API_KEY': 'other-key'})

        Anything set earlier with ``update_config`` is forgotten.
        """
        self.config = self.get_config()
        self.config.update(config or {})
        self._post_reconfig()

    def update_config(self, config: dict[str, str]) -> None:
        """Change some keys of the current configuration, keeping the rest,
        eg. ``update_config({'CODA_SAFEMODE': 'Y'})`` to stop all writes."""
        self.config.update(config)
        self._post_reconfig()

    def _post_reconfig(self): # check and cleanup after config is changed
        if not self.config or not all(self.config.values()):
            msg = f'Missing config values.\n{self.config2output(self.config)}'
            raise CodaApiNotConfigured(msg)
        self.server = self.make_server()
        self.raise_option = (self.config['CODA_RAISE_ERROR'] == 'Y')
        self.safemode = (self.config['CODA_SAFEMODE'] == 'Y')
        self.ssl_verify = (self.config['CODA_SSL_VERIFY'] != 'N')

    def make_server(self) -> str:
        """Construct the "server" part of the API url, eg.
        ``https://coda.io/apis/v1``. Resource paths are appended to this."""
        cf = self.config
        root = cf['CODA_API_ROOT'].strip('/')
        return f'{cf["CODA_SERVER_PROTOCOL"]}{cf["CODA_API_SERVER"]}/{root}'
