# Crow: a command line tool for the Coda rows Api, powered by Codarows.

# exit codes for the cli:
# 0 -> ok
# 1 -> error on our side (Python/Requests/Codarows exception raised),
#      managed by Typer (ie, nicely formatted stacktrace)
# 2 -> usage errors, ie errors in cli invocation (Click/Typer domain)
# 3 -> we reserve this for errors on api call side (eg http 404)

from typing import List, Optional
from typing_extensions import Annotated

import typer
from rich.console import Console
from rich.table import Table

from codarows.config import Configurator, home_config_path, load_config
from codarows.connection import Connection
from codarows.rows import Rows

class _CliConfigurator(Configurator):
    """A custom configurator intended for the Crow cli.

    After loading the configuration from the usual place,
    this will search for a (optional) "crowconf.json" file
    located in the current directory, *before* looking for env vars.
    Note: this configurator also overrides the ``CODA_RAISE_ERROR``
    and ``CODA_SAFEMODE`` config keys, setting both to ``N``.
    """
    @staticmethod
    def get_config() -> dict[str, str]:
        config = load_config(home_config_path(), 'crowconf.json')
        # overrides
        config['CODA_RAISE_ERROR'] = 'N'
        config['CODA_SAFEMODE'] = 'N'
        return config

    def update_config(self, config: dict[str, str]):
        # since this is a one-off configurator for cli calls only,
        # updating config at runtime is not supported
        raise NotImplementedError

# the global Rows client (re-created at every cli call): inside a cli
# function, all api calls will go through this instance
rows_api = Rows(Connection(custom_configurator=_CliConfigurator()))
# the global Rich console where everything should be printed
cli_console = Console()

BADCALL = 3 # the exit code we reserve for bad call errors (eg http 404)
DONEMSG = '[green]Done.[/green]'
ERRMSG = '[bold red]Error![/bold red]'

# a few helper functions
# ----------------------------------------------------------------------
def _print_inspect(inspect) -> None:
    if inspect:
        cli_console.print(rows_api.connection.inspect())
        cli_console.rule()

def _exit_if_error(st, res, inspect) -> None:
    if not rows_api.connection.ok:
        _print_inspect(inspect)
        if st is None:
            cli_console.print(ERRMSG, res)
        else:
            cli_console.print(ERRMSG, 'Status:', st, res)
        raise typer.Exit(BADCALL)

def _print_output(content, res, verbose, inspect) -> None:
    _print_inspect(inspect)
    # we print different things, depending on verbose level
    if verbose == 0: # the nicely formatted cli output (text)
        cli_console.print(content)
    elif verbose == 1: # the response from Codarows (Python object)
        cli_console.print(res)
    else: # the original Coda api response (json)
        cli_console.print(rows_api.connection.response_as_json())

def _print_done_or_exit(st, res, verbose, inspect) -> None:
    _exit_if_error(st, res, inspect)
    _print_output(DONEMSG, res, verbose, inspect)

def _cells_validate(value):
    res = []
    for item in value or []:
        column, sep, val = item.partition('=')
        if not sep or not column:
            raise typer.BadParameter('Cell must be declared as "column=value"')
        res.append({'column': column, 'value': val})
    return res

def _make_options(parse: bool) -> dict:
    return {'disableParsing': not parse}


# a few recurrent Typer arguments and options
# ----------------------------------------------------------------------
_verbose_opt = typer.Option('--verbose', '-v', count=True,
                            help='Verbose level (0-2)')
_inspect_opt = typer.Option('--inspect', '-i',
                            help = 'Print inspect output after api call')
_doc_id_arg = typer.Argument(help='The document ID')
_table_id_arg = typer.Argument(help='The table ID or name')
_row_id_arg = typer.Argument(help='The row ID or name')
_cells_opt = typer.Option('--cell', '-c', callback=_cells_validate,
                          help='A cell, as "column=value" (repeat for more)')
_parse_opt = typer.Option('--parse/--no-parse',
                          help='Let Coda parse the values [default: no]')

app = typer.Typer(no_args_is_help=True,
                  help='Manage the rows of a table in a Coda doc')

@app.command('list')
def list_rows(doc_id: Annotated[str, _doc_id_arg],
              table_id: Annotated[str, _table_id_arg],
              limit: Annotated[int, typer.Option('--limit', '-l',
                               help='Max rows to retrieve')] = 0,
              query: Annotated[str, typer.Option('--query', '-q',
                               help='Filter, as "column:value"')] = '',
              page_token: Annotated[str, typer.Option('--page', '-p',
                               help='The next page token')] = '',
              verbose: Annotated[int, _verbose_opt] = 0,
              inspect: Annotated[bool, _inspect_opt] = False) -> None:
    """List the rows in a table"""
    options = {k: v for k, v in (('limit', limit), ('query', query),
                                 ('pageToken', page_token)) if v}
    res = rows_api.list_rows(doc_id, table_id, options or None)
    _exit_if_error(None, res, inspect)
    items = res.get('items', [])
    if items:
        content = Table('id', 'name', 'index', 'values')
        for row in items:
            values = '\n'.join(f'{k}: {v}'
                               for k, v in row.get('values', {}).items())
            content.add_row(row['id'], str(row.get('name', '')),
                            str(row.get('index', '')), values)
    else:
        content = 'No rows found.'
    _print_output(content, res, verbose, inspect)
    if verbose == 0 and res.get('nextPageToken'):
        cli_console.print('More rows with:', '--page', res['nextPageToken'])

@app.command('see')
def see_row(doc_id: Annotated[str, _doc_id_arg],
            table_id: Annotated[str, _table_id_arg],
            row_id: Annotated[str, _row_id_arg],
            verbose: Annotated[int, _verbose_opt] = 0,
            inspect: Annotated[bool, _inspect_opt] = False) -> None:
    """Describe a row"""
    st, res = rows_api.get_row(doc_id, table_id, row_id)
    _exit_if_error(st, res, inspect)
    content = Table('key', 'value')
    for key in ('id', 'name', 'index', 'createdAt', 'updatedAt'):
        content.add_row(key, str(res.get(key, '')))
    for k, v in res.get('values', {}).items():
        content.add_row(k, str(v))
    _print_output(content, res, verbose, inspect)

@app.command('delete')
def delete_row(doc_id: Annotated[str, _doc_id_arg],
               table_id: Annotated[str, _table_id_arg],
               row_id: Annotated[str, _row_id_arg],
               verbose: Annotated[int, _verbose_opt] = 0,
               inspect: Annotated[bool, _inspect_opt] = False) -> None:
    """Delete a row"""
    st, res = rows_api.delete_row(doc_id, table_id, row_id)
    _print_done_or_exit(st, res, verbose, inspect)

@app.command('add')
def add_row(doc_id: Annotated[str, _doc_id_arg],
            table_id: Annotated[str, _table_id_arg],
            cells: Annotated[List[str], _cells_opt],
            keys: Annotated[Optional[List[str]], typer.Option('--key', '-k',
                            help='A key column, for upserting')] = None,
            parse: Annotated[bool, _parse_opt] = False,
            verbose: Annotated[int, _verbose_opt] = 0,
            inspect: Annotated[bool, _inspect_opt] = False) -> None:
    """Insert a row, or upsert it if key columns are given.

    Repeat CELL and KEY for more columns, eg:

    % crow add AbCDeFGH Tasks -c Name=foo -c Status=done -k Name"""
    rows = [{'cells': cells}]
    st, res = rows_api.insert_or_upsert_rows(doc_id, table_id, rows, keys,
                                             _make_options(parse))
    _exit_if_error(st, res, inspect)
    if verbose == 0:
        _print_inspect(inspect)
        ids = ', '.join(res.get('addedRowIds', [])) or '-'
        cli_console.print(DONEMSG, 'Added:', ids)
    else:
        _print_output(DONEMSG, res, verbose, inspect)

@app.command('update')
def update_row(doc_id: Annotated[str, _doc_id_arg],
               table_id: Annotated[str, _table_id_arg],
               row_id: Annotated[str, _row_id_arg],
               cells: Annotated[List[str], _cells_opt],
               parse: Annotated[bool, _parse_opt] = False,
               verbose: Annotated[int, _verbose_opt] = 0,
               inspect: Annotated[bool, _inspect_opt] = False) -> None:
    """Update the cells of a row"""
    st, res = rows_api.update_row(doc_id, table_id, row_id,
                                  {'cells': cells}, _make_options(parse))
    _print_done_or_exit(st, res, verbose, inspect)


if __name__ == '__main__':
    app()
