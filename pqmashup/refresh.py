"""Drive Excel over COM to recompute and save Power Query results.

Requires Windows with Excel installed and pywin32. Every handle is acquired
through a context manager, so the workbook is closed and the application
quit on success and on failure alike.
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .errors import AutomationError, InputNotFoundError

# XlConnectionType
CONNECTION_OLEDB = 1
CONNECTION_ODBC = 2


def _default_dispatch(prog_id: str):
    try:
        import win32com.client  # type: ignore
    except ImportError as e:
        raise AutomationError("Excel automation requires Windows with pywin32 installed") from e
    return win32com.client.DispatchEx(prog_id)


@contextmanager
def _com_apartment():
    try:
        import pythoncom  # type: ignore
    except ImportError:
        yield
        return
    pythoncom.CoInitialize()
    try:
        yield
    finally:
        pythoncom.CoUninitialize()


@contextmanager
def excel_application(dispatch: Optional[Callable[[str], Any]] = None):
    """Yield a hidden Excel application; ``Quit`` always runs on exit."""
    with _com_apartment():
        try:
            excel = (dispatch or _default_dispatch)("Excel.Application")
        except AutomationError:
            raise
        except Exception as e:
            raise AutomationError(f"Could not start Excel: {e}") from e
        try:
            excel.Visible = False
            excel.DisplayAlerts = False
            yield excel
        finally:
            excel.Quit()


@contextmanager
def open_workbook(excel, path: str):
    workbook = excel.Workbooks.Open(path)
    try:
        yield workbook
    finally:
        workbook.Close(False)


def configure_synchronous_queries(workbook) -> int:
    """Turn off background refresh so ``RefreshAll`` blocks until done.

    Returns the number of connections changed. Connections that do not
    expose the property are left alone.
    """
    changed = 0
    for conn in workbook.Connections:
        try:
            if conn.Type == CONNECTION_OLEDB:
                conn.OLEDBConnection.BackgroundQuery = False
            elif conn.Type == CONNECTION_ODBC:
                conn.ODBCConnection.BackgroundQuery = False
            else:
                continue
        except Exception:
            continue
        changed += 1
    return changed


def wait_for_async_queries(excel) -> bool:
    """Block until asynchronous queries finish, where Excel supports it."""
    try:
        excel.CalculateUntilAsyncQueriesDone()
    except Exception as e:
        print(f"Warning: could not wait for asynchronous queries: {e}", file=sys.stderr)
        return False
    return True


def refresh_workbook(path: Union[str, Path], dispatch: Optional[Callable[[str], Any]] = None) -> int:
    """Refresh every query in the workbook at ``path`` and save it in place.

    Blocks until Excel returns. Returns the number of connections switched
    to synchronous refresh.
    """
    # COM needs an absolute native path
    full_path = os.path.abspath(str(path))
    if not os.path.isfile(full_path):
        raise InputNotFoundError(f"File '{full_path}' not found.")

    try:
        with excel_application(dispatch) as excel:
            print(f"Opening {full_path}...")
            with open_workbook(excel, full_path) as workbook:
                changed = configure_synchronous_queries(workbook)
                print("Refreshing all Power Query connections... (this may take a while)")
                workbook.RefreshAll()
                wait_for_async_queries(excel)
                workbook.Save()
    except AutomationError:
        raise
    except Exception as e:
        raise AutomationError(f"Excel automation failed: {e}") from e
    return changed
