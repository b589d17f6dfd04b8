from datetime import datetime

from .response import Response


class ErrorResponse(Response):
    """
    A response describing why a recording could not be processed.

    This class contains:
    - status (str): Always "ERROR".
    - error_name (str): Short name of the failure.
    - error_details (str): Human readable details.
    - time (str): Local time the error was produced.
    """

    def __init__(self, error_name: str, error_details: str):
        super().__init__(
            status="ERROR",
            error_name=error_name,
            error_details=error_details,
            time=datetime.now().strftime("%d/%m/%Y, %H:%M:%S"))

    @classmethod
    def from_exception(cls, e: BaseException) -> "ErrorResponse":
        if len(e.args) > 0 and isinstance(e.args[0], str):
            details = e.args[0]
        else:
            details = str(e) or "No details."
        return cls(error_name=e.__class__.__name__, error_details=details)
