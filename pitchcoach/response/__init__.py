from .errorresponse import ErrorResponse
from .intonationresponse import IntonationResponse
from .response import Response

__all__ = ["ErrorResponse", "IntonationResponse", "Response"]
