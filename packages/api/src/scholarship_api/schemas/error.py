# This project was developed with assistance from AI tools.
"""Problem Details body returned for every failed request.

``main.py`` builds one of these for engine errors, HTTP exceptions, request
validation failures and anything unhandled, so clients only ever parse a
single error shape.
"""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """RFC 7807 problem body plus the request id used in the server logs."""

    type: str = Field(default="about:blank", description="Problem type URI.")
    title: str = Field(description="HTTP reason phrase for ``status``.")
    status: int = Field(description="HTTP status code, repeated in the body.")
    detail: str = Field(
        default="",
        description="What went wrong, e.g. the illegal transition or the missing field.",
    )
    request_id: str = Field(
        default="",
        description="X-Request-ID of the failing call, generated when absent.",
    )
    instance: str = Field(default="", description="Request path that failed.")
