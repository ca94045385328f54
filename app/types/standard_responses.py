from typing import Generic, Literal, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """
    Every response of the API is wrapped in an envelope.
    A failure envelope contains a message as `data`, see `app.types.exceptions.FailureHTTPException`.
    """

    status: Literal["success", "failure"] = "success"
    data: DataT
