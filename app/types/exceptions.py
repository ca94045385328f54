from typing import Any

from fastapi import HTTPException


class ContentHTTPException(HTTPException):
    """
    An HTTPException whose `content` is returned as the json body of the response, instead of `{"detail": ...}`.

    The `content_exception_handler` of `app.app` builds the response.
    """

    def __init__(
        self,
        status_code: int,
        content: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=content, headers=headers)
        self.content = content


class FailureHTTPException(ContentHTTPException):
    """
    A ContentHTTPException whose content is a failure envelope: `{"status": "failure", "data": <message>}`
    """

    def __init__(
        self,
        status_code: int,
        message: str,
    ) -> None:
        content = {
            "status": "failure",
            "data": message,
        }

        super().__init__(status_code=status_code, content=content)


class InvalidInputError(FailureHTTPException):
    def __init__(self):
        super().__init__(status_code=400, message="invalid input")


class InvalidIdError(FailureHTTPException):
    def __init__(self):
        super().__init__(status_code=400, message="invalid id")


class LinkAlreadyTakenError(FailureHTTPException):
    def __init__(self):
        super().__init__(
            status_code=400,
            message="that link is already taken in the database",
        )


class RecommendationNotFoundError(FailureHTTPException):
    def __init__(self):
        super().__init__(status_code=404, message="no item with that id")


class InternalServerError(FailureHTTPException):
    def __init__(self):
        super().__init__(status_code=500, message="internal server error")


class InvalidAppStateTypeError(Exception):
    def __init__(self):
        super().__init__("The application state is not a dict nor a State object")


class DotenvMissingVariableError(Exception):
    def __init__(self, variable_name: str):
        super().__init__(f"{variable_name} should be configured in the dotenv")


class DotenvInvalidVariableError(Exception):
    pass
